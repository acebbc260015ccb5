"""Wrap a file into fixed-size tape records with length markers."""

from __future__ import annotations

import struct
import sys
from typing import BinaryIO, Iterator

MAX_BLOCK = 20000


class TapeError(Exception):
    """Bad arguments or an I/O problem while writing the tape."""


def _count(value: int) -> bytes:
    return struct.pack("<I", value)


def tape_records(data: bytes, blocksize: int) -> Iterator[bytes]:
    """Yield size // blocksize + 1 records, each padded with zeros."""
    if blocksize <= 0 or blocksize % 512:
        raise TapeError("Block size must be a multiple of 512")
    if blocksize > MAX_BLOCK:
        raise TapeError("Block size too large")
    for j in range(len(data) // blocksize + 1):
        chunk = data[j * blocksize:(j + 1) * blocksize]
        yield chunk.ljust(blocksize, b"\0")


def write_tape(infile: BinaryIO, blocksize: int, outfile: BinaryIO) -> tuple[int, int]:
    """Write the tape image; return (input size, full records)."""
    data = infile.read()
    for record in tape_records(data, blocksize):
        outfile.write(_count(blocksize) + record + _count(blocksize))
    outfile.write(_count(0) + _count(0))
    return len(data), len(data) // blocksize


def _atoi(text: str) -> int:
    text = text.strip()
    sign = -1 if text.startswith("-") else 1
    digits = ""
    for ch in text.lstrip("+-"):
        if not ch.isdigit():
            break
        digits += ch
    return sign * int(digits) if digits else 0


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        if len(argv) < 3:
            raise TapeError("Usage: mktape input blocksize output")
        blocksize = _atoi(argv[1])
        if blocksize == 0 or blocksize % 512:
            raise TapeError("Block size must be a multiple of 512")
        try:
            outfile = open(argv[2], "wb")
        except OSError:
            raise TapeError("cannot open output file") from None
        with outfile:
            print(f"{argv[0]}: ", end="")
            try:
                infile = open(argv[0], "rb")
            except OSError:
                raise TapeError("cannot open input file") from None
            with infile:
                size = infile.seek(0, 2)
                infile.seek(0)
                print(f"{size} bytes = {size // blocksize} records "
                      f"(blocksize {blocksize} bytes)")
                write_tape(infile, blocksize, outfile)
    except TapeError as exc:
        print(f"**** Error: {exc} ****")
    return 0


if __name__ == "__main__":
    sys.exit(main())