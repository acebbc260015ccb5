"""Split a file into pieces by bytes, by lines or at lines matching a pattern."""

from __future__ import annotations

import re
import sys
from typing import BinaryIO, Iterable, Iterator

DEFLINE = 1000
MAXBSIZE = 65535
MAXPATHLEN = 1024
NAME_MAX = 255

EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_IOERR = 74

USAGE = ("usage: split [-a suffix_length]\n"
         "             [-b byte_count[k|m] | -l line_count | -p pattern] "
         "[file [name]]")

_Pattern = "str | bytes | re.Pattern[bytes] | None"


class SplitError(Exception):
    """Splitting failed; status is the exit code the command reports."""

    def __init__(self, message: str, status: int = EX_DATAERR):
        super().__init__(message)
        self.status = status


class _UsageError(Exception):
    pass


def suffix_names(prefix: str, suffix_length: int = 2) -> Iterator[str]:
    """Yield output names: prefix + aa, ab, ... zz.

    An empty prefix gives x + suffix, and the x counts as part of the suffix.
    Raises SplitError when the names run out.
    """
    if suffix_length < 1:
        raise SplitError("suffix length must be at least 1", EX_USAGE)
    if prefix:
        base, suffix = prefix, ["a"] * suffix_length
    else:
        base, suffix = "", ["x"] + ["a"] * suffix_length
    while True:
        yield base + "".join(suffix)
        for pos in reversed(range(len(suffix))):
            if suffix[pos] != "z":
                suffix[pos] = chr(ord(suffix[pos]) + 1)
                break
            suffix[pos] = "a"
        else:
            raise SplitError("too many files")


def _next_name(names: Iterator[str]) -> str:
    try:
        return next(names)
    except StopIteration:
        raise SplitError("too many files") from None


def _open_output(name: str) -> BinaryIO:
    try:
        return open(name, "wb")
    except OSError as exc:
        raise SplitError(f"{name}: {exc.strerror}", EX_IOERR) from None


def _compile(pattern) -> re.Pattern[bytes] | None:
    if pattern is None or isinstance(pattern, re.Pattern):
        return pattern
    if isinstance(pattern, str):
        pattern = pattern.encode("utf-8", "surrogateescape")
    return re.compile(pattern)


def split_bytes(stream: BinaryIO, byte_count: int, names: Iterable[str]) -> list[str]:
    """Write stream into files of byte_count bytes each; return their names."""
    if byte_count <= 0:
        raise SplitError("illegal byte count", EX_USAGE)
    names = iter(names)
    created: list[str] = []
    out: BinaryIO | None = None
    remaining = byte_count
    try:
        while data := stream.read(min(MAXBSIZE, remaining)):
            if out is None:
                name = _next_name(names)
                out = _open_output(name)
                created.append(name)
            out.write(data)
            remaining -= len(data)
            if remaining == 0:
                out.close()
                out = None
                remaining = byte_count
    finally:
        if out is not None:
            out.close()
    return created


def split_lines(stream: BinaryIO, line_count: int = DEFLINE, names: Iterable[str] = (),
                pattern=None, count_pattern=None) -> list[str]:
    """Write stream into files by lines; return the names of the files.

    With pattern, a new file starts at each line that matches it and
    line_count is ignored. With count_pattern, only matching lines count
    towards line_count. Lines without a trailing newline are never counted.
    """
    split_at = _compile(pattern)
    counted = _compile(count_pattern)
    names = iter(names)
    created: list[str] = []
    out: BinaryIO | None = None

    def newfile() -> None:
        nonlocal out
        name = _next_name(names)
        if out is not None:
            out.close()
        out = _open_output(name)
        created.append(name)

    lcnt = 0
    try:
        while line := stream.readline(MAXBSIZE - 1):
            if line.endswith(b"\n"):
                body = line[:-1]
                if split_at is not None:
                    if split_at.search(body):
                        newfile()
                elif lcnt == line_count:
                    newfile()
                    lcnt = 1
                elif counted is None or counted.search(body):
                    lcnt += 1
            if out is None:
                newfile()
            out.write(line)
    finally:
        if out is not None:
            out.close()
    return created


def _strtol(text: str) -> tuple[int | None, str]:
    m = re.match(r"\s*([+-]?[0-9]+)", text)
    if not m:
        return None, text
    return int(m.group(1)), text[m.end():]


def _line_count(text: str) -> int:
    value, rest = _strtol(text)
    if value is None or value <= 0 or rest:
        raise SplitError(f"{text}: illegal line count", EX_USAGE)
    return value


def _suffix_length(text: str) -> int:
    value, rest = _strtol(text)
    if value is None or rest:
        raise SplitError(f"{text}: invalid", EX_USAGE)
    if value < 1:
        raise SplitError(f"{text}: too small", EX_USAGE)
    if value > NAME_MAX:
        raise SplitError(f"{text}: too large", EX_USAGE)
    return value


def _byte_count(text: str) -> int:
    value, rest = _strtol(text)
    if value is None or value <= 0 or rest not in ("", "k", "m"):
        raise SplitError(f"{text}: illegal byte count", EX_USAGE)
    scale = {"": 1, "k": 1024, "m": 1048576}[rest]
    if value > sys.maxsize // scale:
        raise SplitError(f"{text}: byte count too large", EX_USAGE)
    return value * scale


def _regexp(text: str) -> re.Pattern[bytes]:
    try:
        return _compile(text)
    except re.error:
        raise SplitError(f"{text}: illegal regexp", EX_USAGE) from None


def _run(argv: list[str]) -> int:
    numlines = bytecnt = 0
    sufflen = 2
    use_stdin = False
    pattern = count_pattern = None
    operands: list[str] = []
    args = iter(argv)
    for arg in args:
        if arg == "--":
            operands.extend(args)
            break
        if arg == "-":
            if use_stdin:
                raise _UsageError
            use_stdin = True
            continue
        if not arg.startswith("-"):
            operands.append(arg)
            operands.extend(args)
            break
        pos = 1
        while pos < len(arg):
            ch = arg[pos]
            pos += 1
            if ch.isdigit():
                if numlines == 0:
                    numlines = _line_count(arg[1:])
                    break
                continue
            if ch not in "ablLp":
                raise _UsageError
            value = arg[pos:]
            if not value:
                value = next(args, None)
                if value is None:
                    raise _UsageError
            pos = len(arg)
            if ch == "a":
                sufflen = _suffix_length(value)
            elif ch == "b":
                bytecnt = _byte_count(value)
            elif ch == "l":
                if numlines != 0:
                    raise _UsageError
                numlines = _line_count(value)
            elif ch == "L":
                count_pattern = _regexp(value)
            else:
                pattern = _regexp(value)

    if len(operands) > (1 if use_stdin else 2):
        raise _UsageError
    infile = None if use_stdin or not operands else operands.pop(0)
    prefix = operands[0] if operands else ""
    if len(prefix) + sufflen >= MAXPATHLEN:
        raise SplitError("suffix is too long", EX_USAGE)
    if pattern is not None and (numlines or bytecnt):
        raise _UsageError
    if numlines == 0:
        numlines = DEFLINE
    elif bytecnt:
        raise _UsageError

    if infile is None:
        stream = sys.stdin.buffer
        opened = None
    else:
        try:
            stream = opened = open(infile, "rb")
        except OSError as exc:
            raise SplitError(f"{infile}: {exc.strerror}", EX_NOINPUT) from None
    names = suffix_names(prefix, sufflen)
    try:
        if bytecnt:
            split_bytes(stream, bytecnt, names)
        else:
            split_lines(stream, numlines, names, pattern, count_pattern)
    except OSError as exc:
        raise SplitError(f"read: {exc.strerror}", EX_IOERR) from None
    finally:
        if opened is not None:
            opened.close()
    return 0


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        return _run(argv)
    except _UsageError:
        print(USAGE, file=sys.stderr)
        return EX_USAGE
    except SplitError as exc:
        print(f"split: {exc}", file=sys.stderr)
        return exc.status


if __name__ == "__main__":
    sys.exit(main())