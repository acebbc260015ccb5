"""Print the lines of standard input that match an extended regular expression."""

from __future__ import annotations

import re
import sys
from typing import Iterable, Iterator, TextIO

MAXLINE = 8192


def match(string: str, pattern: str) -> bool:
    """Return True if string matches pattern; a bad pattern never matches."""
    try:
        regex = re.compile(pattern)
    except re.error:
        return False
    return regex.search(string) is not None


def filter_lines(lines: Iterable[str], pattern: str) -> Iterator[str]:
    """Return an iterator over the lines that match pattern.

    Raises re.error at once if the pattern does not compile.
    """
    regex = re.compile(pattern)
    return (line for line in lines if regex.search(line))


def _read_lines(stream: TextIO) -> Iterator[str]:
    while line := stream.readline(MAXLINE - 1):
        yield line


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    if len(argv) != 1:
        return 0
    try:
        selected = filter_lines(_read_lines(sys.stdin), argv[0])
    except re.error:
        return 0
    for line in selected:
        sys.stdout.write(line)
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())