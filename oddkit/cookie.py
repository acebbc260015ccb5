"""Print a random fortune from a cookie file."""

from __future__ import annotations

import os
import random
import sys
from typing import BinaryIO, Mapping, Sequence

DEFAULT_BAKERY = "/usr/local/lib/cookie.file"
LOGICAL_BAKERY = "cookies"
MAXLINE = 256


class NoCookieError(Exception):
    """The file holds no cookie."""


def _try_open(path: str | None) -> BinaryIO | None:
    if path is None:
        return None
    try:
        return open(path, "rb")
    except OSError:
        return None


def open_cookie_file(names: Sequence[str], default: str = DEFAULT_BAKERY,
                     environ: Mapping[str, str] | None = None) -> BinaryIO | None:
    """Open the first usable cookie file, trying the last name first."""
    env = os.environ if environ is None else environ
    for name in reversed(names):
        stream = _try_open(name) or _try_open(env.get(name))
        if stream:
            return stream
    return _try_open(default) or _try_open(env.get(LOGICAL_BAKERY))


def _line(stream: BinaryIO) -> bytes:
    return stream.readline(MAXLINE - 1)


def pick_cookie(stream: BinaryIO, position: int) -> str:
    """Return the cookie that follows the line containing position."""
    stream.seek(position)
    _line(stream)
    wrapped = False
    while True:
        line = _line(stream)
        if not line:
            if wrapped:
                raise NoCookieError("There are no cookies (sigh)")
            stream.seek(0)
            wrapped = True
            continue
        if not line.startswith(b" "):
            break
    parts = [line]
    while (line := _line(stream)):
        if not line.startswith(b" "):
            break
        parts.append(line[1:])
    return b"".join(parts).decode("utf-8", "replace")


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    stream = open_cookie_file(argv)
    if stream is None:
        return 0
    with stream:
        length = stream.seek(0, 2)
        if length == 0:
            return 0
        try:
            sys.stdout.write(pick_cookie(stream, random.randrange(length)))
        except NoCookieError as exc:
            print(f"%COOKIE-E-NOCOOK, {exc}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())