"""Split input into numbered files by line numbers or regular expressions."""

from __future__ import annotations

import getopt
import os
import re
import sys
from collections import deque
from typing import BinaryIO, Callable, Sequence

PATH_MAX = 4096
MAX_SUFFIX = 18
USAGE = "usage: csplit [-ks] [-f prefix] [-n number] [-c number] file args ..."


class CsplitError(Exception):
    """A pattern or the input could not be processed."""


def _strtol(text: str) -> tuple[int, str]:
    m = re.match(r"\s*([+-]?[0-9]+)", text)
    if not m:
        return 0, text
    return int(m.group(1)), text[m.end():]


class _Sink:
    """An output destination that can give back its last lines."""

    def __init__(self, path: str | None, keep: int):
        self.path = path
        self.handle = open(path, "w+b") if path is not None else None
        self.tail: deque[bytes] = deque(maxlen=keep)
        self.size = 0

    def write(self, line: bytes) -> None:
        self.tail.append(line)
        self.size += len(line)
        if self.handle is not None:
            self.handle.write(line)

    def take_back(self, count: int) -> list[bytes]:
        count = min(count, len(self.tail))
        back = [self.tail.pop() for _ in range(count)][::-1]
        self.size -= sum(len(line) for line in back)
        if self.handle is not None:
            self.handle.flush()
            self.handle.seek(self.size)
            self.handle.truncate()
        return back

    def close(self) -> None:
        if self.handle is not None:
            self.handle.close()

    def __enter__(self) -> "_Sink":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class ContextSplitter:
    """Reads a binary stream and writes numbered pieces of it."""

    def __init__(self, source: BinaryIO, prefix: str = "xx", suffix_length: int = 2,
                 count: int = 1, silent: bool = False,
                 report: Callable[[int], None] | None = None):
        if suffix_length + len(prefix) >= PATH_MAX:
            raise CsplitError("name too long")
        if suffix_length > MAX_SUFFIX:
            raise CsplitError(f"{suffix_length}: suffix too long (limit {MAX_SUFFIX})")
        self.source = source
        self.prefix = prefix
        self.suffix_length = suffix_length
        self.count = count
        self.silent = silent
        self.report = report if report is not None else print
        self.lineno = 0
        self.nfiles = 0
        self.maxfiles = 10 ** suffix_length
        self._pending: deque[bytes] = deque()
        self._eof = False

    def _name(self, index: int) -> str:
        return f"{self.prefix}{index:0{self.suffix_length}d}"

    def _newfile(self, keep: int = 0) -> _Sink:
        name = self._name(self.nfiles)
        if len(name) >= PATH_MAX:
            raise CsplitError(f"{name}: File name too long")
        try:
            sink = _Sink(name, keep)
        except OSError as exc:
            raise CsplitError(f"{name}: {exc.strerror}") from None
        self.nfiles += 1
        return sink

    def _get_line(self) -> bytes | None:
        if self._pending:
            line = self._pending.popleft()
        else:
            line = self.source.readline()
            if not line:
                self._eof = True
                return None
        self.lineno += 1
        return line

    def _push_back(self, lines: list[bytes], count: int) -> None:
        self.lineno -= count
        self._pending.extendleft(reversed(lines))

    def _emit(self, size: int) -> None:
        if not self.silent:
            self.report(size)

    def run(self, args: Sequence[str]) -> None:
        """Create the files described by the pattern arguments."""
        args = list(args)
        pos = 0
        while self.nfiles < self.maxfiles - 1 and pos < len(args):
            expr = args[pos]
            pos += 1
            reps = 0
            if pos < len(args) and args[pos].startswith("{"):
                reps, rest = _strtol(args[pos][1:])
                if reps < 0 or not rest.startswith("}"):
                    raise CsplitError(f"{args[pos][1:]}: bad repetition count")
                pos += 1
            if expr[:1] in ("/", "%"):
                while True:
                    self.do_rexp(expr)
                    if reps == 0 or self.nfiles >= self.maxfiles - 1:
                        break
                    reps -= 1
            elif expr[:1].isdigit():
                self.do_lineno(expr, reps)
            else:
                raise CsplitError(f"{expr}: unrecognised pattern")

    def do_lineno(self, expr: str, reps: int = 0) -> None:
        """Split before line number expr, repeating reps more times."""
        target, rest = _strtol(expr)
        if target <= 0 or rest:
            raise CsplitError(f"{expr}: bad line number")
        last = target
        if last <= self.lineno:
            raise CsplitError(f"{expr}: can't go backwards")
        while self.nfiles < self.maxfiles - 1:
            with self._newfile() as sink:
                while self.lineno + 1 != last:
                    line = self._get_line()
                    if line is None:
                        raise CsplitError(f"{last}: out of range")
                    sink.write(line)
            self._emit(sink.size)
            if reps == 0:
                break
            reps -= 1
            last += target

    def do_rexp(self, expr: str) -> None:
        """Handle a /regexp/[offset] or %regexp%[offset] pattern."""
        delim = expr[0]
        end = expr.rfind(delim)
        if end <= 0 or expr[end - 1] == "\\":
            raise CsplitError(f"{expr}: missing trailing {delim}")
        pattern = expr[1:end]
        tail = expr[end + 1:]
        offset = 0
        if tail:
            offset, rest = _strtol(tail)
            if rest:
                raise CsplitError(f"{tail}: bad offset")
        try:
            regex = re.compile(pattern.encode("utf-8", "surrogateescape"))
        except re.error:
            raise CsplitError(f"{pattern}: bad regular expression") from None

        keep = -offset + 1 if offset <= 0 else 0
        sink = self._newfile(keep) if delim == "/" else _Sink(None, keep)
        with sink:
            first = True
            matches = 0
            line = None
            while (line := self._get_line()) is not None:
                sink.write(line)
                if not first and regex.search(line):
                    matches += 1
                if matches >= self.count:
                    break
                first = False
            if line is None:
                raise CsplitError(f"{pattern}: no match")
            if offset <= 0:
                self._push_back(sink.take_back(keep), keep)
            else:
                for _ in range(offset - 1):
                    line = self._get_line()
                    if line is None:
                        break
                    sink.write(line)
        if delim == "/":
            self._emit(sink.size)

    def finish(self) -> None:
        """Copy whatever input is left into one last file."""
        if not self._eof:
            with self._newfile() as sink:
                while (line := self._get_line()) is not None:
                    sink.write(line)
            self._emit(sink.size)
        self._pending.clear()

    def cleanup(self) -> None:
        """Remove every output file created so far."""
        for index in range(self.nfiles):
            try:
                os.unlink(self._name(index))
            except FileNotFoundError:
                pass


def _usage() -> int:
    print(USAGE, file=sys.stderr)
    return 1


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        opts, args = getopt.getopt(argv, "f:kn:sc:")
    except getopt.GetoptError:
        return _usage()
    prefix, suffix_length, count = "xx", 2, 1
    keep = silent = False
    try:
        for flag, value in opts:
            if flag == "-f":
                prefix = value
            elif flag == "-k":
                keep = True
            elif flag == "-s":
                silent = True
            elif flag == "-n":
                suffix_length, rest = _strtol(value)
                if suffix_length <= 0 or rest:
                    raise CsplitError(f"{value}: bad suffix length")
            elif flag == "-c":
                count, rest = _strtol(value)
                if count <= 0 or rest:
                    raise CsplitError(f"{value}: illegal line count")
        if suffix_length + len(prefix) >= PATH_MAX:
            raise CsplitError("name too long")
    except CsplitError as exc:
        print(f"csplit: {exc}", file=sys.stderr)
        return 1
    if not args:
        return _usage()
    infn, patterns = args[0], args[1:]
    if infn == "-":
        source = sys.stdin.buffer
        opened = None
    else:
        try:
            source = opened = open(infn, "rb")
        except OSError as exc:
            print(f"csplit: {infn}: {exc.strerror}", file=sys.stderr)
            return 1
    splitter = None
    try:
        splitter = ContextSplitter(source, prefix, suffix_length, count, silent)
        splitter.run(patterns)
        splitter.finish()
    except CsplitError as exc:
        print(f"csplit: {exc}", file=sys.stderr)
        if splitter is not None and not keep:
            splitter.cleanup()
        return 1
    except KeyboardInterrupt:
        sys.stderr.write("csplit: caught signal, cleaning up\n")
        if splitter is not None and not keep:
            splitter.cleanup()
        return 2
    finally:
        if opened is not None:
            opened.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())