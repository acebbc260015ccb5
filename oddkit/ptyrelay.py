"""Run a command on a new pseudo-terminal and relay bytes to and from it."""

from __future__ import annotations

import os
import pty
import select
import sys
from typing import Sequence

ERROR = -1
CHUNK = 1024

_READABLE = select.POLLIN | select.POLLPRI
_CLOSED = select.POLLERR | select.POLLHUP | select.POLLNVAL


def _write_all(fd: int, data: bytes) -> None:
    """Write data to fd, silently dropping what cannot be written."""
    while data:
        try:
            written = os.write(fd, data)
        except OSError:
            return
        if written <= 0:
            return
        data = data[written:]


def _exec_child(command: Sequence[str]) -> None:
    try:
        os.execv(command[0], list(command))
    except OSError:
        pass
    try:
        os.write(2, f"Error: could not execute {command[0]}\n".encode("utf-8", "replace"))
    finally:
        os._exit(ERROR & 0xFF)


def _pump(master_fd: int, stdin_fd: int, stdout_fd: int) -> None:
    poller = select.poll()
    poller.register(master_fd, _READABLE)
    poller.register(stdin_fd, _READABLE)
    while True:
        for fd, events in poller.poll():
            if fd == master_fd:
                if events & _READABLE:
                    try:
                        data = os.read(master_fd, CHUNK)
                    except OSError:
                        data = b""
                    if not data:
                        return
                    _write_all(stdout_fd, data)
                elif events & _CLOSED:
                    return
            elif fd == stdin_fd:
                if events & _READABLE:
                    try:
                        data = os.read(stdin_fd, CHUNK)
                    except OSError:
                        data = b""
                    if not data:
                        # End of input: stop listening to it, keep relaying output.
                        poller.unregister(stdin_fd)
                        continue
                    _write_all(master_fd, data)
                elif events & _CLOSED:
                    return


def relay(command: Sequence[str], stdin_fd: int = 0, stdout_fd: int = 1) -> int:
    """Run command (an absolute path and its arguments) on a new pty.

    Bytes read from stdin_fd go to the command's terminal, and bytes the
    command writes go to stdout_fd. Returns the command's exit code.
    """
    command = list(command)
    if not command:
        raise ValueError("no command given")
    pid, master_fd = pty.fork()
    if pid == 0:
        _exec_child(command)
    try:
        _pump(master_fd, stdin_fd, stdout_fd)
    finally:
        os.close(master_fd)
        _, status = os.waitpid(pid, 0)
    return os.waitstatus_to_exitcode(status)


def main(argv=None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    if not argv:
        print("usage: pty command")
        return ERROR
    sys.stdout.flush()
    try:
        return relay(argv, sys.stdin.fileno(), sys.stdout.fileno())
    except OSError:
        print("Could not fork with a new pty", file=sys.stderr)
        return ERROR


if __name__ == "__main__":
    sys.exit(main())