import os
import sys

import pytest

from oddkit import ptyrelay


@pytest.fixture
def pipes():
    in_r, in_w = os.pipe()
    out_r, out_w = os.pipe()
    yield in_r, in_w, out_r, out_w
    for fd in (in_r, in_w, out_r, out_w):
        try:
            os.close(fd)
        except OSError:
            pass


def _drain(fd):
    os.set_blocking(fd, False)
    chunks = []
    while True:
        try:
            data = os.read(fd, 4096)
        except BlockingIOError:
            break
        if not data:
            break
        chunks.append(data)
    return b"".join(chunks)


def test_output_is_relayed(pipes):
    in_r, in_w, out_r, out_w = pipes
    code = ptyrelay.relay([sys.executable, "-c", "print('hello relay')"], in_r, out_w)
    assert code == 0
    assert b"hello relay" in _drain(out_r)


def test_exit_code_is_returned(pipes):
    in_r, in_w, out_r, out_w = pipes
    code = ptyrelay.relay([sys.executable, "-c", "import sys; sys.exit(3)"], in_r, out_w)
    assert code == 3


def test_input_reaches_command(pipes):
    in_r, in_w, out_r, out_w = pipes
    os.write(in_w, b"abc\n")
    script = "import sys; print(sys.stdin.readline().strip().upper())"
    code = ptyrelay.relay([sys.executable, "-c", script], in_r, out_w)
    assert code == 0
    assert b"ABC" in _drain(out_r)


def test_missing_program_reports_error(pipes):
    in_r, in_w, out_r, out_w = pipes
    code = ptyrelay.relay(["/nonexistent/program"], in_r, out_w)
    assert code == 255
    assert b"could not execute /nonexistent/program" in _drain(out_r)


def test_empty_command_rejected():
    with pytest.raises(ValueError):
        ptyrelay.relay([], 0, 1)


def test_main_without_arguments_prints_usage(capsys):
    assert ptyrelay.main([]) == -1
    assert "usage: pty command" in capsys.readouterr().out