import io

import pytest

from oddkit.csplit import ContextSplitter, CsplitError, main


def numbered(n):
    return b"".join(f"{i}\n".encode() for i in range(1, n + 1))


def make(tmp_path, data, **kwargs):
    sizes = []
    splitter = ContextSplitter(io.BytesIO(data), prefix=str(tmp_path / "xx"),
                               report=sizes.append, **kwargs)
    return splitter, sizes


def read(tmp_path, index):
    return (tmp_path / f"xx{index:02d}").read_bytes()


def test_split_at_line_number(tmp_path):
    splitter, sizes = make(tmp_path, numbered(10))
    splitter.run(["4"])
    splitter.finish()
    assert read(tmp_path, 0) == b"1\n2\n3\n"
    assert read(tmp_path, 1) == b"".join(f"{i}\n".encode() for i in range(4, 11))
    assert sizes == [len(read(tmp_path, 0)), len(read(tmp_path, 1))]


def test_pieces_reassemble_to_input(tmp_path):
    data = numbered(10)
    splitter, _ = make(tmp_path, data)
    splitter.run(["3", "{2}"])
    splitter.finish()
    assert splitter.nfiles == 4
    assert b"".join(read(tmp_path, i) for i in range(4)) == data
    assert read(tmp_path, 0) == b"1\n2\n"
    assert read(tmp_path, 1) == b"3\n4\n5\n"


def test_regexp_first_line_is_not_tested(tmp_path):
    splitter, _ = make(tmp_path, b"1\n2\n10\n11\n")
    splitter.run(["/1/"])
    splitter.finish()
    assert read(tmp_path, 0) == b"1\n2\n"
    assert read(tmp_path, 1) == b"10\n11\n"


def test_regexp_positive_offset(tmp_path):
    splitter, _ = make(tmp_path, numbered(5))
    splitter.run(["/^3/+1"])
    splitter.finish()
    assert read(tmp_path, 0) == b"1\n2\n3\n"
    assert read(tmp_path, 1) == b"4\n5\n"


def test_regexp_negative_offset(tmp_path):
    splitter, sizes = make(tmp_path, numbered(5))
    splitter.run(["/^3/-1"])
    splitter.finish()
    assert read(tmp_path, 0) == b"1\n"
    assert read(tmp_path, 1) == b"2\n3\n4\n5\n"
    assert sizes[0] == len(read(tmp_path, 0))


def test_percent_pattern_discards(tmp_path):
    splitter, sizes = make(tmp_path, numbered(5))
    splitter.run(["%^3%"])
    splitter.finish()
    assert splitter.nfiles == 1
    assert read(tmp_path, 0) == b"3\n4\n5\n"
    assert sizes == [len(b"3\n4\n5\n")]


def test_regexp_repetition(tmp_path):
    data = b"a\nb\na\nb\na\n"
    splitter, _ = make(tmp_path, data)
    splitter.run(["/a/", "{1}"])
    splitter.finish()
    assert read(tmp_path, 0) == b"a\nb\n"
    assert read(tmp_path, 1) == b"a\nb\n"
    assert read(tmp_path, 2) == b"a\n"


def test_match_count(tmp_path):
    splitter, _ = make(tmp_path, b"a\nb\na\nb\na\n", count=2)
    splitter.run(["/a/"])
    splitter.finish()
    assert read(tmp_path, 0) == b"a\nb\na\nb\n"
    assert read(tmp_path, 1) == b"a\n"


def test_silent_reports_nothing(tmp_path):
    splitter, sizes = make(tmp_path, numbered(5), silent=True)
    splitter.run(["2"])
    splitter.finish()
    assert sizes == []
    assert splitter.nfiles == 2


@pytest.mark.parametrize("args, message", [
    (["/zzz/"], "zzz: no match"),
    (["20"], "20: out of range"),
    (["3", "2"], "2: can't go backwards"),
    (["abc"], "abc: unrecognised pattern"),
    (["/abc"], "/abc: missing trailing /"),
    (["/a/x"], "x: bad offset"),
    (["/(/"], "(: bad regular expression"),
    (["2", "{x}"], "x}: bad repetition count"),
])
def test_errors(tmp_path, args, message):
    splitter, _ = make(tmp_path, numbered(5))
    with pytest.raises(CsplitError) as info:
        splitter.run(args)
    assert str(info.value) == message


def test_suffix_too_long(tmp_path):
    with pytest.raises(CsplitError):
        ContextSplitter(io.BytesIO(b""), prefix=str(tmp_path / "p"), suffix_length=19)


def test_cleanup_removes_files(tmp_path):
    splitter, _ = make(tmp_path, numbered(5))
    splitter.run(["2", "4"])
    assert (tmp_path / "xx01").exists()
    splitter.cleanup()
    assert list(tmp_path.iterdir()) == []


def test_main_writes_files_and_sizes(tmp_path, capsys):
    source = tmp_path / "input.txt"
    source.write_bytes(numbered(5))
    prefix = str(tmp_path / "part")
    assert main(["-f", prefix, str(source), "3"]) == 0
    first = (tmp_path / "part00").read_bytes()
    second = (tmp_path / "part01").read_bytes()
    assert first + second == numbered(5)
    assert capsys.readouterr().out.split() == [str(len(first)), str(len(second))]


def test_main_error_cleans_up(tmp_path, capsys):
    source = tmp_path / "input.txt"
    source.write_bytes(numbered(5))
    prefix = str(tmp_path / "part")
    assert main(["-f", prefix, str(source), "/zzz/"]) == 1
    assert not (tmp_path / "part00").exists()
    assert "no match" in capsys.readouterr().err


def test_main_keep_on_error(tmp_path):
    source = tmp_path / "input.txt"
    source.write_bytes(numbered(5))
    prefix = str(tmp_path / "part")
    assert main(["-k", "-f", prefix, str(source), "/zzz/"]) == 1
    assert (tmp_path / "part00").read_bytes() == numbered(5)


def test_main_suffix_length_option(tmp_path):
    source = tmp_path / "input.txt"
    source.write_bytes(numbered(4))
    prefix = str(tmp_path / "p")
    assert main(["-s", "-n", "3", "-f", prefix, str(source), "2"]) == 0
    assert (tmp_path / "p000").read_bytes() == b"1\n"
    assert (tmp_path / "p001").read_bytes() == b"2\n3\n4\n"


def test_main_usage(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().err