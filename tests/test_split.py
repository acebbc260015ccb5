import io
from itertools import islice
from pathlib import Path

import pytest

from oddkit.split import (
    SplitError,
    main,
    split_bytes,
    split_lines,
    suffix_names,
)


def _contents(names):
    return [Path(name).read_bytes() for name in names]


def test_suffix_names_default_prefix():
    names = list(islice(suffix_names("", 2), 3))
    assert names == ["xaa", "xab", "xac"]


def test_suffix_names_with_prefix():
    names = list(islice(suffix_names("out", 2), 2))
    assert names == ["outaa", "outab"]


def test_suffix_names_exhaust():
    gen = suffix_names("p", 1)
    names = list(islice(gen, 26))
    assert names[0] == "pa"
    assert names[-1] == "pz"
    assert len(set(names)) == 26
    with pytest.raises(SplitError):
        next(gen)


def test_suffix_names_empty_prefix_counts_x():
    names = list(islice(suffix_names("", 1), 27))
    assert names[25] == "xz"
    assert names[26] == "ya"


def test_split_bytes_chunks(tmp_path):
    data = b"abcdefghij"
    created = split_bytes(io.BytesIO(data), 4, suffix_names(str(tmp_path / "o"), 2))
    chunks = _contents(created)
    assert b"".join(chunks) == data
    assert [len(c) for c in chunks] == [4, 4, 2]


def test_split_bytes_exact_multiple_makes_no_empty_file(tmp_path):
    data = b"12345678"
    created = split_bytes(io.BytesIO(data), 4, suffix_names(str(tmp_path / "o"), 2))
    assert _contents(created) == [b"1234", b"5678"]


def test_split_bytes_empty_input(tmp_path):
    created = split_bytes(io.BytesIO(b""), 4, suffix_names(str(tmp_path / "o"), 2))
    assert created == []


def test_split_lines_by_count(tmp_path):
    data = b"1\n2\n3\n4\n5\n"
    created = split_lines(io.BytesIO(data), 2, suffix_names(str(tmp_path / "o"), 2))
    assert _contents(created) == [b"1\n2\n", b"3\n4\n", b"5\n"]
    assert [Path(n).name for n in created] == ["oaa", "oab", "oac"]


def test_split_lines_pattern(tmp_path):
    data = b"#a\nx\n#b\ny\n"
    created = split_lines(io.BytesIO(data), 1000, suffix_names(str(tmp_path / "o"), 2),
                          pattern="^#")
    assert _contents(created) == [b"#a\nx\n", b"#b\ny\n"]


def test_split_lines_pattern_first_line_not_matching(tmp_path):
    data = b"x\n#a\n"
    created = split_lines(io.BytesIO(data), 1000, suffix_names(str(tmp_path / "o"), 2),
                          pattern="^#")
    assert _contents(created) == [b"x\n", b"#a\n"]


def test_split_lines_count_pattern(tmp_path):
    data = b"k1\nz\nk2\nz\nk3\n"
    created = split_lines(io.BytesIO(data), 2, suffix_names(str(tmp_path / "o"), 2),
                          count_pattern="^k")
    chunks = _contents(created)
    assert b"".join(chunks) == data
    assert chunks == [b"k1\nz\nk2\n", b"z\nk3\n"]


def test_split_lines_unterminated_line_not_counted(tmp_path):
    data = b"a\nb"
    created = split_lines(io.BytesIO(data), 1, suffix_names(str(tmp_path / "o"), 2))
    assert _contents(created) == [b"a\nb"]


def test_split_lines_too_many_files(tmp_path):
    data = b"".join(b"%d\n" % i for i in range(27))
    with pytest.raises(SplitError):
        split_lines(io.BytesIO(data), 1, suffix_names(str(tmp_path / "p"), 1))
    assert len(list(tmp_path.iterdir())) == 26


def test_main_line_count(tmp_path):
    infile = tmp_path / "in.txt"
    infile.write_bytes(b"a\nb\nc\n")
    prefix = str(tmp_path / "part")
    assert main(["-l", "2", str(infile), prefix]) == 0
    assert (tmp_path / "partaa").read_bytes() == b"a\nb\n"
    assert (tmp_path / "partab").read_bytes() == b"c\n"


def test_main_historic_digit_option(tmp_path):
    infile = tmp_path / "in.txt"
    infile.write_bytes(b"a\nb\nc\n")
    prefix = str(tmp_path / "part")
    assert main(["-1", str(infile), prefix]) == 0
    assert (tmp_path / "partac").read_bytes() == b"c\n"


def test_main_bytes_with_k_suffix(tmp_path):
    infile = tmp_path / "in.bin"
    data = bytes(range(256)) * 5
    infile.write_bytes(data)
    prefix = str(tmp_path / "b")
    assert main(["-b", "1k", str(infile), prefix]) == 0
    first = (tmp_path / "baa").read_bytes()
    second = (tmp_path / "bab").read_bytes()
    assert len(first) == 1024
    assert first + second == data


def test_main_default_prefix(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    infile = tmp_path / "in.txt"
    infile.write_bytes(b"hello\n")
    assert main([str(infile)]) == 0
    assert (tmp_path / "xaa").read_bytes() == b"hello\n"


def test_main_bad_byte_count(tmp_path):
    infile = tmp_path / "in.txt"
    infile.write_bytes(b"x\n")
    assert main(["-b", "0", str(infile)]) == 64


def test_main_pattern_with_line_count_is_usage_error(tmp_path):
    infile = tmp_path / "in.txt"
    infile.write_bytes(b"x\n")
    assert main(["-p", "x", "-l", "2", str(infile)]) == 64


def test_main_bad_suffix_length(tmp_path):
    infile = tmp_path / "in.txt"
    infile.write_bytes(b"x\n")
    assert main(["-a", "0", str(infile)]) == 64


def test_main_missing_input(tmp_path):
    assert main([str(tmp_path / "missing.txt")]) == 66


def test_main_too_many_operands(tmp_path):
    infile = tmp_path / "in.txt"
    infile.write_bytes(b"x\n")
    assert main([str(infile), "p", "extra"]) == 64