import io
from pathlib import Path

from recordloader.infra.sources.line_source import (
    FileLineSource,
    StreamLineSource,
    TextLineSource,
    split_cells,
    split_lines,
)


def test_split_lines_handles_all_line_breaks():
    assert split_lines("a\nb\r\nc\rd") == ["a", "b", "c", "d"]


def test_split_lines_trailing_newline_adds_no_line():
    assert split_lines("a\nb\n") == ["a", "b"]
    assert split_lines("") == []
    assert split_lines("\n") == [""]


def test_split_cells_is_literal_and_keeps_empty_cells():
    assert split_cells("a.b.c", ".") == ["a", "b", "c"]
    assert split_cells("a,,b,", ",") == ["a", "", "b", ""]
    assert split_cells("a||b", "||") == ["a", "b"]


def test_file_source_drops_bom(tmp_path: Path):
    path = tmp_path / "data.csv"
    path.write_bytes("\ufeffid,name\n1,A\n".encode("utf-8"))

    source = FileLineSource(path)

    assert source.read_lines() == ["id,name", "1,A"]
    assert source.describe() == f"file:{path}"


def test_text_source_accepts_list_of_lines():
    source = TextLineSource(["id,name\n", "1,A\r\n"])

    assert source.read_lines() == ["id,name", "1,A"]


def test_stream_source_reads_without_closing():
    stream = io.StringIO("id\n1\n")

    source = StreamLineSource(stream, name="memory")

    assert source.read_lines() == ["id", "1"]
    assert source.describe() == "stream:memory"
    assert not stream.closed
