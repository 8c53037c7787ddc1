"""
Tests for reading interval files.
"""

import gzip
import pytest
from pathlib import Path

from annotrack.core.errors import (
    InvalidRecordError,
    NotFoundError,
    ParseError,
    TrackIOError,
    ValidationError,
)
from annotrack.io import IntervalParser, read_intervals
from annotrack.models.enums import ErrorMode, Strand, TrackFormat


def test_reads_bedgraph_in_order(bedgraph_file: Path) -> None:
    collection = read_intervals(bedgraph_file)

    assert len(collection) == 2
    assert collection.genome is None
    first, second = collection
    assert (first.chromosome, first.start, first.end, first.score) == ("chr17", 100, 200, 0.5)
    assert (second.chromosome, second.start, second.end, second.score) == ("chr17", 300, 400, 0.9)


def test_empty_file_gives_empty_collection(tmp_path: Path) -> None:
    path = tmp_path / "empty.bedgraph"
    path.write_text("")
    collection = read_intervals(path)
    assert len(collection) == 0
    assert collection.genome is None


def test_comments_and_headers_skipped(bed6_file: Path) -> None:
    collection = read_intervals(bed6_file, TrackFormat.BED)

    assert len(collection) == 3
    assert collection.track_line == {"name": "peaks", "description": "ChIP peaks"}


def test_bed_columns_mapped(bed6_file: Path) -> None:
    collection = read_intervals(bed6_file, TrackFormat.BED)

    peak1, peak2, peak3 = collection
    assert peak1.name == "peak1"
    assert peak1.score == 7.0
    assert peak1.strand == Strand.PLUS
    assert peak2.strand == Strand.MINUS
    assert peak3.strand == Strand.UNKNOWN
    assert peak3.extra == {"column_7": "extra_col"}


def test_interval_format_column_order(tmp_path: Path) -> None:
    path = tmp_path / "sites.txt"
    path.write_text("chr3\t1\t2\t4.25\tsiteA\t-\n")
    interval = read_intervals(path, TrackFormat.INTERVAL)[0]
    assert interval.score == 4.25
    assert interval.name == "siteA"
    assert interval.strand == Strand.MINUS


def test_whitespace_delimited_lines(tmp_path: Path) -> None:
    path = tmp_path / "spaces.bedgraph"
    path.write_text("chr1   10  20   1.5\n")
    interval = read_intervals(path)[0]
    assert (interval.start, interval.end, interval.score) == (10, 20, 1.5)


def test_placeholder_columns_read_as_absent(tmp_path: Path) -> None:
    path = tmp_path / "dots.bed"
    path.write_text("chr1\t0\t5\t.\t.\t.\n")
    interval = read_intervals(path, TrackFormat.BED)[0]
    assert interval.name is None
    assert interval.score is None
    assert interval.strand == Strand.UNKNOWN


def test_too_few_fields_reports_line_number(tmp_path: Path) -> None:
    path = tmp_path / "short.bedgraph"
    path.write_text("chr1\t0\t10\t1\nchr1\t100\n")

    with pytest.raises(ParseError) as exc_info:
        read_intervals(path)

    assert exc_info.value.line_number == 2
    assert "line 2" in str(exc_info.value)
    assert "3 fields" in str(exc_info.value)


def test_non_integer_coordinate(tmp_path: Path) -> None:
    path = tmp_path / "bad.bedgraph"
    path.write_text("chr1\tabc\t10\t1\n")
    with pytest.raises(ParseError, match="not an integer"):
        read_intervals(path)


def test_non_numeric_score(tmp_path: Path) -> None:
    path = tmp_path / "bad.bedgraph"
    path.write_text("chr1\t0\t10\thigh\n")
    with pytest.raises(ParseError, match="not numeric"):
        read_intervals(path)


def test_start_after_end_is_validation_error(tmp_path: Path) -> None:
    path = tmp_path / "reversed.bedgraph"
    path.write_text("chr1\t50\t10\t1\n")

    with pytest.raises(ValidationError) as exc_info:
        read_intervals(path)

    assert isinstance(exc_info.value, InvalidRecordError)
    assert isinstance(exc_info.value, ParseError)
    assert exc_info.value.line_number == 1


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError) as exc_info:
        read_intervals(tmp_path / "nope.bed")
    assert isinstance(exc_info.value, FileNotFoundError)


def test_directory_is_io_error(tmp_path: Path) -> None:
    with pytest.raises(TrackIOError):
        read_intervals(tmp_path)


def test_skip_mode_collects_errors(tmp_path: Path) -> None:
    path = tmp_path / "mixed.bedgraph"
    path.write_text(
        "chr1\t0\t10\t1\n"
        "chr1\t5\n"
        "chr1\t30\t20\t2\n"
        "chr2\t0\t10\t3\n"
    )

    collection = read_intervals(path, on_error=ErrorMode.SKIP)

    assert [iv.chromosome for iv in collection] == ["chr1", "chr2"]
    assert [e.line_number for e in collection.skipped] == [2, 3]


def test_skip_mode_from_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from annotrack.config import get_config

    monkeypatch.setenv("ANNOTRACK_PARSE__ON_ERROR", "skip")
    get_config.cache_clear()

    path = tmp_path / "mixed.bedgraph"
    path.write_text("oops\nchr1\t0\t10\t1\n")
    collection = read_intervals(path)
    assert len(collection) == 1
    assert len(collection.skipped) == 1


def test_unprefixed_environment_ignored(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from annotrack.config import get_config

    monkeypatch.setenv("ON_ERROR", "skip")
    monkeypatch.setenv("COMMENT_CHAR", ";")
    get_config.cache_clear()

    path = tmp_path / "mixed.bedgraph"
    path.write_text("# header\noops\nchr1\t0\t10\t1\n")
    with pytest.raises(ParseError) as exc_info:
        read_intervals(path)
    assert exc_info.value.line_number == 2


def test_skip_mode_reversed_record_keeps_order(tmp_path: Path) -> None:
    path = tmp_path / "reversed.bedgraph"
    path.write_text(
        "chr1\t0\t10\t1\n"
        "chr1\t10\t20\t2\n"
        "chr1\t90\t40\t3\n"
        "chr2\t5\t15\t4\n"
    )

    collection = read_intervals(path, on_error=ErrorMode.SKIP)

    assert [(iv.chromosome, iv.start, iv.score) for iv in collection] == [
        ("chr1", 0, 1.0),
        ("chr1", 10, 2.0),
        ("chr2", 5, 4.0),
    ]
    [error] = collection.skipped
    assert isinstance(error, InvalidRecordError)
    assert error.line_number == 3


def test_custom_comment_char(tmp_path: Path) -> None:
    path = tmp_path / "semi.bedgraph"
    path.write_text(";comment\nchr1\t0\t10\t1\n")
    assert len(read_intervals(path, comment_char=";")) == 1


def test_gzip_input(tmp_path: Path, bedgraph_text: str) -> None:
    path = tmp_path / "signal.bedgraph.gz"
    with gzip.open(path, "wt") as handle:
        handle.write(bedgraph_text)

    collection = read_intervals(path)
    assert len(collection) == 2


def test_crlf_line_endings(tmp_path: Path) -> None:
    path = tmp_path / "dos.bedgraph"
    path.write_bytes(b"chr1\t0\t10\t1\r\nchr1\t10\t20\t2\r\n")
    collection = read_intervals(path)
    assert [iv.score for iv in collection] == [1.0, 2.0]


class TestIntervalParser:
    """Tests for the parser object used directly."""

    def test_parse_lines_with_source(self) -> None:
        parser = IntervalParser(TrackFormat.BED, on_error=ErrorMode.RAISE, comment_char="#")
        with pytest.raises(ParseError) as exc_info:
            parser.parse_lines(["chr1\t0\t10\tn\t1\t?\n"], source=Path("x.bed"))
        assert exc_info.value.path == Path("x.bed")
        assert "strand" in exc_info.value.reason

    def test_browser_line_ignored(self) -> None:
        parser = IntervalParser(TrackFormat.BED, on_error="raise", comment_char="#")
        collection = parser.parse_lines(["browser position chr1:1-100\n", "chr1\t0\t10\n"])
        assert len(collection) == 1
        assert collection.track_line == {}

    def test_empty_comment_char_rejected(self) -> None:
        with pytest.raises(ValueError):
            IntervalParser(on_error="raise", comment_char="")
