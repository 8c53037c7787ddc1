"""
Tests for writing interval files.
"""

import gzip
import pytest
from pathlib import Path

from annotrack.core.errors import TrackIOError, ValidationError
from annotrack.io import IntervalWriter, read_intervals, write_intervals
from annotrack.io.formats import format_score, get_layout
from annotrack.models.enums import MissingFieldPolicy, Strand, TrackFormat
from annotrack.models.intervals import GenomicInterval, IntervalCollection


def _triples(collection: IntervalCollection):
    return [(iv.chromosome, iv.start, iv.end) for iv in collection]


def test_bedgraph_rewrite_is_byte_identical(
    tmp_path: Path, bedgraph_file: Path, bedgraph_text: str
) -> None:
    collection = read_intervals(bedgraph_file, TrackFormat.BEDGRAPH)
    out = write_intervals(collection, tmp_path / "copy.bedgraph", TrackFormat.BEDGRAPH)

    assert out.read_text() == bedgraph_text


def test_bed_data_lines_rewrite_unchanged(tmp_path: Path, bed6_file: Path) -> None:
    collection = read_intervals(bed6_file, TrackFormat.BED)
    out = write_intervals(collection, tmp_path / "copy.bed", TrackFormat.BED)

    assert out.read_text().splitlines() == [
        "chr1\t10\t50\tpeak1\t7\t+",
        "chr1\t60\t90\tpeak2\t3\t-",
        "chr2\t5\t25\tpeak3\t12\t.\textra_col",
    ]


@pytest.mark.parametrize("fmt", list(TrackFormat))
def test_triples_survive_every_format(
    tmp_path: Path, plain_collection: IntervalCollection, fmt: TrackFormat
) -> None:
    out = write_intervals(plain_collection, tmp_path / f"out.{fmt.value}", fmt)
    back = read_intervals(out, fmt)

    assert _triples(back) == _triples(plain_collection)


def test_empty_optional_columns_dropped(tmp_path: Path, plain_collection: IntervalCollection) -> None:
    out = write_intervals(plain_collection, tmp_path / "plain.bed", TrackFormat.BED)
    assert out.read_text().splitlines()[0] == "chr1\t0\t100"


def test_bedgraph_always_has_score_column(tmp_path: Path, plain_collection: IntervalCollection) -> None:
    out = write_intervals(plain_collection, tmp_path / "plain.bedgraph", TrackFormat.BEDGRAPH)
    assert out.read_text().splitlines()[0] == "chr1\t0\t100\t."


def test_bed_score_placeholder_is_zero() -> None:
    writer = IntervalWriter(TrackFormat.BED, missing=MissingFieldPolicy.PLACEHOLDER, track_line=False)
    line = writer.format_record(GenomicInterval("chr1", 0, 10, strand=Strand.PLUS))
    assert line == "chr1\t0\t10\t.\t0\t+"


def test_inner_missing_column_gets_placeholder(tmp_path: Path) -> None:
    collection = IntervalCollection([GenomicInterval("chr1", 0, 10, score=5)])
    out = write_intervals(collection, tmp_path / "scored.bed", TrackFormat.BED)
    assert out.read_text() == "chr1\t0\t10\t.\t5\n"


def test_error_policy_rejects_missing_column(tmp_path: Path) -> None:
    collection = IntervalCollection([
        GenomicInterval("chr1", 0, 10, score=1.0),
        GenomicInterval("chr1", 10, 20),
    ])
    target = tmp_path / "strict.bedgraph"

    with pytest.raises(ValidationError, match="score"):
        write_intervals(collection, target, TrackFormat.BEDGRAPH, missing=MissingFieldPolicy.ERROR)


def test_missing_policy_from_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from annotrack.config import get_config

    monkeypatch.setenv("ANNOTRACK_WRITE__MISSING", "error")
    get_config.cache_clear()

    collection = IntervalCollection([GenomicInterval("chr1", 0, 10)])
    with pytest.raises(ValidationError):
        write_intervals(collection, tmp_path / "strict.bedgraph")


def test_unprefixed_environment_ignored(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from annotrack.config import get_config

    monkeypatch.setenv("MISSING", "error")
    monkeypatch.setenv("TRACK_LINE", "true")
    get_config.cache_clear()

    collection = IntervalCollection([GenomicInterval("chr1", 0, 10)])
    out = write_intervals(collection, tmp_path / "lenient.bedgraph")
    assert out.read_text() == "chr1\t0\t10\t.\n"


def test_empty_collection_writes_empty_file(tmp_path: Path) -> None:
    out = write_intervals(IntervalCollection(), tmp_path / "empty.bedgraph")

    assert out.exists()
    assert out.read_text() == ""
    assert len(read_intervals(out)) == 0


def test_empty_collection_with_track_line(tmp_path: Path) -> None:
    out = write_intervals(IntervalCollection(), tmp_path / "empty.bedgraph", track_line=True)

    assert out.read_text() == "track type=bedGraph\n"
    back = read_intervals(out)
    assert len(back) == 0
    assert back.track_line == {"type": "bedGraph"}


def test_scores_written_in_canonical_form(tmp_path: Path) -> None:
    source = tmp_path / "scores.bed"
    source.write_text(
        "chr1\t0\t10\ta\t1.0\t+\n"
        "chr1\t10\t20\tb\t2.50\t+\n"
        "chr1\t20\t30\tc\t.\t-\n"
    )

    collection = read_intervals(source, TrackFormat.BED)
    out = write_intervals(collection, tmp_path / "copy.bed", TrackFormat.BED)

    assert out.read_text() == (
        "chr1\t0\t10\ta\t1\t+\n"
        "chr1\t10\t20\tb\t2.5\t+\n"
        "chr1\t20\t30\tc\t0\t-\n"
    )


def test_track_line_written(tmp_path: Path, bedgraph_file: Path) -> None:
    collection = IntervalCollection(
        read_intervals(bedgraph_file),
        track_line={"name": "my signal"},
    )
    out = write_intervals(collection, tmp_path / "tracked.bedgraph", track_line=True)

    first = out.read_text().splitlines()[0]
    assert first == 'track name="my signal" type=bedGraph'
    assert read_intervals(out).track_line == {"name": "my signal", "type": "bedGraph"}


def test_gzip_output(tmp_path: Path, plain_collection: IntervalCollection) -> None:
    out = write_intervals(plain_collection, tmp_path / "plain.bed.gz", TrackFormat.BED)
    with gzip.open(out, "rt") as handle:
        assert handle.readline() == "chr1\t0\t100\n"


def test_creates_parent_directories(tmp_path: Path, plain_collection: IntervalCollection) -> None:
    out = write_intervals(plain_collection, tmp_path / "a" / "b" / "plain.bed", TrackFormat.BED)
    assert out.exists()


def test_unwritable_target(tmp_path: Path, plain_collection: IntervalCollection) -> None:
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("")

    with pytest.raises(TrackIOError):
        write_intervals(plain_collection, blocker / "plain.bed", TrackFormat.BED)


def test_genome_tag_not_written(tmp_path: Path, plain_collection: IntervalCollection) -> None:
    plain_collection.set_genome("GRCh38")
    out = write_intervals(plain_collection, tmp_path / "plain.bed", TrackFormat.BED)
    assert "GRCh38" not in out.read_text()
    assert read_intervals(out, TrackFormat.BED).genome is None


class TestFormatHelpers:
    """Tests for format layout helpers."""

    @pytest.mark.parametrize("score,expected", [
        (0.5, "0.5"),
        (7.0, "7"),
        (-3, "-3"),
        (1e-07, "1e-07"),
        (0.1 + 0.2, "0.30000000000000004"),
    ])
    def test_format_score(self, score: float, expected: str) -> None:
        assert format_score(score) == expected

    def test_layouts(self) -> None:
        assert get_layout("bed").optional_columns == ("name", "score", "strand")
        assert get_layout(TrackFormat.BEDGRAPH).fixed_width
        assert get_layout(TrackFormat.INTERVAL).n_columns == 6

    @pytest.mark.parametrize("name,expected", [
        ("peaks.bed", TrackFormat.BED),
        ("peaks.BED.gz", TrackFormat.BED),
        ("signal.bedGraph", TrackFormat.BEDGRAPH),
        ("signal.bg", TrackFormat.BEDGRAPH),
        ("sites.txt", TrackFormat.INTERVAL),
    ])
    def test_format_from_path(self, name: str, expected: TrackFormat) -> None:
        assert TrackFormat.from_path(name) == expected
