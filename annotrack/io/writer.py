"""
Record writer for line-oriented interval files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from annotrack.core.errors import TrackIOError, ValidationError
from annotrack.io.formats import NAME, SCORE, STRAND, format_score, get_layout, open_text
from annotrack.models.enums import MissingFieldPolicy, Strand, TrackFormat
from annotrack.models.intervals import GenomicInterval, IntervalCollection

logger = logging.getLogger(__name__)


class IntervalWriter:
    """
    Serializes an ``IntervalCollection`` to a tab-delimited file.

    Columns follow the format's canonical order. Optional columns absent on
    an interval are filled with the format placeholder, or rejected when the
    policy is ``MissingFieldPolicy.ERROR``. For formats without a fixed width,
    trailing optional columns that no interval has are left off entirely.
    """

    def __init__(
        self,
        fmt: Union[TrackFormat, str] = TrackFormat.BEDGRAPH,
        missing: Optional[Union[MissingFieldPolicy, str]] = None,
        track_line: Optional[bool] = None,
    ):
        if missing is None or track_line is None:
            from annotrack.config import get_config
            write_config = get_config().write
            if missing is None:
                missing = write_config.missing
            if track_line is None:
                track_line = write_config.track_line

        self.fmt = TrackFormat(fmt)
        self.layout = get_layout(self.fmt)
        self.missing = MissingFieldPolicy(missing)
        self.track_line = track_line

    def write(self, collection: IntervalCollection, path: Union[str, Path]) -> Path:
        """
        Write ``collection`` to ``path``, creating or overwriting it.

        Raises:
            ValidationError: If a column is missing under the ERROR policy
            TrackIOError: If the target cannot be written
        """
        path = Path(path)
        columns = self._columns_to_write(collection)
        lines = [
            self.format_record(interval, columns, index)
            for index, interval in enumerate(collection)
        ]
        if self.track_line:
            lines.insert(0, self._format_track_line(collection))

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open_text(path, "w") as handle:
                for line in lines:
                    handle.write(line + "\n")
        except OSError as e:
            raise TrackIOError(f"Cannot write interval file {path}: {e}", path=path) from e

        logger.info(f"Wrote {len(collection)} intervals to {path} ({self.fmt.value})")
        return path

    def format_record(
        self,
        interval: GenomicInterval,
        columns: Optional[Sequence[str]] = None,
        index: int = 0,
    ) -> str:
        """Render one interval as a tab-delimited line (no newline)."""
        if columns is None:
            columns = self.layout.optional_columns

        fields = [interval.chromosome, str(interval.start), str(interval.end)]
        for column in columns:
            value = self._column_value(interval, column)
            if value is None:
                if self.missing == MissingFieldPolicy.ERROR:
                    raise ValidationError(
                        f"Interval {index} ({interval.chromosome}:{interval.start}-{interval.end}) "
                        f"has no {column}, which the {self.fmt.value} format requires"
                    )
                value = self.layout.placeholders[column]
            fields.append(value)

        fields.extend(str(v) for v in interval.extra.values())
        return "\t".join(fields)

    def _columns_to_write(self, collection: IntervalCollection) -> List[str]:
        columns = list(self.layout.optional_columns)
        if self.layout.fixed_width:
            return columns

        # Drop trailing columns that are empty on every interval, unless an
        # interval has extras (extras are positional and need every slot)
        if any(interval.extra for interval in collection):
            return columns
        while columns and all(
            self._column_value(interval, columns[-1]) is None for interval in collection
        ):
            columns.pop()
        return columns

    @staticmethod
    def _column_value(interval: GenomicInterval, column: str) -> Optional[str]:
        if column == SCORE:
            return format_score(interval.score) if interval.score is not None else None
        if column == NAME:
            return interval.name
        if column == STRAND:
            return interval.strand.value if interval.strand != Strand.UNKNOWN else None
        raise KeyError(column)

    def _format_track_line(self, collection: IntervalCollection) -> str:
        attributes = dict(collection.track_line)
        if self.fmt == TrackFormat.BEDGRAPH:
            attributes.setdefault("type", "bedGraph")

        parts = ["track"]
        for key, value in attributes.items():
            if any(ch.isspace() for ch in value) or value == "":
                parts.append(f'{key}="{value}"')
            else:
                parts.append(f"{key}={value}")
        return " ".join(parts)


def write_intervals(
    collection: IntervalCollection,
    path: Union[str, Path],
    fmt: Union[TrackFormat, str] = TrackFormat.BEDGRAPH,
    *,
    missing: Optional[Union[MissingFieldPolicy, str]] = None,
    track_line: Optional[bool] = None,
) -> Path:
    """Write ``collection`` to ``path`` in ``fmt``; returns the path written."""
    return IntervalWriter(fmt, missing=missing, track_line=track_line).write(collection, path)
