"""
Record parser for line-oriented interval files.

Reads BED-like text (tab- or whitespace-delimited, one record per line) into
an ``IntervalCollection`` whose order matches the file.
"""

from __future__ import annotations

import logging
import shlex
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from annotrack.core.errors import (
    InvalidRecordError,
    NotFoundError,
    ParseError,
    TrackIOError,
    ValidationError,
)
from annotrack.io.formats import NAME, SCORE, STRAND, get_layout, open_text
from annotrack.models.enums import ErrorMode, Strand, TrackFormat
from annotrack.models.intervals import GenomicInterval, IntervalCollection

logger = logging.getLogger(__name__)

HEADER_KEYWORDS = ("track", "browser")


class IntervalParser:
    """
    Parser for BED-family interval files.

    Features:
    - Comment, blank, ``track`` and ``browser`` lines are skipped
    - Optional columns are mapped by the format's layout
    - Columns beyond the layout are kept as ``column_<n>`` extras
    - Fail-fast by default; ``ErrorMode.SKIP`` collects bad lines instead
    """

    def __init__(
        self,
        fmt: Union[TrackFormat, str] = TrackFormat.BEDGRAPH,
        on_error: Optional[Union[ErrorMode, str]] = None,
        comment_char: Optional[str] = None,
    ):
        if on_error is None or comment_char is None:
            from annotrack.config import get_config
            parse_config = get_config().parse
            if on_error is None:
                on_error = parse_config.on_error
            if comment_char is None:
                comment_char = parse_config.comment_char

        if not comment_char:
            raise ValueError("comment_char must be a non-empty string")

        self.fmt = TrackFormat(fmt)
        self.layout = get_layout(self.fmt)
        self.on_error = ErrorMode(on_error)
        self.comment_char = comment_char

    def parse(self, path: Union[str, Path]) -> IntervalCollection:
        """
        Parse an interval file.

        Args:
            path: File to read (``.gz`` is decompressed transparently)

        Returns:
            IntervalCollection in file order, genome tag unset

        Raises:
            NotFoundError: If the file does not exist
            TrackIOError: If the file exists but cannot be read as text
            ParseError: On the first malformed line (RAISE mode)
            InvalidRecordError: If a line has start > end (RAISE mode)
        """
        path = Path(path)
        if not path.exists():
            raise NotFoundError(f"Interval file not found: {path}", path=path)

        try:
            with open_text(path, "r") as handle:
                lines = handle.readlines()
        except OSError as e:
            raise TrackIOError(f"Cannot read interval file {path}: {e}", path=path) from e
        except UnicodeDecodeError as e:
            raise TrackIOError(f"Interval file {path} is not valid text: {e}", path=path) from e

        collection = self.parse_lines(lines, source=path)
        logger.info(
            f"Read {len(collection)} intervals from {path} ({self.fmt.value})"
        )
        return collection

    def parse_lines(
        self,
        lines: Iterable[str],
        source: Optional[Path] = None,
    ) -> IntervalCollection:
        """Parse already-read lines; ``source`` is only used in error messages."""
        intervals: List[GenomicInterval] = []
        skipped: List[ParseError] = []
        track_line: Dict[str, str] = {}

        for line_number, raw in enumerate(lines, start=1):
            line = raw.rstrip("\r\n")
            if not line.strip():
                continue
            if line.startswith(self.comment_char):
                continue

            keyword = line.split(None, 1)[0]
            if keyword in HEADER_KEYWORDS:
                if keyword == "track" and not intervals:
                    track_line = self._parse_track_line(line)
                continue

            try:
                intervals.append(self.parse_record(line, line_number, source))
            except ParseError as e:
                if self.on_error == ErrorMode.RAISE:
                    raise
                logger.warning(f"Skipping malformed line: {e}")
                skipped.append(e)

        return IntervalCollection(intervals, track_line=track_line, skipped=skipped)

    def parse_record(
        self,
        line: str,
        line_number: int,
        source: Optional[Path] = None,
    ) -> GenomicInterval:
        """Parse one data line into a ``GenomicInterval``."""
        fields = line.split("\t") if "\t" in line else line.split()

        if len(fields) < 3:
            raise ParseError(
                f"expected at least 3 fields (chromosome, start, end), found {len(fields)}",
                line_number=line_number,
                path=source,
            )

        chromosome = fields[0].strip()
        if not chromosome:
            raise ParseError("empty chromosome field", line_number=line_number, path=source)

        start = self._parse_int(fields[1], "start", line_number, source)
        end = self._parse_int(fields[2], "end", line_number, source)
        if start > end:
            raise InvalidRecordError(
                f"start ({start}) is greater than end ({end})",
                line_number=line_number,
                path=source,
            )

        values, extra = self._map_optional(fields[3:], line_number, source)

        try:
            return GenomicInterval(
                chromosome=chromosome,
                start=start,
                end=end,
                strand=values.get(STRAND, Strand.UNKNOWN),
                score=values.get(SCORE),
                name=values.get(NAME),
                extra=extra,
            )
        except ValidationError as e:
            raise InvalidRecordError(str(e), line_number=line_number, path=source) from e

    def _map_optional(
        self,
        fields: List[str],
        line_number: int,
        source: Optional[Path],
    ) -> Tuple[Dict[str, object], Dict[str, str]]:
        values: Dict[str, object] = {}
        extra: Dict[str, str] = {}
        columns = self.layout.optional_columns

        for offset, value in enumerate(fields):
            if offset >= len(columns):
                extra[f"column_{offset + 4}"] = value
                continue

            column = columns[offset]
            if value == "." or value == "":
                continue
            if column == SCORE:
                values[SCORE] = self._parse_float(value, line_number, source)
            elif column == STRAND:
                try:
                    values[STRAND] = Strand.parse(value)
                except ValueError:
                    raise ParseError(
                        f"invalid strand {value!r} (expected +, - or .)",
                        line_number=line_number,
                        path=source,
                    )
            else:
                values[column] = value

        return values, extra

    @staticmethod
    def _parse_int(value: str, label: str, line_number: int, source: Optional[Path]) -> int:
        try:
            return int(value)
        except ValueError:
            raise ParseError(
                f"{label} coordinate {value!r} is not an integer",
                line_number=line_number,
                path=source,
            )

    @staticmethod
    def _parse_float(value: str, line_number: int, source: Optional[Path]) -> float:
        try:
            return float(value)
        except ValueError:
            raise ParseError(
                f"score {value!r} is not numeric",
                line_number=line_number,
                path=source,
            )

    @staticmethod
    def _parse_track_line(line: str) -> Dict[str, str]:
        """Parse ``track key=value key="quoted value"`` into a dict."""
        attributes: Dict[str, str] = {}
        try:
            tokens = shlex.split(line)[1:]
        except ValueError:
            tokens = line.split()[1:]
        for token in tokens:
            if "=" in token:
                key, value = token.split("=", 1)
                attributes[key] = value
        return attributes


def read_intervals(
    path: Union[str, Path],
    fmt: Union[TrackFormat, str] = TrackFormat.BEDGRAPH,
    *,
    on_error: Optional[Union[ErrorMode, str]] = None,
    comment_char: Optional[str] = None,
) -> IntervalCollection:
    """Read an interval file into a fresh, untagged ``IntervalCollection``."""
    return IntervalParser(fmt, on_error=on_error, comment_char=comment_char).parse(path)
