"""Interval file import/export."""

from annotrack.io.formats import FormatLayout, LAYOUTS, get_layout
from annotrack.io.parser import IntervalParser, read_intervals
from annotrack.io.writer import IntervalWriter, write_intervals

__all__ = [
    "FormatLayout",
    "LAYOUTS",
    "get_layout",
    "IntervalParser",
    "read_intervals",
    "IntervalWriter",
    "write_intervals",
]
