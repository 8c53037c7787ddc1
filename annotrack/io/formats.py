"""
Column layouts of the supported interval formats.

Every format starts with chromosome, start and end; what follows is
positional and differs per format.
"""

from __future__ import annotations

import gzip
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Dict, Tuple, Union

from annotrack.models.enums import TrackFormat

SCORE = "score"
NAME = "name"
STRAND = "strand"


@dataclass(frozen=True)
class FormatLayout:
    """Optional columns of a format and the placeholders used when absent."""
    optional_columns: Tuple[str, ...]
    placeholders: Dict[str, str]
    # Write every optional column even when no interval has a value for it
    fixed_width: bool = False

    @property
    def n_columns(self) -> int:
        return 3 + len(self.optional_columns)


LAYOUTS: Dict[TrackFormat, FormatLayout] = {
    TrackFormat.INTERVAL: FormatLayout(
        optional_columns=(SCORE, NAME, STRAND),
        placeholders={SCORE: ".", NAME: ".", STRAND: "."},
    ),
    TrackFormat.BEDGRAPH: FormatLayout(
        optional_columns=(SCORE,),
        placeholders={SCORE: "."},
        fixed_width=True,
    ),
    TrackFormat.BED: FormatLayout(
        optional_columns=(NAME, SCORE, STRAND),
        placeholders={NAME: ".", SCORE: "0", STRAND: "."},
    ),
}


def get_layout(fmt: Union[TrackFormat, str]) -> FormatLayout:
    """Look up the layout for a format name or enum member."""
    return LAYOUTS[TrackFormat(fmt)]


def format_score(score: float) -> str:
    """Render a score so that values read from text are written back unchanged."""
    if float(score).is_integer():
        return str(int(score))
    return repr(float(score))


def open_text(path: Path, mode: str) -> IO[str]:
    """Open a text file, transparently handling ``.gz`` compression."""
    if path.suffix == ".gz":
        return gzip.open(path, mode + "t", encoding="utf-8", newline="")
    return open(path, mode, encoding="utf-8", newline="")
