"""
Core enumerations for annotrack.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Union


class Genome(str, Enum):
    """Well-known reference assemblies used as genome tags."""
    # Human
    HUMAN_GRCH38 = "GRCh38"
    HUMAN_GRCH37 = "GRCh37"
    # Mouse
    MOUSE_GRCM39 = "GRCm39"
    MOUSE_GRCM38 = "GRCm38"
    # Zebrafish
    ZEBRAFISH_GRCZ11 = "GRCz11"
    # Rat
    RAT_MRATBN7 = "mRatBN7.2"
    # Drosophila (fruit fly)
    DROSOPHILA_BDGP6 = "BDGP6"
    # C. elegans (worm)
    CELEGANS_WBCEL235 = "WBcel235"
    # Yeast
    YEAST_R64 = "R64"
    # Arabidopsis (plant)
    ARABIDOPSIS_TAIR10 = "TAIR10"

    @classmethod
    def from_string(cls, value: str) -> "Genome":
        """Parse genome from string, handling common UCSC aliases."""
        aliases = {
            "hg38": cls.HUMAN_GRCH38,
            "hg19": cls.HUMAN_GRCH37,
            "mm39": cls.MOUSE_GRCM39,
            "mm10": cls.MOUSE_GRCM38,
            "danrer11": cls.ZEBRAFISH_GRCZ11,
            "rn7": cls.RAT_MRATBN7,
            "dm6": cls.DROSOPHILA_BDGP6,
            "ce11": cls.CELEGANS_WBCEL235,
            "saccer3": cls.YEAST_R64,
            "tair10": cls.ARABIDOPSIS_TAIR10,
        }
        # Try direct match first
        for genome in cls:
            if genome.value.lower() == value.lower():
                return genome
        # Try aliases
        if value.lower() in aliases:
            return aliases[value.lower()]
        raise ValueError(f"Unknown genome: {value}")

    @classmethod
    def canonical_tag(cls, value: str) -> str:
        """
        Canonical spelling of a genome tag.

        Known builds and their UCSC aliases collapse to the assembly name
        (``hg38`` -> ``GRCh38``); anything else is returned stripped but
        otherwise untouched.
        """
        value = value.strip()
        try:
            return cls.from_string(value).value
        except ValueError:
            return value


class Strand(str, Enum):
    """DNA strand."""
    PLUS = "+"
    MINUS = "-"
    UNKNOWN = "."

    @classmethod
    def parse(cls, value: str) -> "Strand":
        """Parse a strand column; ``*`` is accepted as unknown."""
        if value == "*":
            return cls.UNKNOWN
        return cls(value)


class TrackFormat(str, Enum):
    """Supported line-oriented interval formats."""
    INTERVAL = "interval"   # chrom start end [score name strand ...]
    BEDGRAPH = "bedgraph"   # chrom start end score
    BED = "bed"             # chrom start end [name score strand ...]

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "TrackFormat":
        """Infer the format from a file extension (``.gz`` is ignored)."""
        suffixes = [s.lower() for s in Path(path).suffixes]
        if suffixes and suffixes[-1] == ".gz":
            suffixes = suffixes[:-1]
        suffix = suffixes[-1] if suffixes else ""
        if suffix == ".bed":
            return cls.BED
        if suffix in (".bedgraph", ".bg"):
            return cls.BEDGRAPH
        return cls.INTERVAL


class MissingFieldPolicy(str, Enum):
    """What the writer does when a column is absent on an interval."""
    PLACEHOLDER = "placeholder"  # write the format's placeholder value
    ERROR = "error"              # raise ValidationError


class ErrorMode(str, Enum):
    """How the parser reacts to a malformed line."""
    RAISE = "raise"  # abort the parse on the first bad line
    SKIP = "skip"    # skip the line and record the error on the collection
