"""
In-memory interval model.

``GenomicInterval`` is a single immutable record; ``IntervalCollection`` is an
ordered, immutable run of records that carries the genome tag of the
assembly its coordinates were measured against.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple, Union

from annotrack.core.errors import ParseError, ValidationError
from annotrack.models.enums import Genome, Strand


@dataclass(frozen=True)
class GenomicInterval:
    """
    A genomic interval with optional score, name, strand and extra columns.

    Coordinates are kept exactly as the source format states them; BED-family
    files are 0-based half-open, so ``start == end`` is a legal empty interval.
    """
    chromosome: str
    start: int
    end: int
    strand: Strand = Strand.UNKNOWN
    score: Optional[float] = None
    name: Optional[str] = None
    extra: Mapping[str, str] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        if not isinstance(self.chromosome, str) or not self.chromosome.strip():
            raise ValidationError("Chromosome identifier must be a non-empty string")
        if self.start > self.end:
            raise ValidationError(
                f"Start position ({self.start}) is greater than "
                f"end position ({self.end}) on {self.chromosome}"
            )
        if not isinstance(self.strand, Strand):
            try:
                object.__setattr__(self, "strand", Strand.parse(self.strand))
            except ValueError:
                raise ValidationError(f"Invalid strand: {self.strand!r}")
        # Read-only copy; the caller's dict stays theirs.
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra)))

    @property
    def length(self) -> int:
        return self.end - self.start

    def overlaps(self, other: "GenomicInterval") -> bool:
        """Check if this interval overlaps another (half-open)."""
        if self.chromosome != other.chromosome:
            return False
        return self.start < other.end and other.start < self.end

    def to_dict(self) -> Dict[str, Any]:
        """Flat dictionary; optional fields only when present."""
        d: Dict[str, Any] = {
            "chromosome": self.chromosome,
            "start": self.start,
            "end": self.end,
        }
        if self.strand != Strand.UNKNOWN:
            d["strand"] = self.strand.value
        if self.score is not None:
            d["score"] = self.score
        if self.name is not None:
            d["name"] = self.name
        d.update(self.extra)
        return d


class IntervalCollection:
    """
    Ordered collection of ``GenomicInterval`` records.

    The records are fixed at construction. The genome tag is the only thing
    that may change afterwards, and only through ``set_genome``.
    """

    def __init__(
        self,
        intervals: Iterable[GenomicInterval] = (),
        genome: Optional[str] = None,
        track_line: Optional[Mapping[str, str]] = None,
        skipped: Iterable[ParseError] = (),
    ):
        self._intervals: Tuple[GenomicInterval, ...] = tuple(intervals)
        for item in self._intervals:
            if not isinstance(item, GenomicInterval):
                raise TypeError(f"Expected GenomicInterval, got {type(item).__name__}")
        self._genome: Optional[str] = None
        self._track_line = MappingProxyType(dict(track_line or {}))
        self._skipped: Tuple[ParseError, ...] = tuple(skipped)
        self.set_genome(genome)

    # ------------------------------------------------------------------
    # Genome tag
    # ------------------------------------------------------------------

    @property
    def genome(self) -> Optional[str]:
        """Reference assembly tag, or None when unset."""
        return self._genome

    @genome.setter
    def genome(self, value: Optional[str]) -> None:
        self.set_genome(value)

    def set_genome(self, genome: Optional[Union[str, Genome]]) -> "IntervalCollection":
        """
        Set, replace or clear (``None``) the genome tag.

        Known assembly aliases are stored under their canonical name.
        Returns the collection so calls can be chained.
        """
        if genome is None:
            self._genome = None
            return self
        if isinstance(genome, Genome):
            self._genome = genome.value
            return self
        if not isinstance(genome, str) or not genome.strip():
            raise ValidationError("Genome tag must be a non-empty string or None")
        self._genome = Genome.canonical_tag(genome)
        return self

    # ------------------------------------------------------------------
    # Read-only metadata
    # ------------------------------------------------------------------

    @property
    def track_line(self) -> Mapping[str, str]:
        """Attributes of the UCSC ``track`` header line, if the source had one."""
        return self._track_line

    @property
    def skipped(self) -> Tuple[ParseError, ...]:
        """Errors for lines dropped when parsing in skip mode."""
        return self._skipped

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._intervals)

    def __iter__(self) -> Iterator[GenomicInterval]:
        return iter(self._intervals)

    def __getitem__(self, index: Union[int, slice]):
        if isinstance(index, slice):
            return IntervalCollection(self._intervals[index], genome=self._genome)
        return self._intervals[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntervalCollection):
            return NotImplemented
        return self._intervals == other._intervals and self._genome == other._genome

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"IntervalCollection(intervals={len(self._intervals)}, "
            f"genome={self._genome!r})"
        )

    @property
    def intervals(self) -> Tuple[GenomicInterval, ...]:
        return self._intervals

    def chromosomes(self) -> List[str]:
        """Chromosome names in order of first appearance."""
        seen: Dict[str, None] = {}
        for interval in self._intervals:
            seen.setdefault(interval.chromosome, None)
        return list(seen)

    def subset_chromosome(self, chromosome: str) -> "IntervalCollection":
        """New collection with only the intervals on ``chromosome``."""
        return IntervalCollection(
            (iv for iv in self._intervals if iv.chromosome == chromosome),
            genome=self._genome,
        )
