"""Models package."""

from annotrack.models.enums import (
    Genome,
    Strand,
    TrackFormat,
    MissingFieldPolicy,
    ErrorMode,
)
from annotrack.models.intervals import (
    GenomicInterval,
    IntervalCollection,
)
from annotrack.models.data_classes import (
    Exon,
    Transcript,
    GeneInfo,
    OntologyTerm,
    PathwayGene,
    Pathway,
)

__all__ = [
    # Enums
    "Genome",
    "Strand",
    "TrackFormat",
    "MissingFieldPolicy",
    "ErrorMode",
    # Interval model
    "GenomicInterval",
    "IntervalCollection",
    # Service records
    "Exon",
    "Transcript",
    "GeneInfo",
    "OntologyTerm",
    "PathwayGene",
    "Pathway",
]
