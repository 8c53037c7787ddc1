"""
annotrack - Genomic annotation track I/O

Reads and writes interval tracks (BED, bedGraph) and queries reference
sequence, gene model, identifier, ontology and pathway services.
"""

__version__ = "0.1.0"

from annotrack.models.enums import Genome, Strand, TrackFormat, MissingFieldPolicy, ErrorMode
from annotrack.models.intervals import GenomicInterval, IntervalCollection
from annotrack.core.errors import (
    AnnotrackError,
    ParseError,
    ValidationError,
    InvalidRecordError,
    TrackIOError,
    NotFoundError,
    TagMismatchError,
    ExternalServiceError,
)
from annotrack.core.genome_tags import check_genome_compatibility, combine, TagDiagnostic, CombineResult
from annotrack.io import read_intervals, write_intervals

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
    # Errors
    "AnnotrackError",
    "ParseError",
    "ValidationError",
    "InvalidRecordError",
    "TrackIOError",
    "NotFoundError",
    "TagMismatchError",
    "ExternalServiceError",
    # Genome tags
    "check_genome_compatibility",
    "combine",
    "TagDiagnostic",
    "CombineResult",
    # I/O
    "read_intervals",
    "write_intervals",
]
