"""Annotation service clients."""

from annotrack.services.base import (
    ReferenceSequenceSource,
    TranscriptSource,
    IdentifierMapper,
    OntologySource,
    PathwaySource,
)
from annotrack.services.reference import FastaReference
from annotrack.services.transcripts import TranscriptDatabase
from annotrack.services.identifiers import TableIdentifierMapper
from annotrack.services.ontology import OboOntology
from annotrack.services.pathways import KeggPathwayClient

__all__ = [
    "ReferenceSequenceSource",
    "TranscriptSource",
    "IdentifierMapper",
    "OntologySource",
    "PathwaySource",
    "FastaReference",
    "TranscriptDatabase",
    "TableIdentifierMapper",
    "OboOntology",
    "KeggPathwayClient",
]
