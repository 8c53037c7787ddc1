"""
Narrow client interfaces for external annotation services.

Each collaborator exposes only the request/response calls annotrack needs,
so the rest of the package never depends on a particular backend.
Implementations raise ``ExternalServiceError`` for any backend failure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence

from annotrack.models.data_classes import GeneInfo, OntologyTerm, Pathway, Transcript
from annotrack.models.enums import Strand


class ReferenceSequenceSource(ABC):
    """Lookup by chromosome and range -> nucleotide sequence."""

    service_name: str = "reference"
    genome: Optional[str] = None

    @abstractmethod
    def chromosomes(self) -> List[str]:
        """Chromosome names available from the reference."""
        pass

    @abstractmethod
    def get_sequence(
        self,
        chromosome: str,
        start: int,
        end: int,
        strand: Strand = Strand.PLUS,
    ) -> str:
        """Sequence of ``chromosome[start:end]`` (0-based, half-open)."""
        pass


class TranscriptSource(ABC):
    """Lookup of gene and transcript models by identifier or by region."""

    service_name: str = "transcripts"

    @abstractmethod
    def get_gene(self, gene_id: str) -> GeneInfo:
        pass

    @abstractmethod
    def get_transcript(self, transcript_id: str) -> Transcript:
        pass

    @abstractmethod
    def genes_in_region(self, chromosome: str, start: int, end: int) -> List[GeneInfo]:
        pass

    @abstractmethod
    def transcripts_in_region(self, chromosome: str, start: int, end: int) -> List[Transcript]:
        pass


class IdentifierMapper(ABC):
    """Key type + key value -> mapped columns (AnnotationDbi-style select)."""

    service_name: str = "identifiers"

    @abstractmethod
    def keytypes(self) -> List[str]:
        pass

    @abstractmethod
    def columns(self) -> List[str]:
        pass

    @abstractmethod
    def select(
        self,
        keys: Sequence[str],
        columns: Sequence[str],
        keytype: str,
    ) -> List[Dict[str, Optional[List[str]]]]:
        """
        Map ``keys`` of ``keytype`` to the requested ``columns``.

        Returns one row per key, in key order. The key itself sits under
        ``keytype``; every other requested column maps to the list of values
        found (multi-valued columns keep all values), or None when the key is
        unknown.
        """
        pass


class OntologySource(ABC):
    """Term metadata and direct parent/child relationships."""

    service_name: str = "ontology"

    @abstractmethod
    def get_term(self, term_id: str) -> OntologyTerm:
        pass

    @abstractmethod
    def parents(self, term_id: str) -> List[OntologyTerm]:
        pass

    @abstractmethod
    def children(self, term_id: str) -> List[OntologyTerm]:
        pass


class PathwaySource(ABC):
    """Pathway id -> gene list and rendered diagram."""

    service_name: str = "pathways"

    @abstractmethod
    def get_pathway(self, pathway_id: str) -> Pathway:
        pass

    @abstractmethod
    def get_pathway_image(self, pathway_id: str) -> bytes:
        """PNG bytes of the pathway diagram."""
        pass
