"""
Pydantic data classes for annotrack.

Records returned by the annotation service clients.
"""

from __future__ import annotations

from typing import Optional, Dict, List
from pydantic import BaseModel, Field, computed_field

from annotrack.models.enums import Strand


# =============================================================================
# Gene / transcript models
# =============================================================================

class Exon(BaseModel):
    """Exon annotation."""
    exon_number: int
    start: int
    end: int
    is_constitutive: bool = True

    @computed_field
    @property
    def length(self) -> int:
        return self.end - self.start


class Transcript(BaseModel):
    """Transcript annotation."""
    transcript_id: str
    gene_id: str
    chromosome: str
    start: int
    end: int
    strand: Strand
    exons: List[Exon] = Field(default_factory=list)
    cds_start: Optional[int] = None
    cds_end: Optional[int] = None
    biotype: str = "protein_coding"
    is_canonical: bool = False

    @computed_field
    @property
    def tss(self) -> int:
        """Transcription start site."""
        return self.end if self.strand == Strand.MINUS else self.start

    @computed_field
    @property
    def cds_length(self) -> int:
        """Length of coding sequence."""
        if self.cds_start is None or self.cds_end is None:
            return 0
        return self.cds_end - self.cds_start


class GeneInfo(BaseModel):
    """Gene annotation."""
    gene_id: str
    symbol: str
    chromosome: str
    start: int
    end: int
    strand: Strand
    biotype: str = "protein_coding"
    description: Optional[str] = None
    aliases: List[str] = Field(default_factory=list)
    transcripts: List[Transcript] = Field(default_factory=list)


# =============================================================================
# Ontology
# =============================================================================

class OntologyTerm(BaseModel):
    """A controlled-vocabulary term and its direct relationships."""
    term_id: str
    name: str
    namespace: Optional[str] = None
    definition: Optional[str] = None
    synonyms: List[str] = Field(default_factory=list)
    # relationship type ("is_a", "part_of") -> parent term ids
    parents: Dict[str, List[str]] = Field(default_factory=dict)
    is_obsolete: bool = False

    @computed_field
    @property
    def parent_ids(self) -> List[str]:
        """All direct parents regardless of relationship type."""
        seen: List[str] = []
        for ids in self.parents.values():
            for term_id in ids:
                if term_id not in seen:
                    seen.append(term_id)
        return seen


# =============================================================================
# Pathways
# =============================================================================

class PathwayGene(BaseModel):
    """A gene participating in a pathway."""
    gene_id: str
    symbol: Optional[str] = None
    description: Optional[str] = None


class Pathway(BaseModel):
    """A curated pathway and its member genes."""
    pathway_id: str
    name: str
    organism: Optional[str] = None
    genes: List[PathwayGene] = Field(default_factory=list)

    @computed_field
    @property
    def gene_ids(self) -> List[str]:
        return [g.gene_id for g in self.genes]
