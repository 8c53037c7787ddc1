"""
Reference sequence access with lazy loading.

Uses pyfaidx for memory-efficient access to large FASTA files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from pyfaidx import Fasta, FetchError

from annotrack.core.errors import ExternalServiceError
from annotrack.core.genome_tags import check_genome_compatibility
from annotrack.models.enums import Genome, Strand
from annotrack.models.intervals import GenomicInterval, IntervalCollection
from annotrack.services.base import ReferenceSequenceSource

logger = logging.getLogger(__name__)


class FastaReference(ReferenceSequenceSource):
    """
    Lazy-loading reference sequence backed by an indexed FASTA file.

    Features:
    - Memory-mapped FASTA (only loads requested regions)
    - Automatic index creation (.fai)
    - 'chr1' vs '1' chromosome name normalization
    - Reverse complement for minus-strand requests
    """

    service_name = "reference"

    def __init__(self, fasta_path: Union[str, Path], genome: Optional[str] = None):
        self.fasta_path = Path(fasta_path)
        self.genome = Genome.canonical_tag(genome) if genome else None
        self._fasta: Optional[Fasta] = None
        self._chromosome_lengths: Dict[str, int] = {}

    def _ensure_loaded(self) -> None:
        """Load FASTA file if not already loaded."""
        if self._fasta is not None:
            return

        if not self.fasta_path.exists():
            raise ExternalServiceError(
                self.service_name,
                f"Reference FASTA not found: {self.fasta_path}",
            )

        try:
            # pyfaidx will create .fai index if needed
            self._fasta = Fasta(str(self.fasta_path), build_index=True)
        except Exception as e:
            raise ExternalServiceError(
                self.service_name,
                f"Cannot open reference FASTA {self.fasta_path}: {e}",
            ) from e

        # Cache chromosome lengths
        for chrom in self._fasta.keys():
            self._chromosome_lengths[chrom] = len(self._fasta[chrom])
        logger.debug(f"Loaded {len(self._chromosome_lengths)} sequences from {self.fasta_path}")

    def chromosomes(self) -> List[str]:
        """List of chromosome names."""
        self._ensure_loaded()
        return list(self._fasta.keys())

    def get_chromosome_length(self, chromosome: str) -> int:
        """Get length of a chromosome."""
        chrom = self._normalize_chromosome(chromosome)
        return self._chromosome_lengths[chrom]

    def get_sequence(
        self,
        chromosome: str,
        start: int,
        end: int,
        strand: Strand = Strand.PLUS,
    ) -> str:
        """
        Get sequence from the reference.

        Args:
            chromosome: Chromosome name (with or without 'chr' prefix)
            start: Start position (0-based)
            end: End position (exclusive)
            strand: Strand (- returns reverse complement, + and . as-is)

        Returns:
            DNA sequence (uppercase)
        """
        chrom = self._normalize_chromosome(chromosome)

        # Clamp to valid range
        start = max(0, start)
        end = min(end, self._chromosome_lengths[chrom])

        if start >= end:
            return ""

        try:
            seq = str(self._fasta[chrom][start:end]).upper()
        except (KeyError, FetchError) as e:
            raise ExternalServiceError(
                self.service_name, f"Failed to fetch {chrom}:{start}-{end}: {e}"
            ) from e

        if strand == Strand.MINUS:
            seq = self.reverse_complement(seq)

        return seq

    def sequence_for(self, interval: GenomicInterval) -> str:
        """Sequence covered by one interval, honouring its strand."""
        return self.get_sequence(
            interval.chromosome, interval.start, interval.end, interval.strand
        )

    def sequences_for(
        self,
        collection: IntervalCollection,
    ) -> List[Tuple[GenomicInterval, str]]:
        """
        Sequences for every interval of a collection, in collection order.

        The collection's genome tag is checked against this reference's tag
        first; an unverifiable pairing is logged as a warning.

        Raises:
            TagMismatchError: If both tags are set and differ
        """
        check_genome_compatibility(collection.genome, self.genome)
        return [(interval, self.sequence_for(interval)) for interval in collection]

    def _normalize_chromosome(self, chromosome: str) -> str:
        """
        Normalize chromosome name to match FASTA.

        Handles 'chr1' vs '1' naming conventions.
        """
        self._ensure_loaded()

        # Direct match
        if chromosome in self._chromosome_lengths:
            return chromosome

        # Try with/without 'chr' prefix
        if chromosome.startswith("chr"):
            alt = chromosome[3:]
        else:
            alt = f"chr{chromosome}"

        if alt in self._chromosome_lengths:
            return alt

        # Try uppercase
        for key in self._chromosome_lengths:
            if key.upper() == chromosome.upper():
                return key

        raise ExternalServiceError(
            self.service_name,
            f"Chromosome {chromosome} not found. "
            f"Available: {list(self._chromosome_lengths)[:10]}...",
        )

    @staticmethod
    def reverse_complement(seq: str) -> str:
        """Return reverse complement of DNA sequence."""
        complement = {"A": "T", "T": "A", "G": "C", "C": "G", "N": "N"}
        return "".join(complement.get(base, "N") for base in reversed(seq.upper()))

    def close(self) -> None:
        """Close the FASTA file handle."""
        if self._fasta is not None:
            self._fasta.close()
            self._fasta = None
            self._chromosome_lengths = {}

    def __enter__(self) -> "FastaReference":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
