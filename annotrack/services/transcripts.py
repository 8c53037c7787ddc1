"""
Transcript/gene database interface.

Provides gene and transcript lookup by identifier or genomic region.
Uses SQLite for local storage of gene models, which can be imported from a GTF.
"""

from __future__ import annotations

import gzip
import json
import logging
import re
import sqlite3
from pathlib import Path
from typing import Dict, List, Optional, Union

from annotrack.core.errors import ExternalServiceError
from annotrack.models.data_classes import Exon, GeneInfo, Transcript
from annotrack.models.enums import Strand
from annotrack.models.intervals import GenomicInterval
from annotrack.services.base import TranscriptSource

logger = logging.getLogger(__name__)

GTF_ATTRIBUTE = re.compile(r'(\S+)\s+"([^"]*)"')

SCHEMA = """
    CREATE TABLE IF NOT EXISTS genes (
        gene_id TEXT PRIMARY KEY,
        symbol TEXT NOT NULL,
        chromosome TEXT NOT NULL,
        start INTEGER NOT NULL,
        end INTEGER NOT NULL,
        strand TEXT NOT NULL,
        biotype TEXT,
        description TEXT,
        data JSON
    );

    CREATE TABLE IF NOT EXISTS aliases (
        alias TEXT PRIMARY KEY,
        gene_id TEXT NOT NULL,
        FOREIGN KEY (gene_id) REFERENCES genes(gene_id)
    );

    CREATE TABLE IF NOT EXISTS transcripts (
        transcript_id TEXT PRIMARY KEY,
        gene_id TEXT NOT NULL,
        chromosome TEXT NOT NULL,
        start INTEGER NOT NULL,
        end INTEGER NOT NULL,
        strand TEXT NOT NULL,
        cds_start INTEGER,
        cds_end INTEGER,
        biotype TEXT,
        is_canonical INTEGER DEFAULT 0,
        data JSON,
        FOREIGN KEY (gene_id) REFERENCES genes(gene_id)
    );

    CREATE INDEX IF NOT EXISTS idx_genes_symbol ON genes(symbol);
    CREATE INDEX IF NOT EXISTS idx_genes_chromosome ON genes(chromosome, start, end);
    CREATE INDEX IF NOT EXISTS idx_transcripts_gene ON transcripts(gene_id);
    CREATE INDEX IF NOT EXISTS idx_transcripts_chromosome ON transcripts(chromosome, start, end);
"""


def mark_constitutive_exons(transcripts: List[Transcript]) -> None:
    """Flag exons whose span occurs in every transcript of the gene."""
    spans = [{(e.start, e.end) for e in t.exons} for t in transcripts if t.exons]
    shared = set.intersection(*spans) if spans else set()
    for transcript in transcripts:
        for exon in transcript.exons:
            exon.is_constitutive = (exon.start, exon.end) in shared


class TranscriptDatabase(TranscriptSource):
    """
    Gene annotation database.

    Features:
    - SQLite-backed local store (file or ``:memory:``)
    - Gene symbol and alias resolution
    - Canonical-first transcript ordering
    - Region queries (0-based, half-open)
    - GTF import
    """

    service_name = "transcripts"

    def __init__(self, db_path: Optional[Union[str, Path]] = None):
        if db_path is None:
            from annotrack.config import get_config
            db_path = get_config().transcript_db()

        self.db_path = db_path if db_path == ":memory:" else Path(db_path)
        self._connection: Optional[sqlite3.Connection] = None
        self._ensure_db()

    def _ensure_db(self) -> None:
        """Create database and tables if needed."""
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)

        conn = self._get_connection()
        try:
            conn.executescript(SCHEMA)
            conn.commit()
        except sqlite3.Error as e:
            raise ExternalServiceError(
                self.service_name, f"Cannot initialise transcript database {self.db_path}: {e}"
            ) from e

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection."""
        if self._connection is None:
            try:
                self._connection = sqlite3.connect(str(self.db_path))
            except sqlite3.Error as e:
                raise ExternalServiceError(
                    self.service_name, f"Cannot open transcript database {self.db_path}: {e}"
                ) from e
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def _execute(self, sql: str, params: tuple = ()) -> List[sqlite3.Row]:
        """Run one statement and fetch its rows."""
        try:
            return self._get_connection().execute(sql, params).fetchall()
        except sqlite3.Error as e:
            raise ExternalServiceError(
                self.service_name, f"Transcript database query failed: {e}"
            ) from e

    def _commit(self) -> None:
        try:
            self._get_connection().commit()
        except sqlite3.Error as e:
            raise ExternalServiceError(
                self.service_name, f"Cannot write transcript database {self.db_path}: {e}"
            ) from e

    # ==========================================================================
    # Lookups
    # ==========================================================================

    def get_gene(self, gene_id: str) -> GeneInfo:
        """
        Lookup gene by stable identifier.

        A version suffix (ENSG00000141510.16) is ignored.

        Raises:
            ExternalServiceError: If the gene is unknown
        """
        base_id = gene_id.split(".")[0]

        rows = self._execute(
            "SELECT * FROM genes WHERE gene_id = ? OR gene_id LIKE ?",
            (base_id, f"{base_id}.%")
        )
        row = rows[0] if rows else None

        if row is None:
            raise ExternalServiceError(self.service_name, f"Unknown gene identifier: {gene_id}")
        return self._row_to_gene_info(row)

    def get_transcript(self, transcript_id: str) -> Transcript:
        """
        Lookup transcript by stable identifier.

        Raises:
            ExternalServiceError: If the transcript is unknown
        """
        base_id = transcript_id.split(".")[0]

        rows = self._execute(
            "SELECT * FROM transcripts WHERE transcript_id = ? OR transcript_id LIKE ?",
            (base_id, f"{base_id}.%")
        )
        row = rows[0] if rows else None

        if row is None:
            raise ExternalServiceError(
                self.service_name, f"Unknown transcript identifier: {transcript_id}"
            )
        return self._row_to_transcript(row)

    def lookup_symbol(self, symbol: str) -> Optional[GeneInfo]:
        """
        Lookup gene by symbol or alias.

        Args:
            symbol: Gene symbol (e.g., "TP53", "BRCA1")

        Returns:
            GeneInfo if found, None otherwise
        """
        # Try exact match first (case-insensitive)
        rows = self._execute(
            "SELECT * FROM genes WHERE UPPER(symbol) = UPPER(?)",
            (symbol,)
        )
        row = rows[0] if rows else None

        if row is None:
            rows = self._execute(
                """
                SELECT g.* FROM genes g
                JOIN aliases a ON g.gene_id = a.gene_id
                WHERE UPPER(a.alias) = UPPER(?)
                """,
                (symbol,)
            )
            row = rows[0] if rows else None

        if row:
            return self._row_to_gene_info(row)
        return None

    def genes_in_region(self, chromosome: str, start: int, end: int) -> List[GeneInfo]:
        """Get genes overlapping a genomic region."""
        rows = self._execute(
            """
            SELECT * FROM genes
            WHERE chromosome = ? AND start < ? AND end > ?
            ORDER BY start
            """,
            (chromosome, end, start)
        )

        return [self._row_to_gene_info(row) for row in rows]

    def transcripts_in_region(self, chromosome: str, start: int, end: int) -> List[Transcript]:
        """Get transcripts overlapping a genomic region."""
        rows = self._execute(
            """
            SELECT * FROM transcripts
            WHERE chromosome = ? AND start < ? AND end > ?
            ORDER BY start
            """,
            (chromosome, end, start)
        )

        return [self._row_to_transcript(row) for row in rows]

    def genes_overlapping(self, interval: GenomicInterval) -> List[GeneInfo]:
        """Genes overlapping an interval."""
        return self.genes_in_region(interval.chromosome, interval.start, interval.end)

    def get_transcripts(self, gene_id: str) -> List[Transcript]:
        """Get all transcripts for a gene, canonical first then longest first."""
        rows = self._execute(
            "SELECT * FROM transcripts WHERE gene_id = ? ORDER BY is_canonical DESC, end - start DESC",
            (gene_id,)
        )

        return [self._row_to_transcript(row) for row in rows]

    def _row_to_transcript(self, row: sqlite3.Row) -> Transcript:
        data = json.loads(row["data"]) if row["data"] else {}
        exons = [Exon(**e) for e in data.get("exons", [])]

        return Transcript(
            transcript_id=row["transcript_id"],
            gene_id=row["gene_id"],
            chromosome=row["chromosome"],
            start=row["start"],
            end=row["end"],
            strand=Strand(row["strand"]),
            cds_start=row["cds_start"],
            cds_end=row["cds_end"],
            biotype=row["biotype"] or "protein_coding",
            is_canonical=bool(row["is_canonical"]),
            exons=exons,
        )

    def _row_to_gene_info(self, row: sqlite3.Row) -> GeneInfo:
        """Convert database row to GeneInfo object."""
        data = json.loads(row["data"]) if row["data"] else {}

        gene_info = GeneInfo(
            gene_id=row["gene_id"],
            symbol=row["symbol"],
            chromosome=row["chromosome"],
            start=row["start"],
            end=row["end"],
            strand=Strand(row["strand"]),
            biotype=row["biotype"] or "protein_coding",
            description=row["description"],
            aliases=data.get("aliases", []),
        )

        # Load transcripts
        gene_info.transcripts = self.get_transcripts(row["gene_id"])

        return gene_info

    # ==========================================================================
    # Data import methods
    # ==========================================================================

    def import_gene(self, gene: GeneInfo, commit: bool = True) -> None:
        """Import a gene (with its transcripts) into the database."""
        data = {
            "aliases": gene.aliases,
        }

        self._execute(
            """
            INSERT OR REPLACE INTO genes
            (gene_id, symbol, chromosome, start, end, strand, biotype, description, data)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                gene.gene_id,
                gene.symbol,
                gene.chromosome,
                gene.start,
                gene.end,
                gene.strand.value,
                gene.biotype,
                gene.description,
                json.dumps(data),
            )
        )

        # Import aliases
        for alias in gene.aliases:
            self._execute(
                "INSERT OR IGNORE INTO aliases (alias, gene_id) VALUES (?, ?)",
                (alias, gene.gene_id)
            )

        # Import transcripts
        for transcript in gene.transcripts:
            self.import_transcript(transcript)

        if commit:
            self._commit()

    def import_transcript(self, transcript: Transcript) -> None:
        """Import a transcript into the database."""
        data = {
            "exons": [
                {
                    "exon_number": e.exon_number,
                    "start": e.start,
                    "end": e.end,
                    "is_constitutive": e.is_constitutive,
                }
                for e in transcript.exons
            ]
        }

        self._execute(
            """
            INSERT OR REPLACE INTO transcripts
            (transcript_id, gene_id, chromosome, start, end, strand,
             cds_start, cds_end, biotype, is_canonical, data)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                transcript.transcript_id,
                transcript.gene_id,
                transcript.chromosome,
                transcript.start,
                transcript.end,
                transcript.strand.value,
                transcript.cds_start,
                transcript.cds_end,
                transcript.biotype,
                1 if transcript.is_canonical else 0,
                json.dumps(data),
            )
        )

    def import_gtf(self, gtf_path: Union[str, Path]) -> int:
        """
        Build gene models from a GTF file (plain or gzipped).

        GTF coordinates (1-based, closed) are stored 0-based, half-open.
        Transcripts tagged ``Ensembl_canonical`` are marked canonical.

        Returns:
            Number of genes imported
        """
        gtf_path = Path(gtf_path)
        if not gtf_path.exists():
            raise ExternalServiceError(self.service_name, f"GTF file not found: {gtf_path}")

        genes: Dict[str, Dict] = {}
        transcripts: Dict[str, Dict] = {}

        opener = gzip.open if gtf_path.suffix == ".gz" else open
        try:
            with opener(gtf_path, "rt") as handle:
                lines = handle.readlines()
        except (OSError, UnicodeDecodeError) as e:
            raise ExternalServiceError(self.service_name, f"Cannot read GTF file {gtf_path}: {e}") from e

        for line_number, line in enumerate(lines, start=1):
            if line.startswith("#") or not line.strip():
                continue
            fields = line.rstrip("\n").split("\t")
            if len(fields) != 9:
                continue

            chrom, _, feature, start, end, _, strand, _, attr_field = fields
            attrs: Dict[str, List[str]] = {}
            for key, value in GTF_ATTRIBUTE.findall(attr_field):
                attrs.setdefault(key, []).append(value)

            gene_id = attrs.get("gene_id", [None])[0]
            if gene_id is None:
                continue
            try:
                start0, end0 = int(start) - 1, int(end)
            except ValueError:
                raise ExternalServiceError(
                    self.service_name,
                    f"{gtf_path}:{line_number}: coordinates must be integers, got {start!r}, {end!r}",
                ) from None

            gene = genes.setdefault(gene_id, {
                "gene_id": gene_id,
                "symbol": attrs.get("gene_name", [gene_id])[0],
                "chromosome": chrom,
                "start": start0,
                "end": end0,
                "strand": strand if strand in ("+", "-") else ".",
                "biotype": attrs.get("gene_biotype", attrs.get("gene_type", ["protein_coding"]))[0],
            })
            gene["start"] = min(gene["start"], start0)
            gene["end"] = max(gene["end"], end0)

            transcript_id = attrs.get("transcript_id", [None])[0]
            if feature == "gene" or transcript_id is None:
                continue

            tx = transcripts.setdefault(transcript_id, {
                "transcript_id": transcript_id,
                "gene_id": gene_id,
                "chromosome": chrom,
                "start": start0,
                "end": end0,
                "strand": gene["strand"],
                "biotype": attrs.get("transcript_biotype", attrs.get("transcript_type", ["protein_coding"]))[0],
                "is_canonical": False,
                "exons": [],
                "cds_start": None,
                "cds_end": None,
            })
            tx["start"] = min(tx["start"], start0)
            tx["end"] = max(tx["end"], end0)
            if "Ensembl_canonical" in attrs.get("tag", []):
                tx["is_canonical"] = True

            if feature == "exon":
                number = attrs.get("exon_number", [str(len(tx["exons"]) + 1)])[0]
                if not number.isdigit():
                    raise ExternalServiceError(
                        self.service_name,
                        f"{gtf_path}:{line_number}: exon_number must be an integer, got {number!r}",
                    )
                tx["exons"].append(Exon(exon_number=int(number), start=start0, end=end0))
            elif feature == "CDS":
                tx["cds_start"] = start0 if tx["cds_start"] is None else min(tx["cds_start"], start0)
                tx["cds_end"] = end0 if tx["cds_end"] is None else max(tx["cds_end"], end0)

        by_gene: Dict[str, List[Transcript]] = {}
        for tx in transcripts.values():
            tx["exons"].sort(key=lambda e: e.exon_number)
            by_gene.setdefault(tx["gene_id"], []).append(
                Transcript(**{**tx, "strand": Strand(tx["strand"])})
            )

        for gene_transcripts in by_gene.values():
            mark_constitutive_exons(gene_transcripts)

        for gene in genes.values():
            self.import_gene(
                GeneInfo(
                    **{**gene, "strand": Strand(gene["strand"])},
                    transcripts=by_gene.get(gene["gene_id"], []),
                ),
                commit=False,
            )
        self._commit()

        logger.info(f"Imported {len(genes)} genes and {len(transcripts)} transcripts from {gtf_path}")
        return len(genes)

    def close(self) -> None:
        """Close database connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
