"""
Test configuration and fixtures for annotrack.
"""

import pytest
from pathlib import Path
from typing import Generator

from annotrack.config import get_config
from annotrack.models.enums import Strand
from annotrack.models.data_classes import GeneInfo, Transcript, Exon
from annotrack.models.intervals import GenomicInterval, IntervalCollection


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Keep configuration (and anything written under data_dir) inside tmp_path."""
    monkeypatch.setenv("ANNOTRACK_SERVICES__DATA_DIR", str(tmp_path / "annotrack_data"))
    monkeypatch.setenv("ANNOTRACK_LOG_LEVEL", "WARNING")
    get_config.cache_clear()
    yield
    get_config.cache_clear()


@pytest.fixture
def bedgraph_text() -> str:
    """Two-record bedGraph track."""
    return "chr17\t100\t200\t0.5\nchr17\t300\t400\t0.9\n"


@pytest.fixture
def bedgraph_file(tmp_path: Path, bedgraph_text: str) -> Path:
    path = tmp_path / "signal.bedgraph"
    path.write_text(bedgraph_text)
    return path


@pytest.fixture
def bed6_file(tmp_path: Path) -> Path:
    """BED6 file with a header, a track line and an extra column."""
    path = tmp_path / "peaks.bed"
    path.write_text(
        "# exported peaks\n"
        'track name=peaks description="ChIP peaks"\n'
        "chr1\t10\t50\tpeak1\t7\t+\n"
        "chr1\t60\t90\tpeak2\t3\t-\n"
        "chr2\t5\t25\tpeak3\t12\t.\textra_col\n"
    )
    return path


@pytest.fixture
def plain_collection() -> IntervalCollection:
    """Collection with no optional fields."""
    return IntervalCollection([
        GenomicInterval("chr1", 0, 100),
        GenomicInterval("chr1", 150, 150),
        GenomicInterval("chrX", 20, 4000),
    ])


@pytest.fixture
def fasta_file(tmp_path: Path) -> Path:
    """Small two-chromosome reference."""
    path = tmp_path / "ref.fa"
    path.write_text(
        ">chr1\n"
        "ACGTACGTAA\n"
        ">chr2\n"
        "GGGGCCCCTT\n"
    )
    return path


@pytest.fixture
def sample_gene_info() -> GeneInfo:
    """Sample gene info for TP53."""
    return GeneInfo(
        gene_id="ENSG00000141510",
        symbol="TP53",
        chromosome="chr17",
        start=7668421,
        end=7687490,
        strand=Strand.MINUS,
        biotype="protein_coding",
        description="tumor protein p53",
        aliases=["p53", "LFS1"],
        transcripts=[
            Transcript(
                transcript_id="ENST00000269305",
                gene_id="ENSG00000141510",
                chromosome="chr17",
                start=7668421,
                end=7687490,
                strand=Strand.MINUS,
                cds_start=7669608,
                cds_end=7676594,
                is_canonical=True,
                exons=[
                    Exon(exon_number=1, start=7687376, end=7687490, is_constitutive=True),
                    Exon(exon_number=2, start=7676381, end=7676594, is_constitutive=True),
                    Exon(exon_number=3, start=7675993, end=7676272, is_constitutive=True),
                ],
            )
        ],
    )


@pytest.fixture
def gtf_file(tmp_path: Path) -> Path:
    """One gene, one canonical two-exon transcript."""
    path = tmp_path / "genes.gtf"
    rows = [
        ("gene", 101, 200, 'gene_id "G1"; gene_name "ALPHA"; gene_biotype "protein_coding";'),
        ("transcript", 101, 200, 'gene_id "G1"; transcript_id "T1"; gene_name "ALPHA"; tag "Ensembl_canonical";'),
        ("exon", 101, 150, 'gene_id "G1"; transcript_id "T1"; exon_number "1";'),
        ("exon", 181, 200, 'gene_id "G1"; transcript_id "T1"; exon_number "2";'),
        ("CDS", 121, 150, 'gene_id "G1"; transcript_id "T1";'),
    ]
    lines = ["#!genome-build test"]
    for feature, start, end, attrs in rows:
        lines.append(f"chr1\ttest\t{feature}\t{start}\t{end}\t.\t+\t.\t{attrs}")
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture
def mapping_table(tmp_path: Path) -> Path:
    path = tmp_path / "org_hs.tsv"
    path.write_text(
        "ENTREZID\tSYMBOL\tENSEMBL\tPMID\n"
        "7157\tTP53\tENSG00000141510\t2047879;1631137\n"
        "672\tBRCA1\tENSG00000012048\t7545954\n"
    )
    return path


@pytest.fixture
def obo_file(tmp_path: Path) -> Path:
    path = tmp_path / "mini.obo"
    path.write_text(
        "format-version: 1.2\n"
        "ontology: go\n"
        "\n"
        "[Term]\n"
        "id: GO:0008150\n"
        "name: biological_process\n"
        "namespace: biological_process\n"
        "\n"
        "[Term]\n"
        "id: GO:0009987\n"
        "name: cellular process\n"
        "namespace: biological_process\n"
        "is_a: GO:0008150 ! biological_process\n"
        "\n"
        "[Term]\n"
        "id: GO:0012501\n"
        "name: programmed cell death\n"
        "namespace: biological_process\n"
        "is_a: GO:0009987 ! cellular process\n"
        "\n"
        "[Term]\n"
        "id: GO:0006915\n"
        "name: apoptotic process\n"
        "namespace: biological_process\n"
        "alt_id: GO:0006917\n"
        'def: "A programmed cell death process." [GOC:cjm]\n'
        'synonym: "apoptosis" NARROW []\n'
        "is_a: GO:0012501 ! programmed cell death\n"
        "\n"
        "[Term]\n"
        "id: GO:0097194\n"
        "name: execution phase of apoptosis\n"
        "namespace: biological_process\n"
        "relationship: part_of GO:0006915 ! apoptotic process\n"
        "\n"
        "[Term]\n"
        "id: GO:0000001\n"
        "name: old term\n"
        "is_obsolete: true\n"
        "is_a: GO:0006915\n"
        "\n"
        "[Typedef]\n"
        "id: part_of\n"
        "name: part of\n"
    )
    return path


@pytest.fixture
def kegg_text() -> str:
    """KEGG flat-file record with the fixed 12-character keyword column."""
    rows = [
        ("ENTRY", "hsa04110                    Pathway"),
        ("NAME", "Cell cycle - Homo sapiens (human)"),
        ("ORGANISM", "Homo sapiens (human) [GN:hsa]"),
        ("GENE", "595  CCND1; cyclin D1 [KO:K04503]"),
        ("", "894  CCND2; cyclin D2 [KO:K10151]"),
        ("COMPOUND", "C00076  Calcium cation"),
    ]
    return "".join(f"{keyword:<12}{value}\n" for keyword, value in rows) + "///\n"
