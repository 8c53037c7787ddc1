"""
annotrack CLI - Scriptable annotation track workflows.

Usage:
    annotrack convert peaks.bedgraph peaks.bed --genome hg38
    annotrack summary peaks.bed
    annotrack sequences peaks.bed --fasta GRCh38.fa
    annotrack genes peaks.bed --db transcripts.db
    annotrack map 7157 --table org_hs.tsv --keytype ENTREZID --column SYMBOL --column PMID
    annotrack term GO:0006915 --obo go-basic.obo
    annotrack pathway hsa04110 --image hsa04110.png
"""

import json
import logging
from pathlib import Path
from typing import Optional, List

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from annotrack import __version__
from annotrack.config import get_config
from annotrack.core.errors import AnnotrackError
from annotrack.models.enums import ErrorMode, MissingFieldPolicy, TrackFormat
from annotrack.models.intervals import IntervalCollection

# Initialize Typer app and Rich consoles
app = typer.Typer(
    name="annotrack",
    help="Genomic annotation track I/O and annotation lookups",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)


# =============================================================================
# Version callback and logging
# =============================================================================

def version_callback(value: bool) -> None:
    if value:
        console.print(f"[bold blue]annotrack[/bold blue] version {__version__}")
        raise typer.Exit()


def setup_logging(level: str, log_file: Optional[Path] = None) -> None:
    """Route log records to stderr through rich, and optionally to a file."""
    handlers: List[logging.Handler] = [
        RichHandler(console=err_console, rich_tracebacks=True, show_path=False)
    ]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        handlers.append(file_handler)

    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=handlers,
        force=True,
    )


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
) -> None:
    """
    annotrack - Genomic annotation track I/O

    Convert interval files and look intervals up in annotation services.
    """
    config = get_config()
    setup_logging("DEBUG" if verbose else config.log_level, config.log_file)


def _fail(error: Exception) -> None:
    console.print(f"[red]Error:[/red] {error}")
    raise typer.Exit(1)


def _require_path(value: Optional[Path], configured: Optional[Path], option: str) -> Path:
    """Command-line path, else the configured one; exits when neither is set."""
    path = value or configured
    if path is None:
        console.print(f"[red]Error:[/red] {option} is required (no default is configured)")
        raise typer.Exit(1)
    return path


def _load(
    path: Path,
    fmt: Optional[TrackFormat],
    skip_malformed: bool = False,
) -> IntervalCollection:
    from annotrack.io import read_intervals

    fmt = fmt or TrackFormat.from_path(path)
    on_error = ErrorMode.SKIP if skip_malformed else None
    return read_intervals(path, fmt, on_error=on_error)


# =============================================================================
# Convert command
# =============================================================================

@app.command()
def convert(
    input_path: Path = typer.Argument(..., help="Input interval file"),
    output_path: Path = typer.Argument(..., help="Output interval file"),
    from_format: Optional[TrackFormat] = typer.Option(
        None,
        "--from",
        help="Input format (default: inferred from extension)",
    ),
    to_format: Optional[TrackFormat] = typer.Option(
        None,
        "--to",
        help="Output format (default: inferred from extension)",
    ),
    genome: Optional[str] = typer.Option(
        None,
        "--genome", "-g",
        help="Genome tag to attach (e.g. GRCh38, hg19)",
    ),
    skip_malformed: bool = typer.Option(
        False,
        "--skip-malformed",
        help="Skip malformed lines instead of aborting",
    ),
    missing: Optional[MissingFieldPolicy] = typer.Option(
        None,
        "--missing",
        help="Policy for absent optional columns: placeholder or error",
    ),
    track_line: bool = typer.Option(
        False,
        "--track-line",
        help="Write a UCSC track header line",
    ),
) -> None:
    """
    Convert an interval file between formats.

    Examples:
        annotrack convert signal.bedgraph signal.bed
        annotrack convert peaks.txt peaks.bed --from interval --genome hg38
    """
    from annotrack.io import write_intervals

    try:
        collection = _load(input_path, from_format, skip_malformed)
        tag = genome or get_config().default_genome
        if tag:
            collection.set_genome(tag)
        write_intervals(
            collection,
            output_path,
            to_format or TrackFormat.from_path(output_path),
            missing=missing,
            track_line=track_line or None,
        )
    except AnnotrackError as e:
        _fail(e)

    console.print(
        f"Wrote [bold]{len(collection)}[/bold] intervals to {output_path}"
        + (f" ([yellow]{len(collection.skipped)} skipped[/yellow])" if collection.skipped else "")
    )


# =============================================================================
# Summary command
# =============================================================================

@app.command()
def summary(
    input_path: Path = typer.Argument(..., help="Input interval file"),
    fmt: Optional[TrackFormat] = typer.Option(
        None,
        "--format", "-f",
        help="Input format (default: inferred from extension)",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print machine-readable JSON instead of a table",
    ),
) -> None:
    """Summarize intervals per chromosome."""
    try:
        collection = _load(input_path, fmt)
    except AnnotrackError as e:
        _fail(e)

    rows = []
    for chrom in collection.chromosomes():
        subset = collection.subset_chromosome(chrom)
        rows.append({
            "chromosome": chrom,
            "intervals": len(subset),
            "bases": sum(iv.length for iv in subset),
        })

    if as_json:
        typer.echo(json.dumps({
            "path": str(input_path),
            "total_intervals": len(collection),
            "chromosomes": rows,
        }, indent=2))
        return

    table = Table(title=f"{input_path.name} ({len(collection)} intervals)")
    table.add_column("Chromosome", style="cyan")
    table.add_column("Intervals", justify="right")
    table.add_column("Bases", justify="right")
    for row in rows:
        table.add_row(row["chromosome"], str(row["intervals"]), f"{row['bases']:,}")
    console.print(table)


# =============================================================================
# Reference sequence command
# =============================================================================

@app.command()
def sequences(
    input_path: Path = typer.Argument(..., help="Input interval file"),
    fasta: Optional[Path] = typer.Option(
        None,
        "--fasta",
        help="Indexed or indexable reference FASTA (default: ANNOTRACK_SERVICES__FASTA_PATH)",
    ),
    fmt: Optional[TrackFormat] = typer.Option(None, "--format", "-f", help="Input format"),
    genome: Optional[str] = typer.Option(None, "--genome", "-g", help="Genome tag of the intervals"),
    reference_genome: Optional[str] = typer.Option(
        None,
        "--reference-genome",
        help="Genome tag of the FASTA",
    ),
) -> None:
    """
    Print the reference sequence of every interval as FASTA.

    Minus-strand intervals are reverse-complemented.
    """
    from annotrack.services.reference import FastaReference

    fasta = _require_path(fasta, get_config().services.fasta_path, "--fasta")
    try:
        collection = _load(input_path, fmt)
        tag = genome or get_config().default_genome
        if tag:
            collection.set_genome(tag)
        with FastaReference(fasta, genome=reference_genome) as reference:
            records = reference.sequences_for(collection)
    except AnnotrackError as e:
        _fail(e)

    for interval, seq in records:
        header = f"{interval.chromosome}:{interval.start}-{interval.end}({interval.strand.value})"
        if interval.name:
            header = f"{interval.name} {header}"
        typer.echo(f">{header}")
        typer.echo(seq)


# =============================================================================
# Gene model command
# =============================================================================

@app.command()
def genes(
    input_path: Path = typer.Argument(..., help="Input interval file"),
    db: Optional[Path] = typer.Option(None, "--db", help="Transcript database (SQLite)"),
    gtf: Optional[Path] = typer.Option(
        None,
        "--gtf",
        help="Import this GTF into the database before querying",
    ),
    fmt: Optional[TrackFormat] = typer.Option(None, "--format", "-f", help="Input format"),
) -> None:
    """List genes overlapping each interval."""
    from annotrack.services.transcripts import TranscriptDatabase

    try:
        collection = _load(input_path, fmt)
        database = TranscriptDatabase(db if db is not None else (":memory:" if gtf else None))
        try:
            if gtf is not None:
                database.import_gtf(gtf)
            hits = [(interval, database.genes_overlapping(interval)) for interval in collection]
        finally:
            database.close()
    except AnnotrackError as e:
        _fail(e)

    table = Table(title="Overlapping genes")
    table.add_column("Interval", style="cyan")
    table.add_column("Genes")
    for interval, gene_hits in hits:
        label = f"{interval.chromosome}:{interval.start}-{interval.end}"
        names = ", ".join(f"{g.symbol} ({g.gene_id})" for g in gene_hits) or "-"
        table.add_row(label, names)
    console.print(table)


# =============================================================================
# Identifier mapping command
# =============================================================================

@app.command(name="map")
def map_ids(
    keys: List[str] = typer.Argument(..., help="Identifiers to map"),
    table_path: Optional[Path] = typer.Option(
        None,
        "--table",
        help="Tab-delimited mapping table (default: ANNOTRACK_SERVICES__MAPPING_PATH)",
    ),
    keytype: str = typer.Option(..., "--keytype", "-k", help="Column the keys belong to"),
    columns: List[str] = typer.Option(..., "--column", "-c", help="Column(s) to return"),
) -> None:
    """Map identifiers to other columns; prints JSON."""
    from annotrack.services.identifiers import TableIdentifierMapper

    table_path = _require_path(table_path, get_config().services.mapping_path, "--table")
    try:
        mapper = TableIdentifierMapper(table_path)
        rows = mapper.select(keys, columns=columns, keytype=keytype)
    except AnnotrackError as e:
        _fail(e)

    typer.echo(json.dumps(rows, indent=2))


# =============================================================================
# Ontology command
# =============================================================================

@app.command()
def term(
    term_id: str = typer.Argument(..., help="Ontology term id (e.g. GO:0006915)"),
    obo: Optional[Path] = typer.Option(
        None,
        "--obo",
        help="OBO ontology file (default: ANNOTRACK_SERVICES__ONTOLOGY_PATH)",
    ),
) -> None:
    """Show an ontology term with its parents and children."""
    from annotrack.services.ontology import OboOntology

    obo = _require_path(obo, get_config().services.ontology_path, "--obo")
    try:
        ontology = OboOntology(obo)
        found = ontology.get_term(term_id)
        parents = ontology.parents(term_id)
        children = ontology.children(term_id)
    except AnnotrackError as e:
        _fail(e)

    console.print(f"[bold]{found.term_id}[/bold] {found.name}")
    if found.namespace:
        console.print(f"  namespace: {found.namespace}")
    if found.definition:
        console.print(f"  definition: {found.definition}")
    if found.is_obsolete:
        console.print("  [yellow]obsolete[/yellow]")
    for label, related in (("parents", parents), ("children", children)):
        console.print(f"  {label}:")
        for other in related:
            console.print(f"    {other.term_id} {other.name}")


# =============================================================================
# Pathway command
# =============================================================================

@app.command()
def pathway(
    pathway_id: str = typer.Argument(..., help="KEGG pathway id (e.g. hsa04110)"),
    image: Optional[Path] = typer.Option(
        None,
        "--image",
        help="Also save the pathway diagram (PNG) here",
    ),
) -> None:
    """Fetch a pathway's gene list (and optionally its diagram)."""
    from annotrack.services.pathways import KeggPathwayClient

    try:
        client = KeggPathwayClient()
        record = client.get_pathway(pathway_id)
        if image is not None:
            image.parent.mkdir(parents=True, exist_ok=True)
            image.write_bytes(client.get_pathway_image(pathway_id))
    except AnnotrackError as e:
        _fail(e)

    table = Table(title=f"{record.pathway_id}: {record.name}")
    table.add_column("Gene ID", style="cyan")
    table.add_column("Symbol")
    table.add_column("Description")
    for gene in record.genes:
        table.add_row(gene.gene_id, gene.symbol or "", gene.description or "")
    console.print(table)
    if image is not None:
        console.print(f"Saved diagram to {image}")


if __name__ == "__main__":
    app()
