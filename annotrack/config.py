"""
Configuration system for annotrack.

Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

from annotrack.models.enums import ErrorMode, MissingFieldPolicy


class ParseConfig(BaseModel):
    """Interval parser configuration."""
    comment_char: str = "#"
    # "raise" aborts on the first malformed line; "skip" drops and records it
    on_error: ErrorMode = ErrorMode.RAISE


class WriteConfig(BaseModel):
    """Interval writer configuration."""
    missing: MissingFieldPolicy = MissingFieldPolicy.PLACEHOLDER
    track_line: bool = False


class ServiceConfig(BaseModel):
    """Annotation service locations."""
    data_dir: Path = Path("~/.annotrack").expanduser()

    # Local backing files (None = not configured)
    fasta_path: Optional[Path] = None
    transcript_db_path: Optional[Path] = None
    ontology_path: Optional[Path] = None
    mapping_path: Optional[Path] = None

    # Remote pathway service
    kegg_base_url: str = "https://rest.kegg.jp"
    request_timeout: float = 30.0  # seconds


class AnnotrackConfig(BaseSettings):
    """Main configuration for annotrack."""

    model_config = SettingsConfigDict(
        env_prefix="ANNOTRACK_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Sub-configs
    parse: ParseConfig = Field(default_factory=ParseConfig)
    write: WriteConfig = Field(default_factory=WriteConfig)
    services: ServiceConfig = Field(default_factory=ServiceConfig)

    # Genome tag applied by the CLI when none is given
    default_genome: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    def transcript_db(self) -> Path:
        """Transcript database path, defaulting under ``data_dir``."""
        if self.services.transcript_db_path is not None:
            return self.services.transcript_db_path
        return self.services.data_dir / "transcripts.db"


@lru_cache()
def get_config() -> AnnotrackConfig:
    """Get cached configuration singleton."""
    return AnnotrackConfig()
