"""
Genome tag discipline.

Any operation that brings two sets of coordinates together must first call
``check_genome_compatibility``. Two different tags are an error; a missing
tag cannot be verified and is reported back to the caller as a diagnostic.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from annotrack.core.errors import TagMismatchError
from annotrack.models.enums import Genome
from annotrack.models.intervals import IntervalCollection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TagDiagnostic:
    """Record of a combination whose genome compatibility could not be checked."""
    level: str
    message: str
    tags: Tuple[Optional[str], Optional[str]]


@dataclass(frozen=True)
class CombineResult:
    """Output of ``combine``: the merged collection plus any diagnostics."""
    collection: IntervalCollection
    diagnostics: Tuple[TagDiagnostic, ...] = ()

    @property
    def verified(self) -> bool:
        return not self.diagnostics


def check_genome_compatibility(
    tag_a: Optional[str],
    tag_b: Optional[str],
) -> Optional[TagDiagnostic]:
    """
    Check that two genome tags may be combined.

    Args:
        tag_a: Genome tag of the first operand (None if unset)
        tag_b: Genome tag of the second operand (None if unset)

    Returns:
        None when both tags are set and agree, otherwise a warning-level
        ``TagDiagnostic`` describing the unverified side(s).

    Raises:
        TagMismatchError: If both tags are set and name different assemblies
    """
    if tag_a is not None and tag_b is not None:
        if Genome.canonical_tag(tag_a) != Genome.canonical_tag(tag_b):
            raise TagMismatchError(tag_a, tag_b)
        return None

    if tag_a is None and tag_b is None:
        message = "Neither operand has a genome tag; compatibility cannot be verified"
    else:
        known = tag_a if tag_a is not None else tag_b
        message = (
            f"One operand is untagged; assuming it matches '{known}' "
            f"but compatibility cannot be verified"
        )
    logger.warning(message)
    return TagDiagnostic(level="warning", message=message, tags=(tag_a, tag_b))


def combine(a: IntervalCollection, b: IntervalCollection) -> CombineResult:
    """
    Concatenate two collections, ``a`` first, after checking their tags.

    The result carries whichever tag was set (both agree if both are set).
    """
    diagnostics: List[TagDiagnostic] = []
    diagnostic = check_genome_compatibility(a.genome, b.genome)
    if diagnostic is not None:
        diagnostics.append(diagnostic)

    genome = a.genome if a.genome is not None else b.genome
    merged = IntervalCollection(list(a) + list(b), genome=genome)
    return CombineResult(collection=merged, diagnostics=tuple(diagnostics))
