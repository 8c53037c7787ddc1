"""
Ontology term lookup over an OBO file (e.g. go-basic.obo).
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from annotrack.core.errors import ExternalServiceError
from annotrack.models.data_classes import OntologyTerm
from annotrack.services.base import OntologySource

logger = logging.getLogger(__name__)

# Relationship types treated as parent edges
PARENT_RELATIONSHIPS = ("is_a", "part_of")


class OboOntology(OntologySource):
    """
    Ontology graph loaded from an OBO 1.2 flat file.

    Only ``[Term]`` stanzas are read. Parent edges are ``is_a`` tags and
    ``relationship: part_of`` tags; obsolete terms are kept for lookup but
    never appear as parents or children.
    """

    service_name = "ontology"

    def __init__(self, obo_path: Union[str, Path]):
        self.obo_path = Path(obo_path)
        self._terms: Dict[str, OntologyTerm] = {}
        self._children: Dict[str, List[str]] = {}
        self._alt_ids: Dict[str, str] = {}
        self._load()

    def _load(self) -> None:
        if not self.obo_path.exists():
            raise ExternalServiceError(self.service_name, f"OBO file not found: {self.obo_path}")

        try:
            with open(self.obo_path, encoding="utf-8") as handle:
                lines = handle.readlines()
        except (OSError, UnicodeDecodeError) as e:
            raise ExternalServiceError(
                self.service_name, f"Cannot read OBO file {self.obo_path}: {e}"
            ) from e

        stanza: Optional[Dict[str, List[str]]] = None
        in_term = False
        for raw in lines:
            line = raw.strip()
            if line.startswith("["):
                if in_term and stanza:
                    self._add_term(stanza)
                in_term = line == "[Term]"
                stanza = {}
                continue
            if not in_term or not line or line.startswith("!"):
                continue
            if ":" not in line:
                continue
            tag, value = line.split(":", 1)
            stanza.setdefault(tag.strip(), []).append(self._strip_comment(value))
        if in_term and stanza:
            self._add_term(stanza)

        for term in self._terms.values():
            if term.is_obsolete:
                continue
            for parent_id in term.parent_ids:
                self._children.setdefault(parent_id, []).append(term.term_id)

        logger.debug(f"Loaded {len(self._terms)} terms from {self.obo_path}")

    @staticmethod
    def _strip_comment(value: str) -> str:
        # "GO:0008150 ! biological_process" -> "GO:0008150"
        value = value.strip()
        if " ! " in value:
            value = value.split(" ! ", 1)[0]
        return value.strip()

    def _add_term(self, stanza: Dict[str, List[str]]) -> None:
        if "id" not in stanza:
            return
        term_id = stanza["id"][0]

        parents: Dict[str, List[str]] = {}
        for parent in stanza.get("is_a", []):
            parents.setdefault("is_a", []).append(parent.split()[0])
        for relationship in stanza.get("relationship", []):
            parts = relationship.split()
            if len(parts) >= 2 and parts[0] in PARENT_RELATIONSHIPS:
                parents.setdefault(parts[0], []).append(parts[1])

        definition = None
        if "def" in stanza:
            text = stanza["def"][0]
            if text.startswith('"') and '"' in text[1:]:
                text = text[1:text.index('"', 1)]
            definition = text

        synonyms = []
        for synonym in stanza.get("synonym", []):
            if synonym.startswith('"') and '"' in synonym[1:]:
                synonyms.append(synonym[1:synonym.index('"', 1)])

        self._terms[term_id] = OntologyTerm(
            term_id=term_id,
            name=stanza.get("name", [term_id])[0],
            namespace=stanza.get("namespace", [None])[0],
            definition=definition,
            synonyms=synonyms,
            parents=parents,
            is_obsolete=stanza.get("is_obsolete", ["false"])[0] == "true",
        )
        for alt_id in stanza.get("alt_id", []):
            self._alt_ids[alt_id] = term_id

    def __len__(self) -> int:
        return len(self._terms)

    def get_term(self, term_id: str) -> OntologyTerm:
        """
        Lookup a term by id (alternative ids resolve to the primary term).

        Raises:
            ExternalServiceError: If the term is unknown
        """
        term_id = self._alt_ids.get(term_id, term_id)
        term = self._terms.get(term_id)
        if term is None:
            raise ExternalServiceError(self.service_name, f"Unknown term: {term_id}")
        return term

    def parents(self, term_id: str) -> List[OntologyTerm]:
        """Direct parents over is_a and part_of edges."""
        term = self.get_term(term_id)
        return [
            self._terms[parent_id]
            for parent_id in term.parent_ids
            if parent_id in self._terms and not self._terms[parent_id].is_obsolete
        ]

    def children(self, term_id: str) -> List[OntologyTerm]:
        """Direct children over is_a and part_of edges."""
        term = self.get_term(term_id)
        return [self._terms[child_id] for child_id in self._children.get(term.term_id, [])]

    def ancestors(self, term_id: str) -> List[OntologyTerm]:
        """All ancestors, nearest first (breadth-first)."""
        seen: Set[str] = set()
        ordered: List[OntologyTerm] = []
        frontier = [self.get_term(term_id)]
        while frontier:
            next_frontier: List[OntologyTerm] = []
            for term in frontier:
                for parent in self.parents(term.term_id):
                    if parent.term_id not in seen:
                        seen.add(parent.term_id)
                        ordered.append(parent)
                        next_frontier.append(parent)
            frontier = next_frontier
        return ordered
