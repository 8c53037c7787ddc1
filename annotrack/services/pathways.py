"""
Pathway lookup through the KEGG REST API.

Each call is a single blocking request; failures are reported as
``ExternalServiceError`` and never retried.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional

import requests

from annotrack.core.errors import ExternalServiceError
from annotrack.models.data_classes import Pathway, PathwayGene
from annotrack.services.base import PathwaySource

logger = logging.getLogger(__name__)

# KEGG flat files use a 12-character keyword column
KEYWORD_WIDTH = 12
BRACKETED = re.compile(r"\s*\[[^\]]*\]")


class KeggPathwayClient(PathwaySource):
    """
    Client for KEGG pathway records.

    Example:
        >>> client = KeggPathwayClient()
        >>> pathway = client.get_pathway("hsa04110")
        >>> pathway.name
        'Cell cycle - Homo sapiens (human)'
    """

    service_name = "kegg"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        if base_url is None or timeout is None:
            from annotrack.config import get_config
            services = get_config().services
            base_url = base_url or services.kegg_base_url
            timeout = timeout if timeout is not None else services.request_timeout

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def _get(self, path: str) -> requests.Response:
        url = f"{self.base_url}/{path}"
        logger.debug(f"GET {url}")
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise ExternalServiceError(self.service_name, f"Request to {url} failed: {e}") from e

        if response.status_code == 404:
            raise ExternalServiceError(self.service_name, f"Not found: {path}")
        if response.status_code != 200:
            raise ExternalServiceError(
                self.service_name,
                f"Request to {url} returned HTTP {response.status_code}",
            )
        return response

    def get_pathway(self, pathway_id: str) -> Pathway:
        """
        Fetch a pathway record and its gene list.

        Args:
            pathway_id: KEGG pathway id (e.g. "hsa04110")

        Raises:
            ExternalServiceError: On transport errors, unknown ids or empty records
        """
        text = self._get(f"get/{pathway_id}").text
        if not text.strip():
            raise ExternalServiceError(self.service_name, f"Empty record for {pathway_id}")

        sections = parse_flat_file(text)
        if "ENTRY" not in sections:
            raise ExternalServiceError(
                self.service_name, f"Malformed KEGG record for {pathway_id}"
            )

        organism = None
        if sections.get("ORGANISM"):
            organism = BRACKETED.sub("", sections["ORGANISM"][0]).strip()

        pathway = Pathway(
            pathway_id=sections["ENTRY"][0].split()[0],
            name=" ".join(sections.get("NAME", [pathway_id])),
            organism=organism,
            genes=[parse_gene_line(line) for line in sections.get("GENE", [])],
        )
        logger.info(f"Fetched {pathway.pathway_id} with {len(pathway.genes)} genes")
        return pathway

    def get_pathway_image(self, pathway_id: str) -> bytes:
        """Fetch the rendered pathway diagram as PNG bytes."""
        response = self._get(f"get/{pathway_id}/image")
        content_type = response.headers.get("Content-Type", "")
        if content_type and not content_type.startswith("image/"):
            raise ExternalServiceError(
                self.service_name,
                f"Expected an image for {pathway_id}, got {content_type}",
            )
        return response.content


def parse_flat_file(text: str) -> Dict[str, List[str]]:
    """Split a KEGG flat-file record into keyword -> list of value lines."""
    sections: Dict[str, List[str]] = {}
    current: Optional[str] = None
    for line in text.splitlines():
        if line.startswith("///"):
            break
        keyword = line[:KEYWORD_WIDTH].strip()
        value = line[KEYWORD_WIDTH:].strip()
        if keyword:
            current = keyword
            sections.setdefault(current, [])
        if current is not None and value:
            sections[current].append(value)
    return sections


def parse_gene_line(line: str) -> PathwayGene:
    """Parse ``595  CCND1; cyclin D1 [KO:K04503]`` into a PathwayGene."""
    gene_id, _, rest = line.partition(" ")
    rest = BRACKETED.sub("", rest).strip()
    symbol, _, description = rest.partition(";")
    return PathwayGene(
        gene_id=gene_id,
        symbol=symbol.strip() or None,
        description=description.strip() or None,
    )
