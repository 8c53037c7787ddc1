"""
Identifier mapping backed by a tab-delimited table.

The table has a header row naming its columns; any column can serve as a
key type. Cells holding several values separate them with ``;`` (for
example a list of PubMed ids).
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from annotrack.core.errors import ExternalServiceError
from annotrack.services.base import IdentifierMapper

logger = logging.getLogger(__name__)


class TableIdentifierMapper(IdentifierMapper):
    """
    Identifier mapping service over a local TSV table.

    Example:
        >>> mapper = TableIdentifierMapper("org_hs.tsv")
        >>> mapper.select(["7157"], columns=["SYMBOL", "PMID"], keytype="ENTREZID")
        [{'ENTREZID': '7157', 'SYMBOL': ['TP53'], 'PMID': ['2047879', '1631137']}]
    """

    service_name = "identifiers"

    def __init__(self, table_path: Union[str, Path], value_separator: str = ";"):
        self.table_path = Path(table_path)
        self.value_separator = value_separator
        self._columns: List[str] = []
        # keytype -> key value -> row indices
        self._index: Dict[str, Dict[str, List[int]]] = {}
        self._rows: List[Dict[str, str]] = []
        self._load()

    def _load(self) -> None:
        if not self.table_path.exists():
            raise ExternalServiceError(
                self.service_name, f"Mapping table not found: {self.table_path}"
            )

        try:
            with open(self.table_path, newline="", encoding="utf-8") as handle:
                reader = csv.DictReader(handle, delimiter="\t")
                fieldnames = reader.fieldnames
                rows = list(reader)
        except (OSError, UnicodeDecodeError, csv.Error) as e:
            raise ExternalServiceError(
                self.service_name, f"Cannot read mapping table {self.table_path}: {e}"
            ) from e

        if not fieldnames:
            raise ExternalServiceError(
                self.service_name, f"Mapping table has no header: {self.table_path}"
            )
        self._columns = [c.strip() for c in fieldnames]
        for row in rows:
            self._rows.append({
                column.strip(): (value or "").strip()
                for column, value in row.items()
                if column is not None
            })

        self._index = {column: {} for column in self._columns}
        for i, row in enumerate(self._rows):
            for column in self._columns:
                for value in self._split(row.get(column, "")):
                    self._index[column].setdefault(value, []).append(i)

        logger.debug(f"Loaded {len(self._rows)} mapping rows from {self.table_path}")

    def _split(self, cell: str) -> List[str]:
        return [v.strip() for v in cell.split(self.value_separator) if v.strip()]

    def keytypes(self) -> List[str]:
        return list(self._columns)

    def columns(self) -> List[str]:
        return list(self._columns)

    def select(
        self,
        keys: Sequence[str],
        columns: Sequence[str],
        keytype: str,
    ) -> List[Dict[str, Optional[List[str]]]]:
        """
        Map keys to columns.

        Raises:
            ExternalServiceError: If ``keytype`` or a requested column is unknown
        """
        if keytype not in self._index:
            raise ExternalServiceError(
                self.service_name,
                f"Unknown keytype '{keytype}'. Available: {', '.join(self._columns)}",
            )
        unknown = [c for c in columns if c not in self._index]
        if unknown:
            raise ExternalServiceError(
                self.service_name,
                f"Unknown column(s): {', '.join(unknown)}. Available: {', '.join(self._columns)}",
            )

        results: List[Dict[str, Optional[List[str]]]] = []
        for key in keys:
            row_ids = self._index[keytype].get(key, [])
            result: Dict[str, Optional[List[str]]] = {keytype: key}
            for column in columns:
                if column == keytype:
                    continue
                if not row_ids:
                    result[column] = None
                    continue
                values: List[str] = []
                for i in row_ids:
                    for value in self._split(self._rows[i].get(column, "")):
                        if value not in values:
                            values.append(value)
                result[column] = values
            results.append(result)
        return results
