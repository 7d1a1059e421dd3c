from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass

"""HeaderMap model: canonical field name -> zero-based column index.

Built once per sheet by roster_import.excel.headers.resolve_headers; the row
assembler reads every cell through it.
"""

__all__ = [
    "HeaderMap",
]


@dataclass(frozen=True)
class HeaderMap:
    columns: Mapping[str, int]
    header_row_index: int = 0  # zero-based index of the header row in the sheet

    def __contains__(self, field: object) -> bool:
        return field in self.columns

    def cell(self, row: Sequence[str], field: str) -> str:
        """Trimmed text of ``field`` in ``row``; empty string if absent."""
        idx = self.columns.get(field)
        if idx is None or idx >= len(row):
            return ""
        value = row[idx]
        return value.strip() if value else ""
