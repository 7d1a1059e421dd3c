from __future__ import annotations

from dataclasses import dataclass

from .student import StudentRecord

"""Per-row outcome of the row assembler.

A row either becomes an AssembledRow or a RowRejected. Blank separator rows and
rows outside the import scope produce neither (the assembler returns None).
"""

__all__ = [
    "AssembledRow",
    "RowOutcome",
    "RowRejected",
]


@dataclass(frozen=True)
class AssembledRow:
    record: StudentRecord
    class_name: str  # resolved class name (for the classes-found count)
    synthesized: bool  # admission number was generated
    sheet_name: str
    row_number: int  # 1-based line in the source sheet


@dataclass(frozen=True)
class RowRejected:
    """A row that failed required-field validation. Never aborts the batch."""
    sheet_name: str
    row_number: int  # 1-based line in the source sheet
    reason: str

    def __str__(self) -> str:
        return f"{self.sheet_name} row {self.row_number}: {self.reason}"


RowOutcome = AssembledRow | RowRejected | None
