from __future__ import annotations

from dataclasses import astuple, dataclass, fields

"""StudentRecord model: one normalized, typed roster row ready for upsert.

Column order of STUDENT_COLUMNS follows the dataclass field order and is the
column list handed to the database writer.
"""

__all__ = [
    "CONFLICT_COLUMNS",
    "STUDENT_COLUMNS",
    "StudentRecord",
]


@dataclass(frozen=True)
class StudentRecord:
    """Candidate student record produced by the row assembler."""
    admission_number: str  # unique within a class (synthesized when the file has none)
    full_name: str
    class_id: str
    roll_number: str | None = None
    gender: str | None = None
    father_name: str = "N/A"
    father_phone: str = "0000000000"
    mother_name: str | None = None
    mother_phone: str | None = None
    dob: str | None = None  # YYYY-MM-DD
    aadhaar: str | None = None
    address: str | None = None
    parent_email: str | None = None
    term1_fee: float = 0.0
    term2_fee: float = 0.0
    term3_fee: float = 0.0
    books_fee: float = 0.0
    transport_fee: float = 0.0
    old_dues: float = 0.0
    has_books: bool = False
    has_transport: bool = False
    student_type: str = "new"  # old | new
    joining_date: str | None = None  # YYYY-MM-DD, filled with import date by the assembler
    is_active: bool = True
    status: str = "active"

    @property
    def dedupe_key(self) -> tuple[str, str]:
        return (self.class_id, self.admission_number.lower())

    def as_row(self) -> tuple[object, ...]:
        return astuple(self)


STUDENT_COLUMNS: tuple[str, ...] = tuple(f.name for f in fields(StudentRecord))
CONFLICT_COLUMNS: tuple[str, ...] = ("class_id", "admission_number")
