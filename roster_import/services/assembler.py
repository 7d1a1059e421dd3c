from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date

from ..excel.headers import resolve_headers
from ..models.header_map import HeaderMap
from ..models.row_result import AssembledRow, RowOutcome, RowRejected
from ..models.student import StudentRecord
from .admission import build_admission_number
from .class_matcher import ClassMatcher
from .normalizers import normalize_date, parse_boolean_like, parse_fee

"""Row assembler & validator: one sheet row -> StudentRecord or RowRejected.

Rules:
- no admission number and no name: blank separator row, skipped silently
- name missing: rejected
- class unresolved: rejected (row number, sheet and label in the reason)
- class resolved but outside a class-page scope: skipped silently
- admission number missing: synthesized, never a rejection on its own
- father name / phone missing: sentinels "N/A" / "0000000000"
"""

__all__ = [
    "FATHER_NAME_PLACEHOLDER",
    "FATHER_PHONE_PLACEHOLDER",
    "RowAssembler",
    "SheetAssembly",
]

FATHER_NAME_PLACEHOLDER = "N/A"
FATHER_PHONE_PLACEHOLDER = "0000000000"
STUDENT_TYPES = ("old", "new")


@dataclass
class SheetAssembly:
    sheet_name: str
    rows: list[AssembledRow] = field(default_factory=list)
    rejections: list[RowRejected] = field(default_factory=list)
    blank_rows: int = 0
    out_of_scope: int = 0

    @property
    def synthesized(self) -> int:
        return sum(1 for r in self.rows if r.synthesized)


class RowAssembler:
    def __init__(self, matcher: ClassMatcher, today: date | None = None) -> None:
        self.matcher = matcher
        self.today = today or date.today()

    def assemble_sheet(self, rows: Sequence[Sequence[str]], sheet_name: str) -> SheetAssembly:
        """Assemble every data row of one sheet.

        Raises EmptyOrHeaderlessError (from resolve_headers) for a sheet
        without header or data rows.
        """
        headers = resolve_headers(rows, sheet_name)
        result = SheetAssembly(sheet_name=sheet_name)
        for idx in range(headers.header_row_index + 1, len(rows)):
            row = rows[idx]
            if not any(str(c or "").strip() for c in row):
                result.blank_rows += 1
                continue
            outcome = self.assemble(row, headers, sheet_name, idx + 1)
            if isinstance(outcome, AssembledRow):
                result.rows.append(outcome)
            elif isinstance(outcome, RowRejected):
                result.rejections.append(outcome)
            elif self._is_blank(row, headers):
                result.blank_rows += 1
            else:
                result.out_of_scope += 1
        return result

    @staticmethod
    def _is_blank(row: Sequence[str], headers: HeaderMap) -> bool:
        return not headers.cell(row, "admission_number") and not headers.cell(row, "full_name")

    def assemble(
        self,
        row: Sequence[str],
        headers: HeaderMap,
        sheet_name: str,
        row_number: int,
    ) -> RowOutcome:
        admission_raw = headers.cell(row, "admission_number")
        full_name = headers.cell(row, "full_name")
        if not admission_raw and not full_name:
            return None
        if not full_name:
            return RowRejected(sheet_name, row_number, "Missing Full Name")

        label = headers.cell(row, "class")
        entity = self.matcher.match(label, sheet_name)
        if entity is None:
            return RowRejected(
                sheet_name, row_number, f'Class "{label or sheet_name}" not found in system'
            )
        if not self.matcher.in_scope(entity):
            return None

        dob = normalize_date(headers.cell(row, "dob"))
        father_phone = headers.cell(row, "father_phone")
        admission = build_admission_number(
            raw=admission_raw,
            full_name=full_name,
            father_phone=father_phone,
            dob=dob,
            class_label=entity.name,
            sheet_name=sheet_name,
            row_number=row_number,
        )

        if "term1_fee" in headers:
            term1 = parse_fee(headers.cell(row, "term1_fee"))
        else:
            # single "total fees" column books against term 1
            term1 = parse_fee(headers.cell(row, "total_fee"))

        student_type = headers.cell(row, "student_type").lower()
        if student_type not in STUDENT_TYPES:
            student_type = "new"

        record = StudentRecord(
            admission_number=admission.value,
            full_name=full_name,
            class_id=entity.id,
            roll_number=headers.cell(row, "roll_number") or None,
            gender=headers.cell(row, "gender") or None,
            father_name=headers.cell(row, "father_name") or FATHER_NAME_PLACEHOLDER,
            father_phone=father_phone or FATHER_PHONE_PLACEHOLDER,
            mother_name=headers.cell(row, "mother_name") or None,
            mother_phone=headers.cell(row, "mother_phone") or None,
            dob=dob,
            aadhaar=headers.cell(row, "aadhaar") or None,
            address=headers.cell(row, "address") or None,
            parent_email=headers.cell(row, "parent_email") or None,
            term1_fee=term1,
            term2_fee=parse_fee(headers.cell(row, "term2_fee")),
            term3_fee=parse_fee(headers.cell(row, "term3_fee")),
            books_fee=parse_fee(headers.cell(row, "books_fee")),
            transport_fee=parse_fee(headers.cell(row, "transport_fee")),
            old_dues=parse_fee(headers.cell(row, "old_dues")),
            has_books=parse_boolean_like(headers.cell(row, "has_books")),
            has_transport=parse_boolean_like(headers.cell(row, "has_transport")),
            student_type=student_type,
            joining_date=normalize_date(headers.cell(row, "joining_date")) or self.today.isoformat(),
        )
        return AssembledRow(
            record=record,
            class_name=entity.name,
            synthesized=admission.generated,
            sheet_name=sheet_name,
            row_number=row_number,
        )
