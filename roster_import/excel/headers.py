from __future__ import annotations

import re
from collections.abc import Sequence

from roster_import.models.header_map import HeaderMap

"""Header resolver: locate the header row and map column spellings to fields.

Header text is normalized to lowercase alphanumerics ("Admission No." ->
"admissionno", "admission_number" -> "admissionnumber") and matched exactly
against FIELD_ALIASES. For each field the aliases are tried in order; the
first alias present in the header wins, and if the header repeats a column
the first occurrence wins.
"""

__all__ = [
    "EmptyOrHeaderlessError",
    "FIELD_ALIASES",
    "TEMPLATE_HEADERS",
    "find_header_row",
    "normalize_header",
    "resolve_headers",
]

_NON_ALNUM = re.compile(r"[^a-z0-9]")


class EmptyOrHeaderlessError(Exception):
    """Raised when a sheet has no header row or no data rows after it."""


FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "admission_number": (
        "admissionnumber", "admissionno", "admno", "id", "studentid", "regno",
        "admissionid", "srno", "studentregno",
    ),
    "full_name": ("fullname", "studentname", "name", "fullnames", "stname", "nameofstudent"),
    "class": ("class", "grade", "standard", "classname", "classsection", "currentclass"),
    "roll_number": ("rollnumber", "roll", "rollno"),
    "gender": ("gender", "sex"),
    "father_name": (
        "fathername", "fathersname", "father", "parentname", "guardianname", "fhname",
        "fathersfullname",
    ),
    "father_phone": (
        "fatherphone", "fathersphone", "fathermobilenumber", "fathermobile", "fathermobileno",
        "phone", "mobile", "mobilenumber", "mobileno", "contactnumber", "parentmobile",
        "parentphone", "phno", "contact", "whatsappnumber", "fathercontact",
    ),
    "mother_name": ("mothername", "mothersname"),
    "mother_phone": ("motherphone", "mothersphone", "mothermobilenumber", "mothermobile"),
    "dob": ("dob", "dateofbirth", "birthdate"),
    "aadhaar": ("aadhaarnumber", "aadharnumber", "aadhaar", "aadhar"),
    "address": ("address",),
    "parent_email": ("parentmailid", "parentemailid", "parentemail", "email"),
    "term1_fee": ("term1fee", "termifee", "term1"),
    "term2_fee": ("term2fee", "termiifee", "term2"),
    "term3_fee": ("term3fee", "termiiifee", "term3"),
    "total_fee": ("totalfees", "totalfee", "fees"),
    "books_fee": ("booksfee", "bookfee"),
    "has_books": ("bookfeeoption", "booksyesno", "hasbooks", "books"),
    "transport_fee": ("transportfee",),
    "has_transport": ("transportfeeoption", "transportyesno", "hastransport", "transport"),
    "old_dues": ("olddues",),
    "student_type": ("studenttypeoldnew", "studenttype"),
    "joining_date": ("dateofjoining", "joiningdate"),
}

# Column headers written by the download template; each resolves to a field above.
TEMPLATE_HEADERS: tuple[str, ...] = (
    "admission_number", "full_name", "class", "roll_number", "gender",
    "father_name", "father_phone", "mother_name", "mother_phone",
    "parent_mail_id", "aadhaar_number", "student_type", "date_of_joining",
    "dob", "address", "term1_fee", "term2_fee", "term3_fee",
    "book_fee_option", "books_fee", "transport_fee_option", "transport_fee", "old_dues",
)


def normalize_header(text: object) -> str:
    return _NON_ALNUM.sub("", str(text or "").strip().lower())


def find_header_row(rows: Sequence[Sequence[str]]) -> int:
    """Index of the first row with a non-empty cell, or -1."""
    for idx, row in enumerate(rows):
        if any(str(c or "").strip() for c in row):
            return idx
    return -1


def resolve_headers(rows: Sequence[Sequence[str]], sheet_name: str) -> HeaderMap:
    """Build the HeaderMap for one sheet.

    Raises EmptyOrHeaderlessError when the sheet has no non-empty row or when
    the header row is the last row.
    """
    header_idx = find_header_row(rows)
    if header_idx == -1 or header_idx == len(rows) - 1:
        raise EmptyOrHeaderlessError(f"{sheet_name}: File is empty or missing headers")

    positions: dict[str, int] = {}
    for col, cell in enumerate(rows[header_idx]):
        token = normalize_header(cell)
        if token and token not in positions:
            positions[token] = col

    columns: dict[str, int] = {}
    for field, aliases in FIELD_ALIASES.items():
        for alias in aliases:
            if alias in positions:
                columns[field] = positions[alias]
                break
    return HeaderMap(columns=columns, header_row_index=header_idx)
