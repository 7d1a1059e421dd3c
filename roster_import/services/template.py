from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

import pandas as pd

from ..excel.headers import TEMPLATE_HEADERS
from ..models.class_entity import ClassEntity

"""Download-template CSV: the canonical header row plus one example per class."""

_EXAMPLE = {
    "full_name": "John Doe",
    "gender": "Male",
    "father_name": "Robert Doe",
    "father_phone": "9876543210",
    "mother_name": "Mary Doe",
    "mother_phone": "9876543211",
    "parent_mail_id": "parent@example.com",
    "aadhaar_number": "123456789012",
    "student_type": "new",
    "date_of_joining": "2024-06-01",
    "dob": "2018-05-15",
    "address": "123 Main St",
    "term1_fee": "15000",
    "term2_fee": "15000",
    "term3_fee": "15000",
    "book_fee_option": "yes",
    "books_fee": "2500",
    "transport_fee_option": "yes",
    "transport_fee": "5000",
    "old_dues": "0",
}


def build_template(classes: Sequence[ClassEntity]) -> str:
    names = [c.name for c in classes] or ["Class 1"]
    rows = []
    for idx, name in enumerate(names, start=1):
        row = dict(_EXAMPLE)
        row["admission_number"] = f"ADM{idx:03d}"
        row["class"] = name
        row["roll_number"] = "1"
        rows.append(row)
    df = pd.DataFrame(rows, columns=list(TEMPLATE_HEADERS))
    return df.to_csv(index=False, lineterminator="\n")


def write_template(path: Path, classes: Sequence[ClassEntity]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(build_template(classes), encoding="utf-8")
    return path
