from __future__ import annotations

import string
from dataclasses import dataclass

from .normalizers import normalize_class_token

"""Admission-number synthesizer.

Rows without an admission number get ``AUTO-<CLASSTOKEN>-<7 base-36 chars>``,
a 32-bit FNV-1a hash of the row's identifying fields. The same row content in
the same file position always yields the same number, so re-uploading a file
updates the students it created instead of duplicating them.

Editing any hashed field (a corrected name, a new phone number) produces a
different number and therefore a second student on re-upload. Fix admission
numbers explicitly in the file rather than relying on re-synthesis.
"""

__all__ = [
    "AdmissionNumber",
    "AUTO_PREFIX",
    "build_admission_number",
    "stable_hash",
]

AUTO_PREFIX = "AUTO"
HASH_WIDTH = 7

FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
_MASK32 = 0xFFFFFFFF
_BASE36 = string.digits + string.ascii_uppercase


@dataclass(frozen=True)
class AdmissionNumber:
    value: str
    generated: bool


def stable_hash(text: str) -> str:
    """FNV-1a over UTF-16 code units, base-36, 7 chars."""
    h = FNV_OFFSET_BASIS
    units = text.encode("utf-16-le")
    for i in range(0, len(units), 2):
        h ^= units[i] | (units[i + 1] << 8)
        h = (h * FNV_PRIME) & _MASK32
    return _to_base36(h).rjust(HASH_WIDTH, "0")[:HASH_WIDTH]


def _to_base36(n: int) -> str:
    if n == 0:
        return "0"
    out = []
    while n:
        n, rem = divmod(n, 36)
        out.append(_BASE36[rem])
    return "".join(reversed(out))


def build_admission_number(
    raw: str | None,
    full_name: str,
    father_phone: str,
    dob: str | None,
    class_label: str,
    sheet_name: str,
    row_number: int,
) -> AdmissionNumber:
    cleaned = str(raw or "").strip()
    if cleaned:
        return AdmissionNumber(value=cleaned, generated=False)

    cls = normalize_class_token(class_label or sheet_name or "gen").upper() or "GEN"
    seed = "|".join(
        [
            cls,
            str(full_name or "").lower().strip(),
            str(father_phone or "").strip(),
            str(dob or "").strip(),
            str(sheet_name or "").lower().strip(),
            str(row_number),
        ]
    )
    return AdmissionNumber(value=f"{AUTO_PREFIX}-{cls}-{stable_hash(seed)}", generated=True)
