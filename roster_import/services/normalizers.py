from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta
from typing import Any

from dateutil import parser as date_parser

"""Field normalizers: raw cell text -> canonical typed values.

All functions are pure and never raise on bad input; a value that cannot be
interpreted normalizes to None (dates), False (flags) or 0.0 (fees).
"""

__all__ = [
    "EXCEL_EPOCH",
    "TRUTHY_TOKENS",
    "normalize_class_name",
    "normalize_class_token",
    "normalize_date",
    "parse_boolean_like",
    "parse_fee",
]

EXCEL_EPOCH = date(1899, 12, 30)

TRUTHY_TOKENS = frozenset({"yes", "y", "true", "1", "auto", "bus", "van", "schoolbus", "transport"})

PRESCHOOL_TOKENS = frozenset({"nursery", "lkg", "ukg"})

ROMAN_NUMERALS = {
    "i": "1",
    "ii": "2",
    "iii": "3",
    "iv": "4",
    "v": "5",
    "vi": "6",
    "vii": "7",
    "viii": "8",
    "ix": "9",
    "x": "10",
}

_SERIAL_RE = re.compile(r"^\d{5,}$")
_DMY_FULL_RE = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{4})$")
_DMY_SHORT_RE = re.compile(r"^(\d{1,2})[/\-.](\d{1,2})[/\-.](\d{2})$")
_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_NUMBER_PREFIX_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_NON_ALNUM = re.compile(r"[^a-z0-9]")
_DIGITS = re.compile(r"\d+")


def normalize_date(value: Any) -> str | None:
    """Normalize a date cell to ``YYYY-MM-DD``.

    Accepted, in order: date/datetime objects; Excel serials (5+ digits,
    epoch 1899-12-30); D/M/YYYY with '/', '-' or '.'; D/M/YY with a 50 pivot
    (>=50 -> 19xx); ISO YYYY-MM-DD unchanged; anything dateutil can parse.
    """
    if value is None:
        return None
    if isinstance(value, (datetime, date)):
        try:
            return value.strftime("%Y-%m-%d")
        except ValueError:  # pd.NaT
            return None
    text = str(value).strip()
    if not text:
        return None

    if _SERIAL_RE.match(text):
        try:
            return (EXCEL_EPOCH + timedelta(days=int(text))).isoformat()
        except OverflowError:
            return None

    m = _DMY_FULL_RE.match(text)
    if m:
        d, mo, y = m.groups()
        return _ymd(int(y), int(mo), int(d))

    m = _DMY_SHORT_RE.match(text)
    if m:
        d, mo, yy = m.groups()
        century = 1900 if int(yy) >= 50 else 2000
        return _ymd(century + int(yy), int(mo), int(d))

    if _ISO_RE.match(text):
        return text

    try:
        return date_parser.parse(text).date().isoformat()
    except (ValueError, OverflowError):
        return None


def _ymd(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_boolean_like(value: Any) -> bool:
    return str(value or "").strip().lower() in TRUTHY_TOKENS


def parse_fee(value: Any) -> float:
    """Leading numeric part of ``value`` as a non-negative float, else 0.0."""
    text = str(value if value is not None else "").strip().replace(",", "")
    m = _NUMBER_PREFIX_RE.match(text)
    if not m:
        return 0.0
    try:
        amount = float(m.group(0))
    except ValueError:
        return 0.0
    if not math.isfinite(amount) or amount < 0:
        return 0.0
    return amount


def normalize_class_name(value: Any) -> str:
    return _NON_ALNUM.sub("", str(value or "").lower())


def normalize_class_token(value: Any) -> str:
    """Join key for class matching: "Class 5", "class5", "CLASS-5", "V" -> "5"."""
    token = normalize_class_name(value)
    if token.startswith("class"):
        token = token[len("class"):]
    if not token:
        return ""
    if token in PRESCHOOL_TOKENS:
        return token
    if token in ROMAN_NUMERALS:
        return ROMAN_NUMERALS[token]
    digits = _DIGITS.search(token)
    if digits:
        return str(int(digits.group(0)))
    return token
