from __future__ import annotations

import csv
import io
import math
from collections.abc import Iterable
from datetime import date, datetime
from enum import Enum
from pathlib import PurePath
from typing import Any

import pandas as pd

"""Tabular decoder: uploaded bytes -> sheets of string cells.

Excel is decoded with pandas (openpyxl for .xlsx, xlrd for .xls) and CSV
with the csv module (rows may be of any width); both are flattened to lists of stripped strings so
that header resolution and row assembly never see pandas types:

- missing cells -> ""
- date / datetime cells -> "YYYY-MM-DD"
- integral floats -> integer text (phone numbers stored as numbers stay intact)
- all-empty rows become [] (skipped by the header resolver and the row
  assembler), trailing empty rows and cells are trimmed

A CSV upload yields a single sheet named "CSV".
"""

__all__ = [
    "CSV_SHEET_NAME",
    "TabularDecodeError",
    "TabularFormat",
    "UnsupportedFormatError",
    "detect_format",
    "read_tabular",
]

CSV_SHEET_NAME = "CSV"

Rows = list[list[str]]


class UnsupportedFormatError(Exception):
    """Raised when the file extension is not .csv, .xls or .xlsx."""


class TabularDecodeError(Exception):
    """Raised when a supported file cannot be parsed at all."""


class TabularFormat(Enum):
    CSV = "csv"
    EXCEL = "excel-workbook"


_EXTENSIONS = {
    ".csv": TabularFormat.CSV,
    ".xls": TabularFormat.EXCEL,
    ".xlsx": TabularFormat.EXCEL,
}

_EXCEL_ENGINES = {
    ".xls": "xlrd",
    ".xlsx": "openpyxl",
}


def detect_format(file_name: str) -> TabularFormat:
    suffix = PurePath(file_name).suffix.lower()
    fmt = _EXTENSIONS.get(suffix)
    if fmt is None:
        raise UnsupportedFormatError(
            f"unsupported file type '{suffix or file_name}': upload a .csv, .xls or .xlsx file"
        )
    return fmt


def read_tabular(file_name: str, data: bytes | str) -> dict[str, Rows]:
    """Decode an uploaded file into {sheet name: rows of string cells}.

    Parameters
    ----------
    file_name: declared upload name, only its extension is used
    data: raw file content (str accepted for CSV)

    Raises
    ------
    UnsupportedFormatError: before any parsing when the extension is unknown
    TabularDecodeError: when pandas cannot parse the content
    """
    fmt = detect_format(file_name)
    if fmt is TabularFormat.CSV:
        return {CSV_SHEET_NAME: _read_csv(data)}
    if isinstance(data, str):
        raise TabularDecodeError(f"{file_name}: Excel content must be bytes")
    engine = _EXCEL_ENGINES[PurePath(file_name).suffix.lower()]
    return _read_workbook(data, engine)


def _read_csv(data: bytes | str) -> Rows:
    try:
        text = data.decode("utf-8-sig") if isinstance(data, bytes) else data.lstrip("\ufeff")
    except UnicodeDecodeError as e:
        raise TabularDecodeError(f"could not parse CSV: {e}") from e
    try:
        parsed = list(csv.reader(io.StringIO(text, newline="")))
    except csv.Error as e:
        raise TabularDecodeError(f"could not parse CSV: {e}") from e
    return _trim_rows([cell.strip() for cell in row] for row in parsed)


def _read_workbook(data: bytes, engine: str) -> dict[str, Rows]:
    try:
        xls = pd.ExcelFile(io.BytesIO(data), engine=engine)
    except Exception as e:  # openpyxl / xlrd raise a variety of types for corrupt files
        raise TabularDecodeError(f"could not open workbook: {e}") from e
    sheets: dict[str, Rows] = {}
    with xls:
        for name in xls.sheet_names:
            # header=None: the header row is located later, it is not always row 1
            df = xls.parse(name, header=None, keep_default_na=False)
            sheets[str(name)] = _frame_to_rows(df)
    return sheets


def _frame_to_rows(df: pd.DataFrame) -> Rows:
    return _trim_rows([_cell_text(v) for v in raw] for raw in df.itertuples(index=False, name=None))


def _trim_rows(raw_rows: Iterable[list[str]]) -> Rows:
    # Blank rows stay as [] so that row numbers match the spreadsheet lines.
    rows: Rows = []
    for cells in raw_rows:
        while cells and cells[-1] == "":
            cells.pop()
        rows.append(cells)
    while rows and not rows[-1]:
        rows.pop()
    return rows


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    if isinstance(value, (datetime, date)):  # also pd.Timestamp
        return value.strftime("%Y-%m-%d")
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isinf(value):
            return ""
        if value.is_integer():
            return str(int(value))
        return str(value)
    return str(value).strip()
