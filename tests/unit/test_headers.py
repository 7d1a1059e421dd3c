from __future__ import annotations

import pytest

from roster_import.excel.headers import (
    FIELD_ALIASES,
    TEMPLATE_HEADERS,
    EmptyOrHeaderlessError,
    find_header_row,
    normalize_header,
    resolve_headers,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("Admission No.", "admissionno"),
        ("admission_number", "admissionnumber"),
        ("  Student Name ", "studentname"),
        ("Father's Mobile No", "fathersmobileno"),
        ("Term-1 Fee", "term1fee"),
        (None, ""),
    ],
)
def test_normalize_header(raw, expected):
    assert normalize_header(raw) == expected


def test_find_header_row_skips_leading_blank_rows():
    assert find_header_row([[], ["", " "], ["name"], ["Asha"]]) == 2
    assert find_header_row([[], [""]]) == -1


def test_aliases_resolve_to_same_fields():
    canonical = resolve_headers([["admission_number", "full_name", "class"], ["A1", "Asha", "3"]], "CSV")
    aliased = resolve_headers([["Adm No", "Student Name", "Grade"], ["A1", "Asha", "3"]], "CSV")
    assert dict(canonical.columns) == dict(aliased.columns) == {
        "admission_number": 0,
        "full_name": 1,
        "class": 2,
    }


def test_header_row_index_recorded():
    headers = resolve_headers([[], ["Name", "Class"], ["Asha", "Class 3"]], "Sheet1")
    assert headers.header_row_index == 1
    assert headers.columns["full_name"] == 0


def test_alias_order_decides_between_two_matching_columns():
    # "fatherphone" precedes the generic "phone" alias
    headers = resolve_headers([["Phone", "Father Phone", "Name"], ["1", "2", "x"]], "CSV")
    assert headers.columns["father_phone"] == 1


def test_repeated_column_first_occurrence_wins():
    headers = resolve_headers([["Name", "Name"], ["Asha", "Other"]], "CSV")
    assert headers.columns["full_name"] == 0


def test_unknown_columns_ignored():
    headers = resolve_headers([["Name", "Blood Group"], ["Asha", "O+"]], "CSV")
    assert set(headers.columns) == {"full_name"}


def test_total_fee_and_flags_resolve():
    headers = resolve_headers(
        [["Total Fees", "Books (Yes/No)", "Transport Fee Option", "Student Type (Old/New)"], ["1"]],
        "CSV",
    )
    assert headers.columns == {
        "total_fee": 0,
        "has_books": 1,
        "has_transport": 2,
        "student_type": 3,
    }


@pytest.mark.parametrize("rows", [[], [[], [""]], [["full_name", "class"]]])
def test_empty_or_header_only_sheet_raises(rows):
    with pytest.raises(EmptyOrHeaderlessError) as ei:
        resolve_headers(rows, "Class 3")
    assert str(ei.value) == "Class 3: File is empty or missing headers"


def test_template_headers_all_resolve():
    headers = resolve_headers([list(TEMPLATE_HEADERS), ["x"]], "CSV")
    assert len(headers.columns) == len(TEMPLATE_HEADERS)
    assert set(headers.columns) <= set(FIELD_ALIASES)
