from __future__ import annotations

from datetime import datetime

import pytest

from roster_import.excel.reader import (
    CSV_SHEET_NAME,
    TabularDecodeError,
    TabularFormat,
    UnsupportedFormatError,
    detect_format,
    read_tabular,
)


@pytest.mark.parametrize(
    "name,expected",
    [
        ("students.csv", TabularFormat.CSV),
        ("students.xlsx", TabularFormat.EXCEL),
        ("legacy.xls", TabularFormat.EXCEL),
        ("UPPER.XLSX", TabularFormat.EXCEL),
    ],
)
def test_detect_format_by_extension(name, expected):
    assert detect_format(name) is expected


def test_unsupported_extension_rejected_before_parsing():
    with pytest.raises(UnsupportedFormatError) as ei:
        read_tabular("students.txt", b"admission_number,full_name\n")
    assert ".txt" in str(ei.value)


def test_csv_single_sheet_named_csv():
    sheets = read_tabular("s.csv", b"admission_number,full_name,class\nA1,Asha,Class 3\n")
    assert list(sheets) == [CSV_SHEET_NAME]
    assert sheets["CSV"] == [["admission_number", "full_name", "class"], ["A1", "Asha", "Class 3"]]


def test_csv_bom_is_stripped(make_csv):
    data = make_csv([["admission_number", "full_name"], ["A1", "Asha"]], bom=True)
    rows = read_tabular("s.csv", data)["CSV"]
    assert rows[0][0] == "admission_number"


def test_csv_blank_lines_keep_row_positions():
    rows = read_tabular("s.csv", b"full_name,class\n\nAsha,Class 3\n,\n\n")["CSV"]
    # line 2 is blank, trailing blank lines are dropped
    assert rows == [["full_name", "class"], [], ["Asha", "Class 3"]]


def test_csv_cells_are_strings_and_not_na_converted():
    rows = read_tabular("s.csv", b"full_name,father_phone,gender\nNA,0987654321,null\n")["CSV"]
    assert rows[1] == ["NA", "0987654321", "null"]


def test_csv_short_rows_kept_short():
    rows = read_tabular("s.csv", b"a,b,c\n1\n")["CSV"]
    assert rows == [["a", "b", "c"], ["1"]]


def test_empty_csv_yields_no_rows():
    assert read_tabular("s.csv", b"") == {"CSV": []}


def test_csv_accepts_text_content():
    rows = read_tabular("s.csv", "full_name\nÅsa\n")["CSV"]
    assert rows == [["full_name"], ["Åsa"]]


def test_csv_invalid_utf8_raises_decode_error():
    with pytest.raises(TabularDecodeError):
        read_tabular("s.csv", b"full_name\n\xe9t\xe9\n")


def test_csv_trailing_empty_cells_trimmed():
    assert read_tabular("s.csv", b"a,b\n1,2,,\n")["CSV"] == [["a", "b"], ["1", "2"]]


def test_csv_rows_wider_than_header_are_kept():
    rows = read_tabular("s.csv", b"a,b\n1,2,stray\n")["CSV"]
    assert rows == [["a", "b"], ["1", "2", "stray"]]


def test_csv_quoted_delimiter_and_escaped_quotes():
    data = b'full_name,address\nAsha,"12, ""Main"" St"\n'
    rows = read_tabular("s.csv", data)["CSV"]
    assert rows[1] == ["Asha", '12, "Main" St']


def test_xlsx_sheets_in_workbook_order(make_xlsx):
    data = make_xlsx(
        {
            "Class 3": [["full_name"], ["Asha"]],
            "Class 5": [["full_name"], ["Ravi"]],
        }
    )
    sheets = read_tabular("roster.xlsx", data)
    assert list(sheets) == ["Class 3", "Class 5"]
    assert sheets["Class 5"] == [["full_name"], ["Ravi"]]


def test_xlsx_typed_cells_become_text(make_xlsx):
    data = make_xlsx(
        {
            "Sheet1": [
                ["full_name", "father_phone", "term1_fee", "dob"],
                ["Asha", 9876543210, 1500.5, datetime(2018, 5, 15)],
            ]
        }
    )
    rows = read_tabular("roster.xlsx", data)["Sheet1"]
    assert rows[1] == ["Asha", "9876543210", "1500.5", "2018-05-15"]


def test_xlsx_integral_float_loses_decimal_point(make_xlsx):
    data = make_xlsx({"Sheet1": [["term1_fee"], [15000.0]]})
    assert read_tabular("roster.xlsx", data)["Sheet1"][1] == ["15000"]


def test_corrupt_workbook_raises_decode_error():
    with pytest.raises(TabularDecodeError):
        read_tabular("roster.xlsx", b"this is not a zip archive")


def test_workbook_text_content_rejected():
    with pytest.raises(TabularDecodeError):
        read_tabular("roster.xlsx", "full_name\nAsha\n")
