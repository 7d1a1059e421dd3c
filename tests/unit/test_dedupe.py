from __future__ import annotations

import pytest

from roster_import.models.row_result import AssembledRow
from roster_import.models.student import StudentRecord
from roster_import.services.dedupe import chunked, dedupe_records


def _row(adm: str, name: str, class_id: str = "c3", line: int = 2) -> AssembledRow:
    return AssembledRow(
        record=StudentRecord(admission_number=adm, full_name=name, class_id=class_id),
        class_name="Class 3",
        synthesized=False,
        sheet_name="CSV",
        row_number=line,
    )


def test_last_duplicate_wins_first_position_kept():
    rows = [_row("A1", "Asha"), _row("B2", "Ravi"), _row("a1", "Asha R")]
    final = dedupe_records(rows)
    assert [r.record.full_name for r in final] == ["Asha R", "Ravi"]


def test_same_admission_in_other_class_is_distinct():
    final = dedupe_records([_row("A1", "Asha", "c3"), _row("A1", "Ravi", "c5")])
    assert len(final) == 2


def test_no_duplicates_order_preserved():
    rows = [_row(f"A{i}", f"S{i}") for i in range(5)]
    assert dedupe_records(rows) == rows


def test_chunked_slices_in_order():
    assert [list(c) for c in chunked([1, 2, 3, 4, 5], 2)] == [[1, 2], [3, 4], [5]]
    assert list(chunked([], 3)) == []


def test_chunked_rejects_non_positive_size():
    with pytest.raises(ValueError):
        list(chunked([1], 0))
