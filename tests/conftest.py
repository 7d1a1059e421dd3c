# Shared pytest fixtures
from __future__ import annotations

import io
import tempfile
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from roster_import.logging.error_log import ErrorLogBuffer
from roster_import.models.class_entity import ClassEntity
from roster_import.models.student import STUDENT_COLUMNS


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """batch_size: 100
students_table: students
classes_table: classes
error_log_dir: ./logs
timezone: UTC
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: schooldb
classes:
  - {id: nur, name: Nursery, sort_order: 1}
  - {id: c1, name: Class 1, sort_order: 4}
  - {id: c3, name: Class 3, sort_order: 6}
  - {id: c5, name: Class 5, sort_order: 8}
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "import.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def classes() -> tuple[ClassEntity, ...]:
    names = ["Nursery", "LKG", "UKG"] + [f"Class {n}" for n in range(1, 11)]
    ids = ["nur", "lkg", "ukg"] + [f"c{n}" for n in range(1, 11)]
    return tuple(
        ClassEntity(id=i, name=n, sort_order=order)
        for order, (i, n) in enumerate(zip(ids, names, strict=True), start=1)
    )


@pytest.fixture()
def error_log(tmp_path: Path) -> ErrorLogBuffer:
    return ErrorLogBuffer(tmp_path / "logs")


def _make_csv(rows: list[list[Any]], bom: bool = False) -> bytes:
    buf = io.StringIO()
    pd.DataFrame(rows).to_csv(buf, header=False, index=False, lineterminator="\n")
    text = buf.getvalue()
    return (("﻿" + text) if bom else text).encode("utf-8")


def _make_xlsx(sheets: dict[str, list[list[Any]]]) -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return buf.getvalue()


class UpsertStore:
    """Cursor double that applies ON CONFLICT (class_id, admission_number) upserts in memory."""

    def __init__(self, fail_on_batch: int | None = None, pgcode: str | None = None) -> None:
        self.statements: list[str] = []
        self.students: dict[tuple[str, str], dict[str, Any]] = {}
        self.batches: list[int] = []
        self.fail_on_batch = fail_on_batch  # 1-based
        self.pgcode = pgcode
        self._pending: dict[tuple[str, str], dict[str, Any]] = {}

    def execute(self, sql: str, params: Any = None) -> None:
        self.statements.append(sql)
        if sql == "COMMIT":
            self.students.update(self._pending)
            self._pending = {}
        elif sql == "ROLLBACK":
            self._pending = {}

    def upsert(self, sql: str, rows: list[tuple[Any, ...]]) -> None:
        self.statements.append(sql)
        self.batches.append(len(rows))
        if self.fail_on_batch is not None and len(self.batches) == self.fail_on_batch:
            err = RuntimeError("there is no unique or exclusion constraint for the ON CONFLICT columns")
            err.pgcode = self.pgcode  # type: ignore[attr-defined]
            raise err
        for values in rows:
            row = dict(zip(STUDENT_COLUMNS, values, strict=True))
            self._pending[(row["class_id"], row["admission_number"])] = row


@pytest.fixture()
def upsert_store(monkeypatch) -> UpsertStore:
    import roster_import.db.batch_upsert as bu

    store = UpsertStore()

    def fake_execute_values(cursor, sql, rows, page_size=100, template=None):
        cursor.upsert(sql, rows)

    monkeypatch.setattr(bu, "execute_values", fake_execute_values)
    return store


@pytest.fixture()
def make_csv():
    return _make_csv


@pytest.fixture()
def make_xlsx():
    return _make_xlsx


@pytest.fixture(autouse=True)
def _fresh_logging():
    from roster_import.logging.init import reset_logging

    reset_logging()
    yield
    reset_logging()
