from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import Any

"""Batched UPSERT into the students table.

psycopg2.extras.execute_values with ``ON CONFLICT (...) DO UPDATE`` so that a
re-imported (class_id, admission_number) updates the existing student instead
of inserting a duplicate. The caller owns transaction boundaries and batch
slicing (one call per batch, see services.orchestrator).
"""

try:  # pragma: no cover - optional until psycopg2 present at runtime
    import psycopg2
    from psycopg2.extras import execute_values
except Exception:  # pragma: no cover
    psycopg2 = None  # type: ignore
    execute_values = None  # type: ignore

# SQLSTATE 42P10: no unique constraint matches the ON CONFLICT columns
MISSING_CONFLICT_TARGET = "42P10"


class BatchUpsertError(Exception):
    def __init__(self, message: str, pgcode: str | None = None) -> None:
        super().__init__(message)
        self.pgcode = pgcode


class PersistenceFailure(Exception):
    """An upsert batch failed; earlier batches stay committed.

    rows_committed is the length of the saved prefix of the deduplicated list.
    """

    def __init__(self, message: str, rows_committed: int, batches_committed: int) -> None:
        super().__init__(message)
        self.rows_committed = rows_committed
        self.batches_committed = batches_committed


@dataclass(frozen=True)
class BatchMetrics:
    """Timing of a single execute_values call."""
    batch_size: int
    elapsed_seconds: float
    start_time: float
    end_time: float


@dataclass(frozen=True)
class UpsertResult:
    upserted_rows: int


def validate_identifier(name: str) -> str:
    """Only alphanumerics and underscores are allowed in table/column names."""
    if not name or not name.replace("_", "").isalnum():
        raise BatchUpsertError(f"invalid SQL identifier: {name!r}")
    return name


def build_upsert_sql(table: str, columns: Sequence[str], conflict_columns: Sequence[str]) -> str:
    validate_identifier(table)
    for col in (*columns, *conflict_columns):
        validate_identifier(col)
    missing = [c for c in conflict_columns if c not in columns]
    if missing:
        raise BatchUpsertError(f"conflict columns not in column list: {missing}")

    cols_sql = ",".join(f'"{c}"' for c in columns)
    conflict_sql = ",".join(f'"{c}"' for c in conflict_columns)
    updates = [c for c in columns if c not in conflict_columns]
    if updates:
        set_sql = ",".join(f'"{c}"=EXCLUDED."{c}"' for c in updates)
        action = f"DO UPDATE SET {set_sql}"
    else:
        action = "DO NOTHING"
    return f"INSERT INTO {table} ({cols_sql}) VALUES %s ON CONFLICT ({conflict_sql}) {action}"


def batch_upsert(
    cursor: Any,
    table: str,
    columns: Sequence[str],
    rows: Iterable[Sequence[Any]],
    conflict_columns: Sequence[str],
    page_size: int = 100,
    metrics_callback: Callable[[BatchMetrics], None] | None = None,
) -> UpsertResult:
    """Upsert ``rows`` into ``table`` keyed on ``conflict_columns``.

    Parameters
    ----------
    cursor: psycopg2 cursor
    table: target table (validated identifier)
    columns: column order of every row
    rows: row value sequences
    conflict_columns: unique constraint columns for ON CONFLICT
    page_size: execute_values page size
    metrics_callback: receives BatchMetrics after the statement; not called for empty rows
    """
    if execute_values is None:
        raise BatchUpsertError("psycopg2 not available")

    rows_list = list(rows)
    if not rows_list:
        return UpsertResult(upserted_rows=0)

    sql = build_upsert_sql(table, columns, conflict_columns)

    start_time = time.time()
    try:
        execute_values(cursor, sql, rows_list, page_size=page_size)
    except Exception as e:
        raise BatchUpsertError(str(e), pgcode=getattr(e, "pgcode", None)) from e
    finally:
        end_time = time.time()
        if metrics_callback is not None:
            metrics_callback(
                BatchMetrics(
                    batch_size=len(rows_list),
                    elapsed_seconds=end_time - start_time,
                    start_time=start_time,
                    end_time=end_time,
                )
            )

    return UpsertResult(upserted_rows=len(rows_list))
