from __future__ import annotations

from typing import Any

from roster_import.models.class_entity import ClassEntity

from .batch_upsert import validate_identifier

"""Class list prefetch.

One SELECT before the import starts; the result is an immutable snapshot for
the whole run.
"""


class ClassFetchError(Exception):
    pass


def fetch_classes(cursor: Any, table: str = "classes") -> tuple[ClassEntity, ...]:
    validate_identifier(table)
    try:
        cursor.execute(f"SELECT id, name, sort_order FROM {table} ORDER BY sort_order")
        rows = cursor.fetchall()
    except Exception as e:
        raise ClassFetchError(f"could not load classes: {e}") from e
    classes = tuple(
        ClassEntity(id=str(r[0]), name=str(r[1]), sort_order=int(r[2] or 0)) for r in rows
    )
    if not classes:
        raise ClassFetchError(f"no classes found in table '{table}'")
    return classes
