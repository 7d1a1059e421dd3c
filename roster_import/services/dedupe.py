from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import TypeVar

from ..models.row_result import AssembledRow

"""In-file deduplication and batch slicing for the upsert step."""

__all__ = [
    "chunked",
    "dedupe_records",
]

T = TypeVar("T")


def dedupe_records(rows: Iterable[AssembledRow]) -> list[AssembledRow]:
    """Collapse rows sharing (class_id, lower(admission_number)).

    Last row wins; the surviving row keeps the position of the first one.
    """
    unique: dict[tuple[str, str], AssembledRow] = {}
    for row in rows:
        unique[row.record.dedupe_key] = row
    return list(unique.values())


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    if size < 1:
        raise ValueError(f"batch size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield items[start:start + size]
