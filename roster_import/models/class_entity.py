from __future__ import annotations

from dataclasses import dataclass

"""Class entities and import scope.

The class list is fetched once before an import starts and treated as an
immutable snapshot; the importer never creates classes.
"""

__all__ = [
    "ALL_CLASSES",
    "ClassEntity",
    "ImportScope",
]

ALL_CLASSES = "all"


@dataclass(frozen=True)
class ClassEntity:
    id: str
    name: str
    sort_order: int = 0


@dataclass(frozen=True)
class ImportScope:
    """Where the import was launched from.

    ``class_name`` is None for a global "all classes" import, otherwise the
    name of the class whose page started the upload.
    """
    class_name: str | None = None

    @staticmethod
    def all_classes() -> ImportScope:
        return ImportScope(class_name=None)

    @staticmethod
    def for_class(name: str | None) -> ImportScope:
        if not name or name.strip().lower() == ALL_CLASSES:
            return ImportScope(class_name=None)
        return ImportScope(class_name=name.strip())
