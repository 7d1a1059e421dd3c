from __future__ import annotations

from collections.abc import Iterable

from ..excel.reader import CSV_SHEET_NAME
from ..models.class_entity import ClassEntity, ImportScope
from .normalizers import normalize_class_name, normalize_class_token

"""Class matcher: free-text class label -> known ClassEntity.

Resolution order, first hit wins:
1. case-insensitive exact name
2. alphanumeric-only name
3. class token ("Class 5" == "class5" == "V")
4. steps 1-3 against the sheet name when the row has no class label
5. on a class page, a CSV upload falls back to that page's class
"""

__all__ = [
    "ClassMatcher",
]


class ClassMatcher:
    def __init__(self, classes: Iterable[ClassEntity], scope: ImportScope | None = None) -> None:
        self.classes: tuple[ClassEntity, ...] = tuple(classes)
        self.scope = scope or ImportScope.all_classes()
        self._lower = [(c.name.strip().lower(), c) for c in self.classes]
        self._normalized = [(normalize_class_name(c.name), c) for c in self.classes]
        self._tokens = [(normalize_class_token(c.name), c) for c in self.classes]
        self._scope_token = (
            normalize_class_token(self.scope.class_name) if self.scope.class_name else ""
        )

    def match_label(self, label: str | None) -> ClassEntity | None:
        """Steps 1-3 for a single label."""
        raw = str(label or "").strip()
        if not raw:
            return None
        lowered = raw.lower()
        for name, entity in self._lower:
            if name == lowered:
                return entity
        normalized = normalize_class_name(raw)
        for name, entity in self._normalized:
            if name == normalized:
                return entity
        token = normalize_class_token(raw)
        if token:
            return self.by_token(token)
        return None

    def by_token(self, token: str) -> ClassEntity | None:
        for candidate, entity in self._tokens:
            if candidate == token:
                return entity
        return None

    def match(self, label: str | None, sheet_name: str | None = None) -> ClassEntity | None:
        entity = self.match_label(label)
        if entity is not None:
            return entity
        if not str(label or "").strip() and sheet_name:
            entity = self.match_label(sheet_name)
            if entity is not None:
                return entity
        if self._scope_token and (not sheet_name or sheet_name == CSV_SHEET_NAME):
            return self.by_token(self._scope_token)
        return None

    def in_scope(self, entity: ClassEntity) -> bool:
        """False when a class-page import meets a row of another class."""
        if not self._scope_token:
            return True
        return normalize_class_token(entity.name) == self._scope_token
