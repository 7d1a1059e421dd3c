from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from typing import Any, Protocol

"""Audit trail collaborator.

The pipeline receives an AuditLog instead of reaching for a process-wide
logger object, so callers (and tests) decide where audit entries go.
"""

__all__ = [
    "AuditEntry",
    "AuditLog",
    "LoggingAuditLog",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditEntry:
    user_id: str
    action: str
    resource: str
    details: dict[str, Any] = field(default_factory=dict)
    timestamp: str = ""

    @staticmethod
    def create(user_id: str, action: str, resource: str, details: dict[str, Any] | None = None) -> AuditEntry:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return AuditEntry(
            user_id=user_id,
            action=action,
            resource=resource,
            details=dict(details or {}),
            timestamp=ts,
        )


class AuditLog(Protocol):
    def log(self, entry: AuditEntry) -> None: ...


class LoggingAuditLog:
    """Default AuditLog: one INFO line per entry."""

    def __init__(self, target: logging.Logger | None = None) -> None:
        self._logger = target or logger

    def log(self, entry: AuditEntry) -> None:
        self._logger.info("[AUDIT] %s", json.dumps(asdict(entry), ensure_ascii=False, default=str))
