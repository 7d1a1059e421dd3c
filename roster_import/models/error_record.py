from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the import error log.

Every rejected row, header-less sheet and persistence failure becomes one
ErrorRecord. row=-1 marks file-level or sheet-level errors where no single
row applies. The serialized key set is fixed (see tests/contract).
"""

__all__ = [
    "ERROR_TYPES",
    "ErrorRecord",
]

ERROR_TYPES = frozenset(
    {
        "UNSUPPORTED_FORMAT",
        "DECODE_ERROR",
        "EMPTY_OR_HEADERLESS",
        "ROW_REJECTED",
        "PERSISTENCE_FAILURE",
        "NO_RECOGNIZED_DATA",
    }
)


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: uploaded file name
        sheet: sheet name ("CSV" for CSV uploads)
        row: Row number (1-based). -1 for file-level errors
        error_type: one of ERROR_TYPES
        message: human readable reason, as shown to the administrator
    """
    timestamp: str  # ISO8601 UTC
    file: str
    sheet: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, sheet: str, row: int, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            row=row,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
