"""Domain models for the student roster importer.

Classes, header maps, candidate student records, per-row outcomes, the error
log record and the import result.
"""

from .class_entity import ClassEntity, ImportScope
from .config_models import ClassSeed, DatabaseConfig, ImportConfig
from .error_record import ErrorRecord
from .header_map import HeaderMap
from .import_result import BatchStatsAccumulator, ImportResult, ImportStatus
from .row_result import AssembledRow, RowRejected
from .student import CONFLICT_COLUMNS, STUDENT_COLUMNS, StudentRecord

__all__ = [
    # Configuration models
    "ClassSeed",
    "DatabaseConfig",
    "ImportConfig",
    # Domain models
    "ClassEntity",
    "ImportScope",
    "HeaderMap",
    "StudentRecord",
    "STUDENT_COLUMNS",
    "CONFLICT_COLUMNS",
    # Processing models
    "AssembledRow",
    "RowRejected",
    "ErrorRecord",
    "ImportResult",
    "ImportStatus",
    "BatchStatsAccumulator",
]
