from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

from ..db.batch_upsert import (
    MISSING_CONFLICT_TARGET,
    BatchUpsertError,
    PersistenceFailure,
    batch_upsert,
)
from ..excel.headers import EmptyOrHeaderlessError
from ..excel.reader import TabularDecodeError, UnsupportedFormatError, read_tabular
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.class_entity import ClassEntity, ImportScope
from ..models.config_models import ImportConfig
from ..models.import_result import BatchStatsAccumulator, ImportResult, ImportStatus
from ..models.row_result import AssembledRow
from ..models.student import CONFLICT_COLUMNS, STUDENT_COLUMNS
from .assembler import RowAssembler
from .audit import AuditEntry, AuditLog, LoggingAuditLog
from .class_matcher import ClassMatcher
from .dedupe import chunked, dedupe_records
from .progress import BatchProgress
from .summary import render_success_message

logger = logging.getLogger(__name__)

"""Import pipeline orchestration.

file bytes -> read_tabular -> per sheet: resolve_headers + RowAssembler
-> dedupe_records -> batch_upsert (one batch at a time, committed in order)

Row problems are collected, never raised. File-level problems (unsupported
extension, undecodable content) and the first failing batch end the run; the
outcome is always returned as an ImportResult.
"""

FILE_LEVEL = "<FILE_LEVEL>"
NO_DATA_MESSAGE = (
    "No student data found in the file. Check that the column headers match the template."
)
SCHEMA_OUTDATED_MESSAGE = (
    "Database schema is outdated: the students table needs a unique constraint on "
    "(class_id, admission_number) before bulk upload."
)


def import_date(timezone: str) -> date:
    return datetime.now(ZoneInfo(timezone)).date()


def run_import(
    file_name: str,
    data: bytes | str,
    classes: Sequence[ClassEntity],
    scope: ImportScope | None = None,
    cursor: Any = None,
    *,
    config: ImportConfig | None = None,
    audit: AuditLog | None = None,
    error_log: ErrorLogBuffer | None = None,
    today: date | None = None,
    user_id: str = "system",
) -> ImportResult:
    """Import one uploaded roster file.

    Args:
        file_name: declared upload name (extension selects the decoder)
        data: file content
        classes: prefetched class list, read-only for the run
        scope: class-page scope; None means "all classes"
        cursor: psycopg2 cursor (None = mock mode, nothing is written)
        config: batch size / table names / timezone / error log dir
        audit: audit collaborator, defaults to LoggingAuditLog
        error_log: buffer for the full error list, flushed before returning
        today: joining-date default, defaults to today in config.timezone
        user_id: recorded in the audit entry

    Returns:
        ImportResult with status success, partial or failed
    """
    config = config or ImportConfig()
    scope = scope or ImportScope.all_classes()
    audit = audit or LoggingAuditLog()
    error_log = error_log if error_log is not None else ErrorLogBuffer(config.error_log_dir)
    today = today or import_date(config.timezone)

    result = _run(file_name, data, classes, scope, cursor, config, error_log, today)

    audit.log(
        AuditEntry.create(
            user_id,
            "student_bulk_import",
            "student",
            {
                "file": file_name,
                "scope": scope.class_name or "all",
                "status": result.status.value,
                "imported": result.imported_count,
                "synthesized": result.synthetic_admission_count,
                "skipped": result.skipped_count,
                "errors": len(result.errors),
            },
        )
    )
    try:
        path = error_log.flush()
        if path is not None:
            logger.info("full error list written to %s", path)
    except OSError as e:
        logger.warning("could not write error log: %s", e)
    return result


def _run(
    file_name: str,
    data: bytes | str,
    classes: Sequence[ClassEntity],
    scope: ImportScope,
    cursor: Any,
    config: ImportConfig,
    error_log: ErrorLogBuffer,
    today: date,
) -> ImportResult:
    try:
        sheets = read_tabular(file_name, data)
    except UnsupportedFormatError as e:
        return _file_failure(file_name, "UNSUPPORTED_FORMAT", str(e), error_log)
    except TabularDecodeError as e:
        return _file_failure(file_name, "DECODE_ERROR", str(e), error_log)

    matcher = ClassMatcher(classes, scope)
    assembler = RowAssembler(matcher, today=today)

    assembled: list[AssembledRow] = []
    errors: list[str] = []
    skipped = 0
    synthesized = 0
    for sheet_name, rows in sheets.items():
        try:
            sheet = assembler.assemble_sheet(rows, sheet_name)
        except EmptyOrHeaderlessError as e:
            logger.warning("%s", e)
            errors.append(str(e))
            error_log.append(
                ErrorRecord.create(file_name, sheet_name, -1, "EMPTY_OR_HEADERLESS", str(e))
            )
            continue
        logger.debug(
            "sheet=%s rows=%d rejected=%d blank=%d out_of_scope=%d",
            sheet_name,
            len(sheet.rows),
            len(sheet.rejections),
            sheet.blank_rows,
            sheet.out_of_scope,
        )
        assembled.extend(sheet.rows)
        synthesized += sheet.synthesized
        skipped += len(sheet.rejections)
        for rejection in sheet.rejections:
            errors.append(str(rejection))
            error_log.append(
                ErrorRecord.create(
                    file_name,
                    rejection.sheet_name,
                    rejection.row_number,
                    "ROW_REJECTED",
                    rejection.reason,
                )
            )

    if not assembled:
        if errors:
            message = f"No valid rows. First error: {errors[0]}"
        else:
            message = NO_DATA_MESSAGE
            error_log.append(
                ErrorRecord.create(file_name, FILE_LEVEL, -1, "NO_RECOGNIZED_DATA", message)
            )
        logger.error("%s: %s", file_name, message)
        return ImportResult(
            status=ImportStatus.FAILED,
            imported_count=0,
            synthetic_admission_count=0,
            skipped_count=skipped,
            errors=errors,
            message=message,
        )

    final = dedupe_records(assembled)
    classes_found = len({r.class_name for r in final})
    if len(final) < len(assembled):
        logger.info(
            "%d duplicate row(s) collapsed (same class and admission number)",
            len(assembled) - len(final),
        )

    stats = BatchStatsAccumulator()
    total_batches = -(-len(final) // config.batch_size)
    try:
        rows_committed, batches_committed = _persist(final, cursor, config, stats)
        failure: PersistenceFailure | None = None
    except PersistenceFailure as e:
        failure = e
        rows_committed, batches_committed = e.rows_committed, e.batches_committed
        errors.append(str(e))
        error_log.append(
            ErrorRecord.create(file_name, FILE_LEVEL, -1, "PERSISTENCE_FAILURE", str(e))
        )

    n_batches, avg_batch, p95_batch = stats.get_stats()
    if failure is not None:
        status = ImportStatus.PARTIAL if rows_committed else ImportStatus.FAILED
        message = str(failure)
        imported = rows_committed
    else:
        status = ImportStatus.PARTIAL if errors else ImportStatus.SUCCESS
        imported = len(final)
        message = render_success_message(imported, classes_found, synthesized, skipped)

    return ImportResult(
        status=status,
        imported_count=imported,
        synthetic_admission_count=synthesized,
        skipped_count=skipped,
        errors=errors,
        message=message,
        classes_found=classes_found,
        rows_committed=rows_committed,
        batches_committed=batches_committed,
        total_batches=total_batches,
        avg_batch_seconds=avg_batch,
        p95_batch_seconds=p95_batch,
    )


def _persist(
    final: list[AssembledRow],
    cursor: Any,
    config: ImportConfig,
    stats: BatchStatsAccumulator,
) -> tuple[int, int]:
    """Upsert ``final`` batch by batch; returns (rows_committed, batches_committed).

    Each batch is its own transaction. A failing batch is rolled back and
    raises PersistenceFailure; batches before it stay committed.
    """
    if cursor is None:
        # Mock mode - nothing is written, every batch counts as committed
        logger.debug("mock mode: %d student(s) not written", len(final))
        return len(final), -(-len(final) // config.batch_size)

    rows_committed = 0
    batches_committed = 0
    with BatchProgress(len(final)) as progress:
        for batch in chunked(final, config.batch_size):
            try:
                cursor.execute("BEGIN")
                batch_upsert(
                    cursor,
                    table=config.students_table,
                    columns=STUDENT_COLUMNS,
                    rows=[r.record.as_row() for r in batch],
                    conflict_columns=CONFLICT_COLUMNS,
                    page_size=config.batch_size,
                    metrics_callback=lambda m: stats.add_batch_time(m.elapsed_seconds),
                )
                cursor.execute("COMMIT")
            except Exception as e:
                _rollback(cursor)
                raise PersistenceFailure(
                    _persistence_message(e, rows_committed, len(final)),
                    rows_committed=rows_committed,
                    batches_committed=batches_committed,
                ) from e
            rows_committed += len(batch)
            batches_committed += 1
            progress.advance(len(batch))
            logger.debug("batch %d committed (%d rows)", batches_committed, len(batch))
    return rows_committed, batches_committed


def _rollback(cursor: Any) -> None:
    try:
        cursor.execute("ROLLBACK")
    except Exception as e:  # connection already gone; the original error is reported
        logger.warning("rollback failed: %s", e)


def _persistence_message(error: Exception, rows_committed: int, total: int) -> str:
    if isinstance(error, BatchUpsertError) and error.pgcode == MISSING_CONFLICT_TARGET:
        reason = SCHEMA_OUTDATED_MESSAGE
    else:
        reason = f"Database error: {error}"
    if rows_committed:
        return (
            f"{reason} Saved {rows_committed} of {total} students "
            f"(records 1-{rows_committed}) before the failure."
        )
    return f"{reason} No students were saved."


def _file_failure(
    file_name: str, error_type: str, message: str, error_log: ErrorLogBuffer
) -> ImportResult:
    logger.error("%s: %s", file_name, message)
    error_log.append(ErrorRecord.create(file_name, FILE_LEVEL, -1, error_type, message))
    return ImportResult(
        status=ImportStatus.FAILED,
        imported_count=0,
        synthetic_admission_count=0,
        skipped_count=0,
        errors=[message],
        message=message,
    )
