from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from enum import Enum

"""Import result models for the student roster importer.

ImportResult is what the pipeline hands back to its caller (CLI or a web
handler); BatchStatsAccumulator collects per-batch upsert timings.
"""

__all__ = [
    "BatchStatsAccumulator",
    "ImportResult",
    "ImportStatus",
]


class ImportStatus(Enum):
    """Overall outcome of one import call.

    - SUCCESS: every recognized row was saved, no row errors
    - PARTIAL: some rows saved, some rejected (or a later batch failed)
    - FAILED: nothing saved
    """
    SUCCESS = "success"
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass(frozen=True)
class ImportResult:
    """Aggregated result of one import invocation."""
    status: ImportStatus
    imported_count: int  # deduplicated records written (or that would be, in mock mode)
    synthetic_admission_count: int
    skipped_count: int  # rejected rows
    errors: list[str] = field(default_factory=list)  # row/sheet/file errors in encounter order
    message: str = ""
    classes_found: int = 0
    rows_committed: int = 0  # prefix of the deduplicated list that reached the database
    batches_committed: int = 0
    total_batches: int = 0
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0

    def error_preview(self, limit: int = 3) -> tuple[list[str], int]:
        """First ``limit`` errors plus the count of the remaining ones."""
        head = self.errors[:limit]
        return head, max(len(self.errors) - limit, 0)


class BatchStatsAccumulator:
    """Accumulates upsert batch timings for ImportResult."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Return (total_batches, avg_batch_seconds, p95_batch_seconds)."""
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method='inclusive'
            )[18]  # 95th percentile

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
