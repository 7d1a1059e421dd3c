from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display for upsert batches (tqdm, TTY only).

In non-TTY environments (CI, web workers) no bar is created so that logs stay
free of ANSI control sequences.
"""

__all__ = [
    "BatchProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class BatchProgress:
    """One tqdm bar counting saved students across upsert batches."""

    def __init__(self, total_rows: int, *, description: str = "Saving students") -> None:
        self.total_rows = total_rows
        self.description = description
        self.batches_done = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_rows,
                desc=description,
                unit="student",
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, rows: int) -> None:
        self.batches_done += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(rows)
            self.pbar.set_postfix(batches=self.batches_done)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> BatchProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
