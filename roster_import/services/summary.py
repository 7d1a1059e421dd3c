from __future__ import annotations

from ..models.import_result import ImportResult

"""Administrator-facing summary rendering.

One machine-greppable SUMMARY line plus a short preview of row errors; the
full list lives in the JSON Lines error log.
"""

ERROR_PREVIEW_LIMIT = 3


def render_summary_line(result: ImportResult) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY status={status} imported={n} synthesized={n} skipped={n}
    errors={n} classes={n} batches={committed}/{total}

    Examples:
        >>> from roster_import.models.import_result import ImportStatus
        >>> r = ImportResult(status=ImportStatus.SUCCESS, imported_count=2,
        ...                  synthetic_admission_count=1, skipped_count=0,
        ...                  classes_found=1, batches_committed=1, total_batches=1)
        >>> render_summary_line(r)
        'SUMMARY status=success imported=2 synthesized=1 skipped=0 errors=0 classes=1 batches=1/1'
    """
    return (
        f"SUMMARY status={result.status.value} "
        f"imported={result.imported_count} "
        f"synthesized={result.synthetic_admission_count} "
        f"skipped={result.skipped_count} "
        f"errors={len(result.errors)} "
        f"classes={result.classes_found} "
        f"batches={result.batches_committed}/{result.total_batches}"
    )


def render_error_preview(result: ImportResult, limit: int = ERROR_PREVIEW_LIMIT) -> str:
    """First ``limit`` errors joined with " | ", plus how many more there are."""
    head, remaining = result.error_preview(limit)
    if not head:
        return ""
    text = " | ".join(head)
    if remaining:
        text += f" ... and {remaining} more."
    return text


def render_success_message(
    saved: int,
    classes_found: int,
    synthesized: int,
    skipped: int,
) -> str:
    parts = [f"{saved} students saved across {classes_found} class(es)."]
    if synthesized:
        parts.append(f"{synthesized} admission number(s) auto-generated.")
    if skipped:
        parts.append(f"{skipped} rows skipped.")
    return " ".join(parts)
