from __future__ import annotations

from ..models.processing_result import ImportResult

"""SUMMARY line rendering.

Format:
SUMMARY file={name} status={status} rows={total} valid={valid} errors={errors}
submitted={submitted} elapsed_sec={elapsed}
"""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: ImportResult) -> str:
    """Render a SUMMARY line from an ImportResult.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from crm_import.models.processing_result import ImportStatus
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ImportResult(
        ...     file_name="customers.csv", status=ImportStatus.IMPORTED, total_rows=3,
        ...     valid_rows=3, error_rows=0, submitted_rows=3,
        ...     start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY file=customers.csv status=imported rows=3 valid=3 errors=0 submitted=3 elapsed_sec=2'
    """
    return (
        f"SUMMARY file={result.file_name} "
        f"status={result.status.value} "
        f"rows={result.total_rows} "
        f"valid={result.valid_rows} "
        f"errors={result.error_rows} "
        f"submitted={result.submitted_rows} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)}"
    )
