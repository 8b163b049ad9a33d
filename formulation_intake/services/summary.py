from __future__ import annotations

from formulation_intake.models.processing_result import ProcessingResult

"""SUMMARY line rendering for batch review runs."""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for a ProcessingResult.

    Format:
    SUMMARY files={total}/{total} accepted={accepted} rejected={rejected}
    records={records} diagnostics={diagnostics} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     accepted_files=1, rejected_files=1, total_records=12,
        ...     total_diagnostics=3, start_time=start, end_time=end,
        ...     elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY files=2/2 accepted=1 rejected=1 records=12 diagnostics=3 elapsed_sec=2'
    """
    total = result.total_files
    return (
        f"SUMMARY files={total}/{total} "
        f"accepted={result.accepted_files} "
        f"rejected={result.rejected_files} "
        f"records={result.total_records} "
        f"diagnostics={result.total_diagnostics} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
