from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

from formulation_intake.logging.error_log import ErrorLogBuffer
from formulation_intake.models.config_models import IntakeConfig
from formulation_intake.models.processing_result import FileStat, ProcessingResult
from formulation_intake.models.submission import FormulationSubmission
from formulation_intake.models.upload_file import UploadFile, UploadStatus
from formulation_intake.services.progress import ProgressTracker
from formulation_intake.services.upload import review_upload

logger = logging.getLogger(__name__)

"""Batch review of uploaded workbooks.

Scans a directory (or takes an explicit file list), reviews each workbook
through services.upload.review_upload(), records every diagnostic and every
rejection in the JSON Lines error log and aggregates a ProcessingResult for
the SUMMARY line. One bad file never stops the run.
"""

__all__ = [
    "ProcessingError",
    "scan_upload_files",
    "review_file",
    "process_all",
]


class ProcessingError(Exception):
    """Fatal error that prevents the batch from running at all."""


def scan_upload_files(directory: Path, extensions: Sequence[str]) -> list[Path]:
    """Return files in directory (non-recursive) whose suffix is in extensions, sorted by name.

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    allowed = {e.lower() for e in extensions}
    try:
        return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in allowed)
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def review_file(path: Path, config: IntakeConfig, error_log: ErrorLogBuffer) -> UploadFile:
    """Review one workbook on disk and log its findings."""
    start_time = datetime.now(UTC)
    try:
        payload = path.read_bytes()
    except OSError as e:
        error_log.record_rejection(path.name, "FILE_READ_ERROR", str(e))
        return UploadFile(
            path=path,
            name=path.name,
            start_time=start_time,
            end_time=datetime.now(UTC),
            status=UploadStatus.REJECTED,
            error=f"cannot read file: {e}",
        )

    # バッチ審査ではファイル名をフォーミュレーション名として扱う
    submission = FormulationSubmission(
        name=path.stem,
        product_type="unspecified",
        file_name=path.name,
        payload=payload,
    )
    outcome = review_upload(submission, config.upload, config.rules)

    if outcome.result is not None:
        error_log.record_diagnostics(path.name, outcome.result.diagnostics)
    if not outcome.accepted and outcome.error_type != "NO_INGREDIENTS":
        # NO_INGREDIENTS is already in the log as a diagnostic
        error_log.record_rejection(path.name, outcome.error_type or "REJECTED", outcome.message)

    return UploadFile(
        path=path,
        name=path.name,
        start_time=start_time,
        end_time=datetime.now(UTC),
        status=outcome.status,
        result=outcome.result,
        error=None if outcome.accepted else outcome.message,
    )


def process_all(
    config: IntakeConfig,
    paths: Sequence[Path] | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Review every workbook and aggregate the results.

    Args:
        config: Intake configuration (source directory, limits, rules)
        paths: Explicit files to review; None scans config.source_directory
        error_log: Buffer receiving diagnostics; flushed once at the end

    Raises:
        ProcessingError: source directory missing or unreadable
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()

    if paths is None:
        file_paths = scan_upload_files(Path(config.source_directory), config.upload.allowed_extensions)
    else:
        file_paths = list(paths)

    file_stats: list[FileStat] = []
    accepted = 0
    rejected = 0
    total_records = 0
    total_diagnostics = 0

    with ProgressTracker(len(file_paths), description="Reviewing files") as progress:
        for path in file_paths:
            progress.start_file(path)
            upload = review_file(path, config, error_log)
            is_accepted = upload.status is UploadStatus.ACCEPTED

            if is_accepted:
                accepted += 1
                total_records += upload.record_count
                logger.info(
                    "accepted file=%s records=%d warnings=%d",
                    upload.name,
                    upload.record_count,
                    upload.diagnostic_count,
                )
            else:
                rejected += 1
                logger.warning("rejected file=%s reason=%s", upload.name, upload.error)
            total_diagnostics += upload.diagnostic_count

            progress.set_postfix(accepted=accepted, rejected=rejected, records=total_records)
            progress.finish_file(success=is_accepted)

            elapsed = 0.0
            if upload.start_time is not None and upload.end_time is not None:
                elapsed = (upload.end_time - upload.start_time).total_seconds()
            file_stats.append(
                FileStat(
                    file_name=upload.name,
                    status=upload.status.value,
                    records=upload.record_count,
                    diagnostics=upload.diagnostic_count,
                    total_concentration=(
                        upload.result.total_concentration if upload.result is not None else 0.0
                    ),
                    elapsed_seconds=elapsed,
                    error=upload.error,
                )
            )

    try:
        log_path = error_log.flush()
    except OSError as e:
        # Don't fail the entire run if the error log cannot be written
        logger.warning("failed to write error log: %s", e)
    else:
        if log_path is not None:
            logger.info("diagnostics written to %s", log_path)

    end_time = datetime.now(UTC)
    return ProcessingResult(
        accepted_files=accepted,
        rejected_files=rejected,
        total_records=total_records,
        total_diagnostics=total_diagnostics,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        file_stats=file_stats,
    )
