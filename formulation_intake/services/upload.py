from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import PurePath

from formulation_intake.ingestion.errors import (
    DecodeFailure,
    EmptyInput,
    IngestionError,
    MissingRequiredColumn,
)
from formulation_intake.ingestion.pipeline import ingest_formulation
from formulation_intake.models.config_models import FormulationRules, UploadLimits
from formulation_intake.models.ingredient import IngestionResult
from formulation_intake.models.submission import FormulationSubmission
from formulation_intake.models.upload_file import UploadStatus

logger = logging.getLogger(__name__)

"""Upload acceptance policy around the ingestion pipeline.

The pipeline itself never rejects a formulation; this module decides:
- file type and size checks before anything is decoded
- required form fields
- fatal ingestion errors and formulations without a single usable ingredient
  reject the upload
- any other diagnostics are returned as warnings on an accepted upload
"""

__all__ = [
    "UploadRejected",
    "UploadOutcome",
    "check_upload",
    "check_submission",
    "review_upload",
    "rejection_message",
]

MSG_MISSING_FIELDS = "Missing required fields"
MSG_EMPTY_WORKBOOK = "Excel file is empty or has invalid format"
MSG_NO_INGREDIENTS = "No ingredients found in the formulation"

_COLUMN_LABELS = {
    "inci_name": "INCI Name",
    "concentration": "Concentration",
}


class UploadRejected(Exception):
    """Raised by the pre-decode checks; the message is shown to the submitter."""


@dataclass(frozen=True)
class UploadOutcome:
    status: UploadStatus
    message: str
    result: IngestionResult | None = None
    warnings: list[str] = field(default_factory=list)
    error_type: str | None = None  # UPPER_SNAKE classification when rejected

    @property
    def accepted(self) -> bool:
        return self.status is UploadStatus.ACCEPTED


def _extension_label(limits: UploadLimits) -> str:
    return " or ".join(limits.allowed_extensions)


def check_upload(file_name: str, size_bytes: int, limits: UploadLimits | None = None) -> None:
    """Reject files with a foreign extension or above the size ceiling."""
    limits = limits or UploadLimits()
    suffix = PurePath(file_name).suffix.lower()
    if suffix not in limits.allowed_extensions:
        raise UploadRejected(
            f"Invalid file type. Please upload an Excel file ({_extension_label(limits)})"
        )
    if size_bytes > limits.max_file_size_bytes:
        raise UploadRejected(f"File size exceeds {limits.max_file_size_mb}MB limit")


def check_submission(submission: FormulationSubmission, limits: UploadLimits | None = None) -> None:
    if not submission.name.strip() or not submission.product_type.strip() or not submission.file_name:
        raise UploadRejected(MSG_MISSING_FIELDS)
    check_upload(submission.file_name, submission.size_bytes, limits)


def rejection_message(error: IngestionError) -> str:
    """Submitter facing message for a fatal ingestion error."""
    if isinstance(error, EmptyInput):
        return MSG_EMPTY_WORKBOOK
    if isinstance(error, MissingRequiredColumn):
        label = _COLUMN_LABELS.get(error.field, error.field)
        return f"Could not find {label} column in Excel file"
    if isinstance(error, DecodeFailure):
        return f"Failed to parse Excel file: {error.detail}"
    return str(error)


def _error_type(error: IngestionError) -> str:
    if isinstance(error, EmptyInput):
        return "EMPTY_INPUT"
    if isinstance(error, MissingRequiredColumn):
        return "MISSING_REQUIRED_COLUMN"
    return "DECODE_FAILURE"


def review_upload(
    submission: FormulationSubmission,
    limits: UploadLimits | None = None,
    rules: FormulationRules | None = None,
) -> UploadOutcome:
    """Check and ingest one submission, returning an accepted/rejected outcome."""
    try:
        check_submission(submission, limits)
    except UploadRejected as e:
        logger.info("upload rejected file=%s reason=%s", submission.file_name, e)
        return UploadOutcome(UploadStatus.REJECTED, str(e), error_type="UPLOAD_REJECTED")

    try:
        result = ingest_formulation(submission.payload, rules)
    except IngestionError as e:
        logger.info("ingestion failed file=%s error=%s", submission.file_name, e)
        return UploadOutcome(UploadStatus.REJECTED, rejection_message(e), error_type=_error_type(e))

    if not result.has_records:
        return UploadOutcome(
            UploadStatus.REJECTED,
            MSG_NO_INGREDIENTS,
            result=result,
            warnings=result.messages,
            error_type="NO_INGREDIENTS",
        )

    message = f"Formulation uploaded successfully ({len(result.records)} ingredients)"
    return UploadOutcome(UploadStatus.ACCEPTED, message, result=result, warnings=result.messages)
