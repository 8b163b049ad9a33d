from __future__ import annotations

"""Fatal ingestion errors.

Raising any of these aborts ingest_formulation() before a single record is
produced. Per-row and per-formulation problems are never raised; they are
collected as Diagnostic instances instead.
"""

__all__ = [
    "IngestionError",
    "EmptyInput",
    "MissingRequiredColumn",
    "DecodeFailure",
]


class IngestionError(Exception):
    """Base class for errors that abort the whole ingestion."""


class EmptyInput(IngestionError):
    """Raised when the first sheet has no rows at all (not even a header row)."""

    def __init__(self, message: str = "first sheet contains no rows") -> None:
        super().__init__(message)


class MissingRequiredColumn(IngestionError):
    """Raised when no header could be resolved for a mandatory canonical field."""

    def __init__(self, field: str) -> None:
        self.field = field
        super().__init__(f"no column found for required field '{field}'")


class DecodeFailure(IngestionError):
    """Raised when the uploaded bytes cannot be decoded as a workbook."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"failed to decode workbook: {detail}")
