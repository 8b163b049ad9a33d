from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

from .ingredient import IngestionResult

"""UploadFile domain model and UploadStatus enum.

UploadFile represents the review context for one uploaded workbook, tracking
its status from pending to accepted/rejected.
"""

__all__ = [
    "UploadStatus",
    "UploadFile",
]


class UploadStatus(Enum):
    """Status enum for the UploadFile lifecycle.

    State transitions: pending -> (accepted | rejected)

    - PENDING: File discovered but not yet reviewed
    - ACCEPTED: Workbook decoded and at least one ingredient extracted
    - REJECTED: Upload check failed, decoding failed or no usable ingredient
    """
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass(frozen=True)
class UploadFile:
    """Review context for a single uploaded workbook."""
    path: Path
    name: str
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: UploadStatus = UploadStatus.PENDING
    result: IngestionResult | None = None  # None when ingestion never ran or failed fatally
    error: str | None = None  # Rejection reason shown to the submitter

    @property
    def record_count(self) -> int:
        return len(self.result.records) if self.result is not None else 0

    @property
    def diagnostic_count(self) -> int:
        return len(self.result.diagnostics) if self.result is not None else 0
