from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

from .ingredient import Diagnostic

"""ErrorRecord model for the diagnostic error log.

Every diagnostic and every fatal ingestion error of a batch review run is written
as one JSON Lines record. row follows the Diagnostic convention (display row,
0 for formulation level findings) and uses -1 as a sentinel for file level errors
where no row applies (decode failure, missing column, rejected upload).
"""

__all__ = [
    "ErrorRecord",
    "FILE_LEVEL_ROW",
]

FILE_LEVEL_ROW = -1


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Uploaded workbook file name
        row: Display row number, 0 for formulation findings, -1 for file level errors
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Human readable message as shown to the submitter
    """
    timestamp: str  # ISO8601 UTC
    file: str
    row: int
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, row: int, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord with current UTC timestamp."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            row=row,
            error_type=error_type,
            message=message,
        )

    @staticmethod
    def from_diagnostic(file: str, diagnostic: Diagnostic) -> ErrorRecord:
        return ErrorRecord.create(
            file=file,
            row=diagnostic.row_index,
            error_type=diagnostic.code.value,
            message=diagnostic.message,
        )

    def to_json_line(self) -> str:
        """Serialize ErrorRecord to JSON Lines format (fixed key set)."""
        return json.dumps(asdict(self), ensure_ascii=False)
