from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for batch review of uploaded workbooks.

ProcessingResult aggregates the per-file outcome of services.orchestrator.process_all()
and feeds the SUMMARY output line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file review statistics (internal helper for ProcessingResult)."""
    file_name: str
    status: str  # accepted/rejected
    records: int
    diagnostics: int
    total_concentration: float
    elapsed_seconds: float
    error: str | None = None


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results and summary output for a batch review run."""
    accepted_files: int
    rejected_files: int
    total_records: int
    total_diagnostics: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.accepted_files + self.rejected_files
