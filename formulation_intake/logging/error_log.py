from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from formulation_intake.models.error_record import FILE_LEVEL_ROW, ErrorRecord
from formulation_intake.models.ingredient import Diagnostic

"""Review findings log.

One JSON Lines file per batch review run, `logs/errors-YYYYMMDD-HHMMSS.log`
(UTC). Row diagnostics keep their display row, formulation findings use row 0
and file rejections row -1. Nothing is written for a run without findings.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """Collects review findings per workbook and writes them as JSON Lines."""

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._logs_dir = logs_dir or LOGS_DIR
        self._pending: list[ErrorRecord] = []
        self._per_file: Counter[str] = Counter()
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        # 初回アクセス時に確定、同一実行中の flush は同じファイルへ追記
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._pending.append(record)
        self._per_file[record.file] += 1

    def record_diagnostics(self, file_name: str, diagnostics: Iterable[Diagnostic]) -> int:
        """Queue every diagnostic of one workbook; returns how many were queued."""
        n = 0
        for diagnostic in diagnostics:
            self.append(ErrorRecord.from_diagnostic(file_name, diagnostic))
            n += 1
        return n

    def record_rejection(self, file_name: str, error_type: str, message: str) -> None:
        """Queue a file level rejection (row -1)."""
        self.append(ErrorRecord.create(file_name, FILE_LEVEL_ROW, error_type, message))

    def findings_for(self, file_name: str) -> int:
        """Findings recorded for file_name during this run, flushed or not."""
        return self._per_file[file_name]

    def __len__(self) -> int:
        return len(self._pending)

    def flush(self) -> Path | None:
        """Write queued records; returns the log path, or None if nothing was queued."""
        if not self._pending:
            return None
        path = self.file_path
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = "".join(r.to_json_line() + "\n" for r in self._pending)
        with path.open("a", encoding="utf-8") as f:
            f.write(lines)
        self._pending.clear()
        return path
