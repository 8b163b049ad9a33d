# Shared pytest fixtures
from __future__ import annotations

import io
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from formulation_intake.logging.init import reset_logging

STANDARD_HEADERS = ["INCI Name", "CAS Number", "Concentration (%)", "Function"]


def build_workbook(sheets: dict[str, list[list[object]]]) -> bytes:
    """Write rows (first row = header) into an in-memory .xlsx, one sheet per key."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return buf.getvalue()


@pytest.fixture()
def build_sheets() -> Callable[[dict[str, list[list[object]]]], bytes]:
    return build_workbook


@pytest.fixture()
def make_workbook() -> Callable[..., bytes]:
    def _make(rows: list[list[object]], sheet_name: str = "Formulation") -> bytes:
        return build_workbook({sheet_name: rows})
    return _make


@pytest.fixture()
def well_formed_rows() -> list[list[object]]:
    return [
        STANDARD_HEADERS,
        ["Water", "7732-18-5", 70, "Solvent"],
        ["Glycerin", "56-81-5", 30, "Humectant"],
    ]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "uploads").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./uploads
upload:
  allowed_extensions: [".xlsx", ".xls"]
  max_file_size_bytes: 10485760
validation:
  total_lower_bound: 95
  total_upper_bound: 105
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "intake.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def write_upload(temp_workdir: Path) -> Callable[[str, list[list[object]]], Path]:
    def _write(name: str, rows: list[list[object]]) -> Path:
        path = temp_workdir / "uploads" / name
        path.write_bytes(build_workbook({"Formulation": rows}))
        return path
    return _write


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()
