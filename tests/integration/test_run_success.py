from __future__ import annotations

import re
from pathlib import Path
from typing import Any

import pandas as pd
import pytest

from formulation_intake.cli.__main__ import main as cli_main

"""Integration test: successful multi-file review run.

Real workbooks with different header wordings are written to the upload
directory and the CLI is run end to end; every file is accepted and the
SUMMARY line matches the ingested records.
"""


def _make_workbook(path: Path, columns: list[str], rows: list[list[object]]) -> Path:
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows, columns=columns).to_excel(writer, sheet_name="Formulation", index=False)
    return path


@pytest.fixture
def upload_setup(temp_workdir: Path, write_config: Any) -> dict[str, Path]:
    uploads = temp_workdir / "uploads"
    serum = _make_workbook(
        uploads / "serum.xlsx",
        ["INCI Name", "CAS Number", "Concentration (%)", "Function"],
        [
            ["Aqua", "7732-18-5", 85.5, "Solvent"],
            ["Glycerin", "56-81-5", 5, "Humectant"],
            ["Niacinamide", "98-92-0", 4, "Skin conditioning"],
            ["Sodium Hyaluronate", "9067-32-7", 4.5, "Humectant"],
            ["Phenoxyethanol", "122-99-6", 1, "Preservative"],
        ],
    )
    cream = _make_workbook(
        uploads / "cream.xlsx",
        ["Ingredient", "CAS", "%", "Role"],
        [
            ["Aqua", "7732-18-5", 70, "Solvent"],
            ["Cetearyl Alcohol", "67762-27-0", 12, "Emollient"],
            ["Caprylic/Capric Triglyceride", "65381-09-1", 15, "Emollient"],
            ["Tocopherol", None, 0.5, "Antioxidant"],
        ],
    )
    return {"serum": serum, "cream": cream}


def test_run_success(upload_setup: dict[str, Path], temp_workdir: Path, capsys) -> None:
    exit_code = cli_main([])
    out = capsys.readouterr().out

    assert exit_code == 0
    assert "INFO accepted file=cream.xlsx records=4 warnings=0" in out
    assert "INFO accepted file=serum.xlsx records=5 warnings=0" in out
    assert re.search(
        r"^SUMMARY files=2/2 accepted=2 rejected=0 records=9 diagnostics=0 elapsed_sec=[0-9.]+$",
        out,
        re.MULTILINE,
    )
    # 診断が無ければエラーログは作られない
    assert list((temp_workdir / "logs").glob("errors-*.log")) == []


def test_run_success_files_reviewed_in_name_order(upload_setup: dict[str, Path], capsys) -> None:
    cli_main([])
    out = capsys.readouterr().out
    assert out.index("file=cream.xlsx") < out.index("file=serum.xlsx")
