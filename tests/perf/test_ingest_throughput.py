from __future__ import annotations

import io
import time

import pandas as pd
import pytest

from formulation_intake.excel.reader import RawTable
from formulation_intake.ingestion.pipeline import ingest_formulation, ingest_table
from scripts.gen_sample_formulations import HEADER_STYLES, generate_formulation

"""Throughput smoke checks for the ingestion pipeline.

Time limits are loose: they catch quadratic behaviour, not small regressions.
"""


def _workbook(rows: int, header_style: str = "standard", defects: int = 0) -> bytes:
    df = generate_formulation(rows, seed=7, defects=defects)
    df.columns = HEADER_STYLES[header_style]
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name="Formulation", index=False)
    return buf.getvalue()


@pytest.mark.parametrize("header_style", sorted(HEADER_STYLES))
def test_generated_workbook_is_clean(header_style):
    result = ingest_formulation(_workbook(25, header_style))
    assert len(result.records) == 25
    assert result.diagnostics == ()
    assert result.total_concentration == pytest.approx(100.0, abs=0.01)


def test_generated_defects_are_reported():
    result = ingest_formulation(_workbook(30, defects=3))
    assert len(result.diagnostics) >= 1
    assert result.has_records


def test_ingest_table_throughput():
    rows = 20_000
    table = RawTable(
        headers=("INCI Name", "CAS Number", "Concentration (%)", "Function"),
        rows=tuple(
            {"INCI Name": f"Ingredient {i}", "CAS Number": None, "Concentration (%)": "0.005", "Function": "x"}
            for i in range(rows)
        ),
    )
    start = time.perf_counter()
    result = ingest_table(table)
    elapsed = time.perf_counter() - start
    assert len(result.records) == rows
    assert elapsed < 5.0, f"ingest_table too slow: {elapsed:.3f}s"
