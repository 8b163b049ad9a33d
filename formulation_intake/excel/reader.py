from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from formulation_intake.ingestion.errors import DecodeFailure, EmptyInput

"""Workbook decoding: uploaded bytes -> RawTable.

Only the first sheet is read. Its first non-blank row is the header row, every
following non-blank row is a data row. pandas picks the engine from the file
content (openpyxl for .xlsx, xlrd for .xls).
"""

__all__ = [
    "RawTable",
    "decode_workbook",
    "read_workbook_file",
    "table_from_frame",
]

CellValue = str | int | float | bool | None

EMPTY_HEADER = "__EMPTY"


@dataclass(frozen=True)
class RawTable:
    headers: tuple[str, ...]
    rows: tuple[dict[str, CellValue], ...]  # header -> cell value, None for empty cells


def decode_workbook(payload: bytes) -> RawTable:
    """Decode the first sheet of an Excel workbook.

    Raises
    ------
    DecodeFailure: the bytes are not a readable workbook
    EmptyInput: the first sheet has no non-blank row
    """
    try:
        # dtype=object keeps ints as ints (no float upcast for columns with blanks)
        # 既定のNA文字列 ("NA", "n/a", "null" ...) は文字列のまま残し、空セルのみ欠損扱い
        df = pd.read_excel(
            io.BytesIO(payload),
            sheet_name=0,
            header=None,
            dtype=object,
            keep_default_na=False,
            na_values=[""],
        )
    except Exception as e:
        raise DecodeFailure(str(e) or type(e).__name__) from e
    return table_from_frame(df)


def read_workbook_file(path: Path) -> RawTable:
    try:
        payload = path.read_bytes()
    except OSError as e:
        raise DecodeFailure(f"cannot read {path.name}: {e}") from e
    return decode_workbook(payload)


def table_from_frame(df: pd.DataFrame) -> RawTable:
    """Build a RawTable from a header-less DataFrame.

    Fully blank rows are dropped before the header row is picked, so data row
    numbering only counts non-blank rows.
    """
    df = df.dropna(how="all")
    if df.shape[0] == 0:
        raise EmptyInput()

    headers = _unique_headers(df.iloc[0].tolist())
    rows: list[dict[str, CellValue]] = []
    for raw in df.iloc[1:].itertuples(index=False, name=None):
        row: dict[str, CellValue] = {}
        for col, val in zip(headers, raw, strict=False):
            row[col] = _cell_value(val)
        rows.append(row)
    return RawTable(headers=tuple(headers), rows=tuple(rows))


def _unique_headers(values: list[Any]) -> list[str]:
    """Header strings in column order; blanks become __EMPTY, repeats get a _N suffix.

    The suffix skips names already issued, so "A", "A_1", "A" -> "A", "A_1", "A_2".
    """
    issued: set[str] = set()
    counters: dict[str, int] = {}
    headers: list[str] = []
    for val in values:
        text = _header_text(val)
        name = text
        if name in issued:
            n = counters.get(text, 0)
            while name in issued:
                n += 1
                name = f"{text}_{n}"
            counters[text] = n
        issued.add(name)
        headers.append(name)
    return headers


def _header_text(val: Any) -> str:
    cell = _cell_value(val)
    if cell is None:
        return EMPTY_HEADER
    if isinstance(cell, float) and cell.is_integer():
        return str(int(cell))
    text = str(cell).strip()
    return text or EMPTY_HEADER


def _cell_value(val: Any) -> CellValue:
    if val is None or isinstance(val, str):
        return val
    if isinstance(val, np.generic):
        val = val.item()
    if pd.isna(val):  # NaN / NaT
        return None
    if isinstance(val, (datetime, date)):
        return val.isoformat()
    if isinstance(val, (int, float, bool)):
        return val
    return str(val)
