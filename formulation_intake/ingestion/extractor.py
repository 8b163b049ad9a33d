from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

from formulation_intake.models.ingredient import (
    Diagnostic,
    DiagnosticCode,
    HeaderMapping,
    IngredientRecord,
)

"""Row extraction: raw data rows -> IngredientRecord / Diagnostic.

Rows are numbered for display the way a spreadsheet user sees them: the
header is row 1, so data row i (0-based) is reported as row i + 2.
A bad row produces one diagnostic and no record; extraction always goes on
with the next row.
"""

__all__ = [
    "HEADER_ROW_OFFSET",
    "extract_rows",
    "cell_text",
    "parse_concentration",
]

HEADER_ROW_OFFSET = 2

# 符号は '-' のみ許可、指数表記・'%' 付き・全角数字は不可
_DECIMAL = re.compile(r"-?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)


def cell_text(value: Any) -> str | None:
    """Text form of a decoded cell, None for empty cells."""
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def parse_concentration(value: Any) -> float | None:
    """Coerce a concentration cell to a number, None when it is not one.

    An empty cell counts as "0". Text is parsed as a plain decimal after
    trimming: an optional leading '-', digits and at most one decimal point.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    text = cell_text(value) or "0"
    text = text.strip()
    if not _DECIMAL.fullmatch(text):
        return None
    return float(text)


def _optional_text(row: Mapping[str, Any], header: str | None) -> str | None:
    if header is None:
        return None
    text = cell_text(row.get(header))
    if text is None:
        return None
    return text.strip() or None


def extract_rows(
    rows: Sequence[Mapping[str, Any]], mapping: HeaderMapping
) -> tuple[list[IngredientRecord], list[Diagnostic]]:
    """Convert every data row into a record or a diagnostic.

    Returns (records, diagnostics), both in row order.
    """
    records: list[IngredientRecord] = []
    diagnostics: list[Diagnostic] = []

    for i, row in enumerate(rows):
        display = i + HEADER_ROW_OFFSET

        inci_name = (cell_text(row.get(mapping.inci_name)) or "").strip()
        if not inci_name:
            diagnostics.append(
                Diagnostic(display, f"Row {display}: Missing INCI Name", DiagnosticCode.MISSING_INCI_NAME)
            )
            continue

        concentration = parse_concentration(row.get(mapping.concentration))
        if concentration is None:
            diagnostics.append(
                Diagnostic(
                    display,
                    f"Row {display}: Invalid concentration value for {inci_name}",
                    DiagnosticCode.INVALID_CONCENTRATION,
                )
            )
            continue

        records.append(
            IngredientRecord(
                inci_name=inci_name,
                concentration=concentration,
                cas_number=_optional_text(row, mapping.cas_number),
                function=_optional_text(row, mapping.function),
                row_number=display,
            )
        )

    return records, diagnostics
