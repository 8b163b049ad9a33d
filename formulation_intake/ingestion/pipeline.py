from __future__ import annotations

import logging

from formulation_intake.excel.reader import RawTable, decode_workbook
from formulation_intake.ingestion.extractor import extract_rows
from formulation_intake.ingestion.headers import resolve_headers
from formulation_intake.ingestion.validator import validate_formulation
from formulation_intake.models.config_models import FormulationRules
from formulation_intake.models.ingredient import IngestionResult

logger = logging.getLogger(__name__)

"""Ingestion pipeline: uploaded workbook bytes -> IngestionResult.

    decode -> resolve headers -> extract rows -> validate formulation

Decode and header failures are fatal (IngestionError subclasses propagate to
the caller). Everything after that only accumulates diagnostics; whether a
formulation with diagnostics is acceptable is decided by the caller
(see services.upload). The pipeline keeps no state between calls.
"""

__all__ = [
    "ingest_formulation",
    "ingest_table",
]


def ingest_formulation(payload: bytes, rules: FormulationRules | None = None) -> IngestionResult:
    """Run the whole pipeline over the raw bytes of an uploaded workbook.

    Raises:
        DecodeFailure: payload is not a readable workbook
        EmptyInput: first sheet has no rows
        MissingRequiredColumn: no INCI name or concentration column
    """
    table = decode_workbook(payload)
    return ingest_table(table, rules)


def ingest_table(table: RawTable, rules: FormulationRules | None = None) -> IngestionResult:
    """Run header resolution, extraction and validation over a decoded table."""
    mapping = resolve_headers(table.headers)
    logger.debug("resolved headers %s", mapping.as_dict())

    records, diagnostics = extract_rows(table.rows, mapping)
    validation_diagnostics, total = validate_formulation(records, rules)
    diagnostics.extend(validation_diagnostics)

    logger.debug(
        "rows=%d records=%d diagnostics=%d total_concentration=%.2f",
        len(table.rows),
        len(records),
        len(diagnostics),
        total,
    )
    return IngestionResult(
        records=tuple(records),
        diagnostics=tuple(diagnostics),
        total_concentration=total,
    )
