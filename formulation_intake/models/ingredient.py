from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Ingredient domain models for the formulation intake engine.

These types flow through the ingestion pipeline:

    RawTable (excel.reader) -> HeaderMapping -> IngredientRecord / Diagnostic
    -> IngestionResult

All of them are frozen dataclasses; the pipeline only ever appends new
instances, it never mutates one after creation.
"""

__all__ = [
    "CanonicalField",
    "DiagnosticCode",
    "HeaderMapping",
    "IngredientRecord",
    "Diagnostic",
    "IngestionResult",
]


class CanonicalField(Enum):
    """Normalized ingredient attributes that raw headers are resolved onto."""
    INCI_NAME = "inci_name"
    CAS_NUMBER = "cas_number"
    CONCENTRATION = "concentration"
    FUNCTION = "function"

    @property
    def required(self) -> bool:
        return self in (CanonicalField.INCI_NAME, CanonicalField.CONCENTRATION)


class DiagnosticCode(Enum):
    """Classification of a diagnostic, written as error_type in the error log."""
    MISSING_INCI_NAME = "MISSING_INCI_NAME"
    INVALID_CONCENTRATION = "INVALID_CONCENTRATION"
    NO_INGREDIENTS = "NO_INGREDIENTS"
    CONCENTRATION_OUT_OF_RANGE = "CONCENTRATION_OUT_OF_RANGE"
    TOTAL_OUT_OF_TOLERANCE = "TOTAL_OUT_OF_TOLERANCE"


@dataclass(frozen=True)
class HeaderMapping:
    """Canonical field -> raw header selected for it (None when unresolved).

    inci_name and concentration are always set on a mapping returned by
    resolve_headers(); the optional fields may be None.
    """
    inci_name: str
    concentration: str
    cas_number: str | None = None
    function: str | None = None

    def header_for(self, canonical: CanonicalField) -> str | None:
        return getattr(self, canonical.value)

    def as_dict(self) -> dict[str, str | None]:
        return {f.value: self.header_for(f) for f in CanonicalField}


@dataclass(frozen=True)
class IngredientRecord:
    """One ingredient line extracted from a formulation sheet.

    concentration is not range checked here; the formulation validator reports
    out of range values without dropping the record.
    """
    inci_name: str
    concentration: float
    cas_number: str | None = None
    function: str | None = None
    row_number: int | None = None  # display row in the sheet (header = row 1)

    def to_insert_row(self) -> tuple[str, str | None, str | None, float]:
        """Column order used by db.ingredient_store."""
        return (self.inci_name, self.cas_number, self.function, self.concentration)


@dataclass(frozen=True)
class Diagnostic:
    """Human readable, non-fatal finding about a row or the whole formulation.

    row_index is the display row number of the offending row, or 0 when the
    finding concerns the formulation as a whole.
    """
    row_index: int
    message: str
    code: DiagnosticCode = field(compare=False)


@dataclass(frozen=True)
class IngestionResult:
    """Final output of one ingest_formulation() call."""
    records: tuple[IngredientRecord, ...]
    diagnostics: tuple[Diagnostic, ...]
    total_concentration: float

    @property
    def messages(self) -> list[str]:
        return [d.message for d in self.diagnostics]

    @property
    def has_records(self) -> bool:
        return len(self.records) > 0
