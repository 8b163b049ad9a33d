from __future__ import annotations

from collections.abc import Sequence

from formulation_intake.models.config_models import FormulationRules
from formulation_intake.models.ingredient import Diagnostic, DiagnosticCode, IngredientRecord

__all__ = [
    "FORMULATION_ROW",
    "validate_formulation",
]

FORMULATION_ROW = 0  # row_index of findings about the formulation as a whole


def _bound(value: float) -> str:
    return f"{value:g}"


def validate_formulation(
    records: Sequence[IngredientRecord], rules: FormulationRules | None = None
) -> tuple[list[Diagnostic], float]:
    """Apply whole-formulation rules to the extracted records.

    Returns (diagnostics, total_concentration). Records are only read, never
    dropped: an out of range ingredient is reported and stays in the result.
    An empty formulation yields a single "No ingredients found" diagnostic and
    skips every other check.
    """
    rules = rules or FormulationRules()
    diagnostics: list[Diagnostic] = []

    if not records:
        diagnostics.append(
            Diagnostic(FORMULATION_ROW, "No ingredients found in the formulation", DiagnosticCode.NO_INGREDIENTS)
        )
        return diagnostics, 0.0

    for position, record in enumerate(records, start=1):
        if record.concentration < rules.min_concentration or record.concentration > rules.max_concentration:
            diagnostics.append(
                Diagnostic(
                    record.row_number or FORMULATION_ROW,
                    f"Ingredient {position} ({record.inci_name}): Concentration must be between "
                    f"{_bound(rules.min_concentration)} and {_bound(rules.max_concentration)}%",
                    DiagnosticCode.CONCENTRATION_OUT_OF_RANGE,
                )
            )

    total = sum(r.concentration for r in records)
    if total < rules.total_lower_bound or total > rules.total_upper_bound:
        diagnostics.append(
            Diagnostic(
                FORMULATION_ROW,
                f"Total concentration ({total:.2f}%) is not approximately 100%. Please check your formulation.",
                DiagnosticCode.TOTAL_OUT_OF_TOLERANCE,
            )
        )

    return diagnostics, total
