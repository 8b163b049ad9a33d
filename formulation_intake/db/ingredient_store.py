from __future__ import annotations

import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from psycopg2.extras import execute_values

from formulation_intake.models.ingredient import IngredientRecord

"""Persistence of accepted ingredient records.

Records of an accepted upload are attached to an existing formulation row with
one batched INSERT (psycopg2.extras.execute_values). Only called after
ingestion succeeded; the caller owns the transaction boundary.
"""

__all__ = [
    "INGREDIENT_COLUMNS",
    "StoreError",
    "StoreMetrics",
    "StoreResult",
    "store_ingredients",
]

INGREDIENTS_TABLE = "ingredients"
# formulation_id is prepended to every row
INGREDIENT_COLUMNS = ("formulation_id", "inci_name", "cas_number", "function", "concentration")


class StoreError(Exception):
    pass


@dataclass(frozen=True)
class StoreMetrics:
    """Timing of a single execute_values call."""
    batch_size: int
    elapsed_seconds: float


@dataclass(frozen=True)
class StoreResult:
    inserted_rows: int


def store_ingredients(
    cursor: Any,
    formulation_id: str,
    records: Sequence[IngredientRecord],
    page_size: int = 1000,
    metrics_callback: Callable[[StoreMetrics], None] | None = None,
) -> StoreResult:
    """Insert ingredient records for one formulation.

    Parameters
    ----------
    cursor: psycopg2 cursor
    formulation_id: id of the formulations row the ingredients belong to
    records: extracted records, inserted in order
    page_size: execute_values page size
    metrics_callback: receives StoreMetrics after the insert, also when it fails;
        not called for empty input
    """
    if not formulation_id:
        raise StoreError("formulation_id is required")

    if not records:
        return StoreResult(inserted_rows=0)

    rows = [(formulation_id, *r.to_insert_row()) for r in records]
    cols_sql = ",".join(f'"{c}"' for c in INGREDIENT_COLUMNS)
    sql = f"INSERT INTO {INGREDIENTS_TABLE} ({cols_sql}) VALUES %s"

    start = time.perf_counter()
    try:
        execute_values(cursor, sql, rows, page_size=page_size)
    except Exception as e:
        raise StoreError(str(e)) from e
    finally:
        if metrics_callback is not None:
            metrics_callback(StoreMetrics(batch_size=len(rows), elapsed_seconds=time.perf_counter() - start))

    return StoreResult(inserted_rows=len(rows))
