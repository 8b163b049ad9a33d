from __future__ import annotations

import pytest

from formulation_intake.db.connection import resolve_dsn
from formulation_intake.db.ingredient_store import StoreError, StoreMetrics, StoreResult, store_ingredients
from formulation_intake.models.config_models import DatabaseConfig
from formulation_intake.models.ingredient import IngredientRecord

RECORDS = [
    IngredientRecord("Water", 70.0, "7732-18-5", "Solvent", row_number=2),
    IngredientRecord("Glycerin", 30.0, None, None, row_number=3),
]


class DummyCursor:
    def __init__(self) -> None:
        self.queries: list[str] = []
        self.rows: list[list[tuple]] = []


@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    import formulation_intake.db.ingredient_store as store

    def fake_execute_values(cursor, sql, rows, page_size=1000):
        cursor.queries.append(sql)
        cursor.rows.append(list(rows))

    monkeypatch.setattr(store, "execute_values", fake_execute_values)
    return fake_execute_values


def test_store_basic():
    cur = DummyCursor()
    res = store_ingredients(cur, "f-1", RECORDS)
    assert res == StoreResult(inserted_rows=2)
    assert cur.queries == [
        'INSERT INTO ingredients ("formulation_id","inci_name","cas_number","function","concentration") VALUES %s'
    ]
    assert cur.rows[0] == [
        ("f-1", "Water", "7732-18-5", "Solvent", 70.0),
        ("f-1", "Glycerin", None, None, 30.0),
    ]


def test_store_empty_records():
    cur = DummyCursor()
    assert store_ingredients(cur, "f-1", []).inserted_rows == 0
    assert cur.queries == []


def test_store_requires_formulation_id():
    with pytest.raises(StoreError):
        store_ingredients(DummyCursor(), "", RECORDS)


def test_store_wraps_driver_errors(monkeypatch):
    import formulation_intake.db.ingredient_store as store

    def failing(cursor, sql, rows, page_size=1000):
        raise RuntimeError("violates foreign key constraint")

    monkeypatch.setattr(store, "execute_values", failing)
    captured: list[StoreMetrics] = []
    with pytest.raises(StoreError, match="foreign key"):
        store_ingredients(DummyCursor(), "f-1", RECORDS, metrics_callback=captured.append)
    # 失敗時もメトリクスは通知される
    assert len(captured) == 1


def test_store_metrics_callback():
    captured: list[StoreMetrics] = []
    store_ingredients(DummyCursor(), "f-1", RECORDS, metrics_callback=captured.append)
    assert len(captured) == 1
    assert captured[0].batch_size == 2
    assert captured[0].elapsed_seconds >= 0


def test_resolve_dsn_prefers_database_url(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://u@h/db")
    assert resolve_dsn(DatabaseConfig(dsn="ignored")) == "postgresql://u@h/db"


def test_resolve_dsn_from_config(monkeypatch):
    for var in ("DATABASE_URL", "PGDSN", "PGHOST", "PGPORT", "PGUSER", "PGPASSWORD", "PGDATABASE"):
        monkeypatch.delenv(var, raising=False)
    cfg = DatabaseConfig(host="db", port=6543, user="app", password="pw", database="forms")
    assert resolve_dsn(cfg) == "host=db port=6543 user=app dbname=forms password=pw"


def test_resolve_dsn_env_overrides_config(monkeypatch):
    for var in ("DATABASE_URL", "PGDSN", "PGPASSWORD"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("PGHOST", "envhost")
    monkeypatch.setenv("PGPORT", "5433")
    monkeypatch.setenv("PGUSER", "envuser")
    monkeypatch.setenv("PGDATABASE", "envdb")
    dsn = resolve_dsn(DatabaseConfig(host="cfg", port=1, user="cfg", database="cfg"))
    assert dsn == "host=envhost port=5433 user=envuser dbname=envdb"
