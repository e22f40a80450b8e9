from __future__ import annotations

import pytest

from crm_import.db.batch_insert import BatchInsertError, InsertResult, batch_insert, quote_identifier


class DummyCursor:
    def __init__(self) -> None:
        self.queries: list[str] = []

# We monkeypatch execute_values symbol inside module to avoid needing
# a live PostgreSQL for logic tests

@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    import crm_import.db.batch_insert as bi
    def fake_execute_values(cursor, sql, rows, page_size=1000):  # noqa: D401
        cursor.queries.append(sql)
        cursor.page_size = page_size
    monkeypatch.setattr(bi, "execute_values", fake_execute_values)
    return fake_execute_values


def test_batch_insert_basic():
    cur = DummyCursor()
    res = batch_insert(
        cur, table="customers", columns=["name", "phone"], rows=[["Asha", "1"], ["Ravi", "2"]]
    )
    assert isinstance(res, InsertResult)
    assert res.inserted_rows == 2
    assert cur.queries == ['INSERT INTO "customers" ("name","phone") VALUES %s']


def test_batch_insert_page_size_passed_through():
    cur = DummyCursor()
    batch_insert(cur, table="customers", columns=["name"], rows=[["a"]], page_size=25)
    assert cur.page_size == 25


def test_batch_insert_schema_qualified_table():
    cur = DummyCursor()
    batch_insert(cur, table="crm.customers", columns=["name"], rows=[["a"]])
    assert cur.queries[0].startswith('INSERT INTO "crm"."customers"')


def test_quote_identifier():
    assert quote_identifier("customers") == '"customers"'
    assert quote_identifier("crm.customers") == '"crm"."customers"'


def test_batch_insert_empty_rows():
    cur = DummyCursor()
    res = batch_insert(cur, table="customers", columns=["name"], rows=[])
    assert res.inserted_rows == 0
    assert cur.queries == []


def test_batch_insert_missing_driver(monkeypatch):
    import crm_import.db.batch_insert as bi
    # Force execute_values None path
    monkeypatch.setattr(bi, "execute_values", None)
    with pytest.raises(BatchInsertError):
        batch_insert(DummyCursor(), table="t", columns=["c"], rows=[[1]])


def test_batch_insert_wraps_driver_errors(monkeypatch):
    import crm_import.db.batch_insert as bi

    def boom(cursor, sql, rows, page_size=1000):
        raise RuntimeError("relation \"customers\" does not exist")

    monkeypatch.setattr(bi, "execute_values", boom)
    captured = []
    with pytest.raises(BatchInsertError, match="does not exist"):
        batch_insert(DummyCursor(), table="customers", columns=["name"], rows=[["a"]],
                     metrics_callback=captured.append)
    # metrics are still reported for the failed statement
    assert len(captured) == 1


def test_batch_insert_with_metrics_callback():
    cur = DummyCursor()
    captured_metrics = []

    def metrics_callback(metrics):
        captured_metrics.append(metrics)

    res = batch_insert(
        cur,
        table="customers",
        columns=["name", "phone"],
        rows=[["Asha", "1"], ["Ravi", "2"]],
        metrics_callback=metrics_callback
    )

    assert isinstance(res, InsertResult)
    assert res.inserted_rows == 2
    assert len(captured_metrics) == 1

    metrics = captured_metrics[0]
    assert metrics.batch_size == 2
    assert metrics.elapsed_seconds >= 0
    assert metrics.end_time >= metrics.start_time
    assert metrics.elapsed_seconds == metrics.end_time - metrics.start_time


def test_batch_insert_empty_rows_with_metrics():
    cur = DummyCursor()
    captured_metrics = []

    res = batch_insert(
        cur,
        table="customers",
        columns=["name"],
        rows=[],
        metrics_callback=captured_metrics.append
    )

    assert res.inserted_rows == 0
    # No metrics should be captured for empty rows (no execute_values call)
    assert len(captured_metrics) == 0
