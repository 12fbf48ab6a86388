import sqlite3
import threading

import pytest


def _count(gateway) -> int:
    return int(gateway.scalar("SELECT COUNT(*) AS n FROM publication_types"))


def _insert(gateway, type_id: int) -> None:
    gateway.execute(
        "INSERT INTO publication_types (id, name) VALUES (?, ?)", (type_id, f"tipo {type_id}")
    )


def test_autocommit_outside_transaction(gateway, db_path):
    _insert(gateway, 10)
    conn = sqlite3.connect(db_path)
    try:
        assert conn.execute("SELECT name FROM publication_types WHERE id = 10").fetchone()
    finally:
        conn.close()


def test_commit(gateway):
    before = _count(gateway)
    with gateway.transaction():
        _insert(gateway, 10)
        assert gateway.in_transaction
    assert not gateway.in_transaction
    assert _count(gateway) == before + 1


def test_rollback_on_error(gateway):
    before = _count(gateway)
    with pytest.raises(RuntimeError):
        with gateway.transaction():
            _insert(gateway, 10)
            raise RuntimeError("boom")
    assert _count(gateway) == before
    assert not gateway.in_transaction


def test_nested_rollback_keeps_outer_work(gateway):
    before = _count(gateway)
    with gateway.transaction():
        _insert(gateway, 10)
        with pytest.raises(ValueError):
            with gateway.transaction():
                _insert(gateway, 11)
                raise ValueError("inner")
        _insert(gateway, 12)

    ids = {r["id"] for r in gateway.query("SELECT id FROM publication_types WHERE id >= 10")}
    assert ids == {10, 12}
    assert _count(gateway) == before + 2


def test_outer_failure_discards_released_savepoint(gateway):
    before = _count(gateway)
    with pytest.raises(RuntimeError):
        with gateway.transaction():
            with gateway.transaction():
                _insert(gateway, 10)
            raise RuntimeError("outer")
    assert _count(gateway) == before


def test_rows_are_dicts(gateway):
    row = gateway.query_one("SELECT id, name FROM publication_types WHERE id = 1")
    assert row == {"id": 1, "name": "Artículo"}
    assert gateway.query_one("SELECT id FROM publication_types WHERE id = 99") is None
    assert gateway.scalar("SELECT id FROM publication_types WHERE id = 99") is None


def test_connection_per_thread(gateway):
    seen: list[int] = []

    def worker():
        with gateway.transaction():
            _insert(gateway, 20)
        seen.append(_count(gateway))

    thread = threading.Thread(target=worker)
    thread.start()
    thread.join()

    assert seen and _count(gateway) == seen[0]
