from __future__ import annotations

from src.staff_attendance.staff_attendance.database import bootstrap
from src.staff_attendance.staff_attendance.database.bootstrap import SCHEMA_PATH, SEED_PATH, iter_sql_statements

DB = {"host": "localhost", "user": "root", "database": "staff_attendance_test"}


def record_calls(monkeypatch):
    calls = []
    monkeypatch.setattr(bootstrap, "apply_schema", lambda cfg, *, schema_path: calls.append(("schema", schema_path)))
    monkeypatch.setattr(bootstrap, "apply_seed_sql", lambda cfg, *, seed_path: calls.append(("seed", seed_path)))
    monkeypatch.setattr(bootstrap, "list_tables", lambda cfg: ["instructors", "schools", "staff_attendance"])
    return calls


def test_bootstrap_applies_schema_only_by_default(monkeypatch):
    calls = record_calls(monkeypatch)

    tables = bootstrap.bootstrap_database(DB)

    assert calls == [("schema", SCHEMA_PATH)]
    assert tables == ["instructors", "schools", "staff_attendance"]


def test_bootstrap_with_seed_loads_demo_data_after_schema(monkeypatch):
    calls = record_calls(monkeypatch)

    bootstrap.bootstrap_database(DB, seed_path=SEED_PATH)

    assert [name for name, _ in calls] == ["schema", "seed"]


def test_bundled_schema_defines_attendance_table():
    statements = list(iter_sql_statements(SCHEMA_PATH.read_text(encoding="utf-8")))

    assert any("CREATE TABLE" in s and "staff_attendance" in s for s in statements)
    assert SEED_PATH.exists()
