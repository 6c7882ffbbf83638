from __future__ import annotations

from pathlib import Path

import pytest

from recruitool.migration.errors import StoreError
from recruitool.migration.loader import LegacyStore, split_statements


def test_split_statements_drops_blank_fragments_and_trailer() -> None:
    script = "CREATE TABLE a (x INT);\n\n;INSERT INTO a VALUES (1);  -- trailing comment"

    statements = [s.strip() for s in split_statements(script)]

    assert statements == ["CREATE TABLE a (x INT)", "INSERT INTO a VALUES (1)"]


def test_load_dump_skips_failing_statements(legacy_dump_path: Path) -> None:
    with LegacyStore() as store:
        stats = store.load_dump(legacy_dump_path)
        roles = store.fetch_all("role")

    assert stats.failed == 2
    assert stats.executed == 15
    assert [row["name"] for row in roles] == ["recruit", "applicant"]


def test_load_script_continues_after_bad_statement() -> None:
    with LegacyStore() as store:
        stats = store.load_script(
            "CREATE TABLE role (role_id INT, name TEXT);"
            "INSERT INTO nowhere VALUES (1);"
            "INSERT INTO role VALUES (1, 'applicant');"
        )
        rows = store.fetch_all("role")

    assert (stats.executed, stats.failed) == (2, 1)
    assert len(rows) == 1


def test_fetch_all_missing_table_raises_store_error() -> None:
    with LegacyStore() as store:
        with pytest.raises(StoreError, match="competence"):
            store.fetch_all("competence")


def test_fetch_all_rejects_unknown_table() -> None:
    with LegacyStore() as store:
        with pytest.raises(ValueError):
            store.fetch_all("sqlite_master")


def test_closed_store_refuses_queries() -> None:
    store = LegacyStore()
    store.close()

    with pytest.raises(StoreError, match="closed"):
        store.fetch_all("role")


def test_missing_dump_file_raises_store_error(tmp_path: Path) -> None:
    with LegacyStore() as store:
        with pytest.raises(StoreError, match="Cannot read legacy dump"):
            store.load_dump(tmp_path / "absent.sql")
