"""Shared pytest fixtures for the migrator tests."""

from __future__ import annotations

import sqlite3
import sys
from pathlib import Path
from typing import Iterator

import pytest

_REPO_ROOT = Path(__file__).resolve().parents[1]
if str(_REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(_REPO_ROOT))

from recruitool.migration.store import TargetStore  # noqa: E402

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(scope="session")
def legacy_dump_path() -> Path:
    return FIXTURES_DIR / "legacy_dump.sql"


@pytest.fixture(scope="session")
def target_schema() -> str:
    return (FIXTURES_DIR / "target_schema.sql").read_text(encoding="utf-8")


@pytest.fixture()
def target_db(tmp_path: Path, target_schema: str) -> Path:
    """An empty target database file with the redesigned schema."""

    path = tmp_path / "target.db"
    conn = sqlite3.connect(path)
    try:
        conn.executescript(target_schema)
    finally:
        conn.close()
    return path


@pytest.fixture()
def target_conn(target_db: Path) -> Iterator[sqlite3.Connection]:
    conn = sqlite3.connect(target_db)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture()
def target_store(target_conn: sqlite3.Connection) -> TargetStore:
    return TargetStore(target_conn)
