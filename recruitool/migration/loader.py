"""Scratch in-memory database holding the legacy dump."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from loguru import logger

from .errors import StoreError

LEGACY_TABLES: tuple[str, ...] = (
    "role",
    "person",
    "availability",
    "competence",
    "competence_profile",
)


@dataclass(slots=True)
class DumpStats:
    """Outcome of replaying a dump file."""

    path: Path
    executed: int = 0
    failed: int = 0

    def as_dict(self) -> dict[str, object]:
        return {
            "dump_path": str(self.path),
            "statements_executed": self.executed,
            "statements_failed": self.failed,
        }


def split_statements(script: str) -> Iterator[str]:
    """Yield the statements of ``script``, split on every literal ``;``.

    Blank fragments are dropped. Text after the final ``;`` is ignored, the
    same as an unterminated statement.
    """

    *statements, _trailer = script.split(";")
    for statement in statements:
        if statement.strip():
            yield statement


class LegacyStore:
    """In-memory SQLite database that the legacy dump is replayed into.

    Use as a context manager so the connection is closed whether extraction
    succeeds or not.
    """

    def __init__(self) -> None:
        self._conn: sqlite3.Connection | None = sqlite3.connect(":memory:")
        self._conn.row_factory = sqlite3.Row

    def __enter__(self) -> "LegacyStore":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreError("Legacy store is already closed")
        return self._conn

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            logger.debug("Legacy store closed")

    def load_dump(self, path: Path, *, encoding: str = "utf-8") -> DumpStats:
        """Execute every statement of the dump file, one at a time.

        Failing statements are logged and skipped; they never abort the load.
        """

        try:
            script = Path(path).read_text(encoding=encoding)
        except OSError as exc:
            raise StoreError(f"Cannot read legacy dump {path}: {exc}") from exc
        return self.load_script(script, source=Path(path))

    def load_script(self, script: str, *, source: Path | None = None) -> DumpStats:
        stats = DumpStats(path=source or Path("<memory>"))
        conn = self.connection
        for statement in split_statements(script):
            try:
                conn.execute(statement)
            except sqlite3.Error as exc:
                stats.failed += 1
                logger.warning("Skipping legacy statement ({}): {}", exc, " ".join(statement.split())[:120])
                continue
            stats.executed += 1
        conn.commit()
        logger.info(
            "Legacy database created from {} ({} statements, {} skipped)",
            stats.path,
            stats.executed,
            stats.failed,
        )
        return stats

    def fetch_all(self, table: str) -> list[sqlite3.Row]:
        """Return every row of a legacy table."""

        if table not in LEGACY_TABLES:
            raise ValueError(f"Unknown legacy table: {table}")
        try:
            return self.connection.execute(f"SELECT * FROM {table}").fetchall()
        except sqlite3.Error as exc:
            raise StoreError(f"Cannot read legacy table '{table}': {exc}") from exc


__all__ = ["LEGACY_TABLES", "DumpStats", "LegacyStore", "split_statements"]
