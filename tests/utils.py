"""Builders and assertions shared across test modules."""

from __future__ import annotations

import sqlite3
import sys
from contextlib import contextmanager
from datetime import date
from decimal import Decimal

from loguru import logger

from recruitool.migration.models import (
    LegacyAccount,
    LegacyAvailability,
    LegacyCompetenceProfile,
)


def legacy_account(
    legacy_id: int,
    *,
    ssn: str | None = None,
    role_id: int = 2,
    username: str | None = None,
    password: str | None = None,
) -> LegacyAccount:
    return LegacyAccount(
        legacy_id=legacy_id,
        first_name=f"First{legacy_id}",
        last_name=f"Last{legacy_id}",
        ssn=ssn,
        email=f"person{legacy_id}@example.com",
        username=username,
        password=password,
        role_id=role_id,
    )


def legacy_availability(legacy_id: int, account_id: int, start: date, end: date) -> LegacyAvailability:
    return LegacyAvailability(legacy_id=legacy_id, from_date=start, to_date=end, account_id=account_id)


def legacy_profile(legacy_id: int, account_id: int, competence_id: int, years: str) -> LegacyCompetenceProfile:
    return LegacyCompetenceProfile(
        legacy_id=legacy_id,
        years_of_experience=Decimal(years),
        account_id=account_id,
        competence_id=competence_id,
    )


def count_rows(conn: sqlite3.Connection, table: str) -> int:
    return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]


@contextmanager
def logger_to_stderr(level: str = "INFO"):
    """Temporarily route Loguru output to stderr for assertion."""

    handler_id = logger.add(sys.stderr, level=level)
    try:
        yield
    finally:
        logger.remove(handler_id)
