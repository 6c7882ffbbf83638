"""Read the legacy tables into typed, read-only snapshots."""

from __future__ import annotations

import sqlite3
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, TypeVar

from loguru import logger

from .errors import ExtractionError
from .loader import LegacyStore
from .models import (
    LegacyAccount,
    LegacyAvailability,
    LegacyCompetenceProfile,
    LegacySnapshot,
)

T = TypeVar("T")

# Known misspelling in the legacy role table.
ROLE_NAME_FIXES: dict[str, str] = {"RECRUIT": "RECRUITER"}


def normalize_role_name(name: str) -> str:
    """Upper-case a legacy role name and apply the known spelling fixes."""

    upper = name.upper()
    return ROLE_NAME_FIXES.get(upper, upper)


class LegacyExtractor:
    """Drains every legacy table of a :class:`LegacyStore` into memory."""

    def __init__(self, store: LegacyStore):
        self.store = store

    def extract(self) -> LegacySnapshot:
        roles = self.extract_roles()
        logger.info("{} roles loaded", len(roles))

        accounts = self.extract_accounts()
        logger.info("{} accounts loaded", len(accounts))

        availabilities = self.extract_availabilities()
        logger.info("{} availabilities loaded", len(availabilities))

        competences = self.extract_competences()
        logger.info("{} competences loaded", len(competences))

        profiles = self.extract_competence_profiles()
        logger.info("{} competence profiles loaded", len(profiles))

        return LegacySnapshot.freeze(
            roles=roles,
            accounts=accounts,
            availabilities=availabilities,
            competences=competences,
            competence_profiles=profiles,
        )

    # ------------------------------------------------------------------
    # Per-table readers
    def extract_roles(self) -> dict[int, str]:
        def _decode(row: _RowReader) -> tuple[int, str]:
            name = row.text("name")
            if name is None:
                raise row.error("name", "role name is null")
            return row.identifier("role_id"), normalize_role_name(name)

        return self._read("role", _decode)

    def extract_accounts(self) -> dict[int, LegacyAccount]:
        def _decode(row: _RowReader) -> tuple[int, LegacyAccount]:
            legacy_id = row.identifier("person_id")
            account = LegacyAccount(
                legacy_id=legacy_id,
                first_name=row.text("name"),
                last_name=row.text("surname"),
                ssn=row.text("ssn"),
                email=row.text("email"),
                username=row.text("username"),
                password=row.text("password"),
                role_id=row.identifier("role_id"),
            )
            return legacy_id, account

        return self._read("person", _decode)

    def extract_availabilities(self) -> dict[int, LegacyAvailability]:
        def _decode(row: _RowReader) -> tuple[int, LegacyAvailability]:
            legacy_id = row.identifier("availability_id")
            availability = LegacyAvailability(
                legacy_id=legacy_id,
                from_date=row.date("from_date"),
                to_date=row.date("to_date"),
                account_id=row.identifier("person_id"),
            )
            return legacy_id, availability

        return self._read("availability", _decode)

    def extract_competences(self) -> dict[int, str]:
        def _decode(row: _RowReader) -> tuple[int, str]:
            name = row.text("name")
            if name is None:
                raise row.error("name", "competence name is null")
            return row.identifier("competence_id"), name

        return self._read("competence", _decode)

    def extract_competence_profiles(self) -> dict[int, LegacyCompetenceProfile]:
        def _decode(row: _RowReader) -> tuple[int, LegacyCompetenceProfile]:
            legacy_id = row.identifier("competence_profile_id")
            profile = LegacyCompetenceProfile(
                legacy_id=legacy_id,
                years_of_experience=row.decimal("years_of_experience"),
                account_id=row.identifier("person_id"),
                competence_id=row.identifier("competence_id"),
            )
            return legacy_id, profile

        return self._read("competence_profile", _decode)

    # ------------------------------------------------------------------
    # Helpers
    def _read(self, table: str, decode: Callable[["_RowReader"], tuple[int, T]]) -> dict[int, T]:
        decoded = [decode(_RowReader(table, index, row)) for index, row in enumerate(self.store.fetch_all(table))]
        decoded.sort(key=lambda item: item[0])

        records: dict[int, T] = {}
        for legacy_id, record in decoded:
            if legacy_id in records:
                raise ExtractionError(f"Duplicate id {legacy_id} in legacy table '{table}'")
            records[legacy_id] = record
        return records


class _RowReader:
    """Typed column access for a single legacy row."""

    def __init__(self, table: str, index: int, row: sqlite3.Row):
        self.table = table
        self.index = index
        self.row = row

    def error(self, column: str, reason: str) -> ExtractionError:
        return ExtractionError(f"{self.table} row #{self.index} column '{column}': {reason}")

    def raw(self, column: str) -> Any:
        if column not in self.row.keys():
            raise self.error(column, "missing column")
        return self.row[column]

    def text(self, column: str) -> str | None:
        value = self.raw(column)
        if value is None:
            return None
        return str(value)

    def identifier(self, column: str) -> int:
        value = self.raw(column)
        if value is None:
            raise self.error(column, "identifier is null")
        if isinstance(value, bool) or (isinstance(value, float) and not value.is_integer()):
            raise self.error(column, f"not an integer identifier: {value!r}")
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise self.error(column, f"not an integer identifier: {value!r}") from exc

    def date(self, column: str) -> date | None:
        value = self.raw(column)
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        text = str(value).strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text).date()
        except ValueError as exc:
            raise self.error(column, f"malformed date {value!r}") from exc

    def decimal(self, column: str) -> Decimal | None:
        value = self.raw(column)
        if value is None:
            return None
        try:
            number = Decimal(str(value).strip())
        except InvalidOperation as exc:
            raise self.error(column, f"not a decimal number: {value!r}") from exc
        if not number.is_finite():
            raise self.error(column, f"not a finite number: {value!r}")
        return number


__all__ = ["LegacyExtractor", "normalize_role_name", "ROLE_NAME_FIXES"]
