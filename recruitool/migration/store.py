"""Insert/select access to the redesigned target database."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Iterator, Sequence

from loguru import logger

from .errors import StoreError
from .models import Account, Application

_ACCOUNT_COLUMNS = "ID, FIRSTNAME, LASTNAME, EMAIL, USERNAME, PASSWORD, ACC_ROLE, SSN"
_APPLICATION_COLUMNS = "ID, APPL_STATUS, TIME_OF_REG, ACC_ID"

# Stay well below SQLite's bound-parameter limit.
_IN_CLAUSE_CHUNK = 500


class TargetStore:
    """Thin writer over a DB-API connection using ``qmark`` parameters.

    The store never commits on its own; transaction boundaries belong to the
    caller (see :class:`recruitool.migration.pipeline.RecruitoolMigrator`).
    """

    def __init__(self, connection: Any):
        self.connection = connection

    # ------------------------------------------------------------------
    # ACCOUNT / ACCOUNT_GROUPS
    def insert_account(
        self,
        *,
        first_name: str | None,
        last_name: str | None,
        email: str | None,
        username: str | None,
        password: str | None,
        role: str,
        ssn: str | None,
    ) -> int:
        cursor = self._execute(
            "INSERT INTO ACCOUNT(FIRSTNAME, LASTNAME, EMAIL, USERNAME, PASSWORD, ACC_ROLE, SSN) "
            "VALUES (?, ?, ?, ?, ?, ?, ?)",
            (first_name, last_name, email, username, password, role, ssn),
        )
        return int(cursor.lastrowid)

    def find_account_by_ssn(self, ssn: str) -> Account | None:
        rows = self._fetch(f"SELECT {_ACCOUNT_COLUMNS} FROM ACCOUNT WHERE SSN = ?", (ssn,))
        return _account_from_row(rows[0]) if rows else None

    def fetch_accounts(self, account_ids: Sequence[int]) -> list[Account]:
        """Read back the given accounts, ordered by id."""

        accounts: list[Account] = []
        for start in range(0, len(account_ids), _IN_CLAUSE_CHUNK):
            chunk = list(account_ids[start : start + _IN_CLAUSE_CHUNK])
            placeholders = ", ".join("?" for _ in chunk)
            rows = self._fetch(
                f"SELECT {_ACCOUNT_COLUMNS} FROM ACCOUNT WHERE ID IN ({placeholders})",
                chunk,
            )
            accounts.extend(_account_from_row(row) for row in rows)
        accounts.sort(key=lambda account: account.id)
        return accounts

    def insert_membership(self, *, group_name: str, username: str | None, account_id: int) -> None:
        self._execute(
            "INSERT INTO ACCOUNT_GROUPS(GROUPNAME, USERNAME, ACCOUNT) VALUES (?, ?, ?)",
            (group_name, username, account_id),
        )

    # ------------------------------------------------------------------
    # APPLICATION and dependent rows
    def find_application(self, account_id: int) -> Application | None:
        rows = self._fetch(
            f"SELECT {_APPLICATION_COLUMNS} FROM APPLICATION WHERE ACC_ID = ? ORDER BY ID",
            (account_id,),
        )
        return _application_from_row(rows[0]) if rows else None

    def insert_application(self, *, status: str, registered_at: datetime, account_id: int) -> None:
        self._execute(
            "INSERT INTO APPLICATION(APPL_STATUS, TIME_OF_REG, ACC_ID) VALUES (?, ?, ?)",
            (status, _to_sql(registered_at), account_id),
        )

    def insert_availability(self, *, from_date: date | None, to_date: date | None, application_id: int) -> None:
        self._execute(
            "INSERT INTO AVAILABILITY(FROM_DATE, TO_DATE, APPL_ID) VALUES (?, ?, ?)",
            (_to_sql(from_date), _to_sql(to_date), application_id),
        )

    def insert_competence(self, *, name: str) -> None:
        self._execute("INSERT INTO COMPETENCE(NAME) VALUES (?)", (name,))

    def insert_competence_profile(
        self,
        *,
        years_of_experience: Decimal | None,
        competence_name: str,
        application_id: int,
    ) -> None:
        self._execute(
            "INSERT INTO COMPETENCEPROFILE(YEARS_OF_EXP, COMP_ID, APPL_ID) VALUES (?, ?, ?)",
            (_to_sql(years_of_experience), competence_name, application_id),
        )

    # ------------------------------------------------------------------
    # Transaction control
    def commit(self) -> None:
        try:
            self.connection.commit()
        except sqlite3.Error as exc:
            raise StoreError(f"Commit failed: {exc}") from exc

    def rollback(self) -> None:
        try:
            self.connection.rollback()
        except sqlite3.Error as exc:
            raise StoreError(f"Rollback failed: {exc}") from exc

    def _execute(self, sql: str, params: Sequence[Any]) -> Any:
        try:
            cursor = self.connection.cursor()
            cursor.execute(sql, tuple(params))
        except sqlite3.Error as exc:
            raise StoreError(f"{exc} while executing: {sql}") from exc
        return cursor

    def _fetch(self, sql: str, params: Sequence[Any]) -> list[tuple[Any, ...]]:
        cursor = self._execute(sql, params)
        try:
            return [tuple(row) for row in cursor.fetchall()]
        except sqlite3.Error as exc:
            raise StoreError(f"{exc} while reading: {sql}") from exc


@contextmanager
def open_target_store(database: str | Path, *, timeout: float = 5.0) -> Iterator[TargetStore]:
    """Open the SQLite target database and close it on exit."""

    try:
        connection = sqlite3.connect(str(database), timeout=timeout)
    except sqlite3.Error as exc:
        raise StoreError(f"Cannot open target database {database}: {exc}") from exc
    logger.info("Connected to target database {}", database)
    try:
        yield TargetStore(connection)
    finally:
        connection.close()
        logger.debug("Target database {} closed", database)


def _to_sql(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat(sep=" ")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


def _parse_timestamp(value: Any) -> datetime | None:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as exc:
        raise StoreError(f"Unreadable TIME_OF_REG value {value!r}") from exc


def _account_from_row(row: tuple[Any, ...]) -> Account:
    account_id, first_name, last_name, email, username, password, role, ssn = row
    return Account(
        id=int(account_id),
        first_name=first_name,
        last_name=last_name,
        email=email,
        username=username,
        password_hash=password,
        role=role,
        ssn=ssn,
    )


def _application_from_row(row: tuple[Any, ...]) -> Application:
    application_id, status, registered_at, account_id = row
    return Application(
        id=int(application_id),
        status=status,
        registered_at=_parse_timestamp(registered_at),
        account_id=int(account_id),
    )


__all__ = ["TargetStore", "open_target_store"]
