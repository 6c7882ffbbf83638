from __future__ import annotations

import sqlite3
from datetime import datetime, timezone

import pytest

from recruitool.migration.errors import NotFoundError
from recruitool.migration.resolver import IdentityResolver
from recruitool.migration.store import TargetStore

from tests.utils import count_rows

RUN_AT = datetime(2017, 3, 1, 12, 0, tzinfo=timezone.utc)


def _insert_account(store: TargetStore, ssn: str | None, role: str = "APPLICANT") -> int:
    return store.insert_account(
        first_name="Per",
        last_name="Strand",
        email=None,
        username=None,
        password=None,
        role=role,
        ssn=ssn,
    )


def test_resolve_account_before_migration_raises(target_store: TargetStore) -> None:
    resolver = IdentityResolver(target_store, registered_at=RUN_AT)

    with pytest.raises(NotFoundError, match="123-45"):
        resolver.resolve_account("123-45")


def test_resolve_account_without_ssn_raises(target_store: TargetStore) -> None:
    resolver = IdentityResolver(target_store, registered_at=RUN_AT)

    with pytest.raises(NotFoundError):
        resolver.resolve_account(None)


def test_resolve_account_by_ssn(target_store: TargetStore) -> None:
    account_id = _insert_account(target_store, "123-45")
    _insert_account(target_store, "999-99")
    resolver = IdentityResolver(target_store, registered_at=RUN_AT)

    account = resolver.resolve_account("123-45")

    assert account.id == account_id
    assert account.ssn == "123-45"
    assert resolver.resolve_account("123-45") is account


def test_resolve_or_create_application_is_idempotent(
    target_store: TargetStore, target_conn: sqlite3.Connection
) -> None:
    _insert_account(target_store, "123-45")
    resolver = IdentityResolver(target_store, registered_at=RUN_AT)
    account = resolver.resolve_account("123-45")

    first = resolver.resolve_or_create_application(account)
    second = resolver.resolve_or_create_application(account)

    assert first.id == second.id
    assert first.status == "SUBMITTED"
    assert first.account_id == account.id
    assert first.registered_at == RUN_AT
    assert count_rows(target_conn, "APPLICATION") == 1
    assert resolver.applications_created == 1


def test_fresh_resolver_reuses_stored_application(
    target_store: TargetStore, target_conn: sqlite3.Connection
) -> None:
    _insert_account(target_store, "123-45")
    first_resolver = IdentityResolver(target_store, registered_at=RUN_AT)
    account = first_resolver.resolve_account("123-45")
    created = first_resolver.resolve_or_create_application(account)

    second_resolver = IdentityResolver(target_store, registered_at=RUN_AT)
    reused = second_resolver.resolve_or_create_application(account)

    assert reused.id == created.id
    assert second_resolver.applications_created == 0
    assert count_rows(target_conn, "APPLICATION") == 1


def test_each_account_gets_its_own_application(target_store: TargetStore) -> None:
    _insert_account(target_store, "111-11")
    _insert_account(target_store, "222-22")
    resolver = IdentityResolver(target_store, registered_at=RUN_AT)

    first = resolver.resolve_or_create_application(resolver.resolve_account("111-11"))
    second = resolver.resolve_or_create_application(resolver.resolve_account("222-22"))

    assert first.id != second.id
    assert resolver.applications_created == 2
