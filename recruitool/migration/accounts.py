"""Migrate legacy persons into accounts and group memberships."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Mapping

from loguru import logger

from recruitool.crypto import simple_hash

from .errors import MissingRoleError
from .models import APPLICANT_ROLE, LegacyAccount
from .store import TargetStore

PasswordHasher = Callable[[str], str]


@dataclass(frozen=True)
class AccountMigrationResult:
    accounts: int
    memberships: int


class AccountTransformer:
    """Writes ACCOUNT rows, then ACCOUNT_GROUPS rows for non-applicants."""

    def __init__(self, store: TargetStore, *, hasher: PasswordHasher = simple_hash):
        self.store = store
        self.hasher = hasher

    def migrate_accounts(
        self,
        accounts: Mapping[int, LegacyAccount],
        roles: Mapping[int, str],
    ) -> AccountMigrationResult:
        inserted_ids: list[int] = []
        for legacy in accounts.values():
            role = roles.get(legacy.role_id)
            if role is None:
                raise MissingRoleError(
                    f"Legacy person {legacy.legacy_id} references unknown role id {legacy.role_id}"
                )

            account_id = self.store.insert_account(
                first_name=legacy.first_name,
                last_name=legacy.last_name,
                email=legacy.email,
                username=legacy.username,
                password=self._hash_password(legacy.password),
                role=role,
                ssn=legacy.ssn,
            )
            inserted_ids.append(account_id)
            logger.debug("Migrated person {} to account {} ({})", legacy.legacy_id, account_id, role)

        logger.info("{} accounts migrated", len(inserted_ids))

        memberships = self.migrate_memberships(inserted_ids)
        logger.info("{} account group memberships migrated", memberships)
        return AccountMigrationResult(accounts=len(inserted_ids), memberships=memberships)

    def migrate_memberships(self, account_ids: list[int]) -> int:
        """Derive memberships from the stored accounts, not the legacy rows."""

        count = 0
        for account in self.store.fetch_accounts(account_ids):
            # Applicants have no login credentials.
            if account.role == APPLICANT_ROLE:
                continue
            self.store.insert_membership(
                group_name=account.role,
                username=account.username,
                account_id=account.id,
            )
            count += 1
        return count

    def _hash_password(self, password: str | None) -> str | None:
        if password is None:
            return None
        return self.hasher(password)


__all__ = ["AccountMigrationResult", "AccountTransformer", "PasswordHasher"]
