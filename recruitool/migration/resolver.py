"""Bridge legacy identities to rows of the target database.

The target database assigns its own identifiers, so accounts are found again
through their social security number and applications through their owning
account.
"""

from __future__ import annotations

from datetime import datetime

from loguru import logger

from .errors import NotFoundError
from .models import SUBMITTED_STATUS, Account, Application
from .store import TargetStore


class IdentityResolver:
    """Look up accounts by ssn and get-or-create one application per account."""

    def __init__(self, store: TargetStore, *, registered_at: datetime):
        self.store = store
        self.registered_at = registered_at
        self.applications_created = 0
        self._accounts: dict[str, Account] = {}
        self._applications: dict[int, Application] = {}

    def resolve_account(self, ssn: str | None) -> Account:
        """Return the migrated account with this ssn.

        Accounts must already be migrated; a miss raises :class:`NotFoundError`.
        """

        if ssn is None:
            raise NotFoundError("Cannot resolve an account without an ssn")

        cached = self._accounts.get(ssn)
        if cached is not None:
            return cached

        account = self.store.find_account_by_ssn(ssn)
        if account is None:
            raise NotFoundError(f"No migrated account with ssn {ssn!r}")
        self._accounts[ssn] = account
        return account

    def resolve_or_create_application(self, account: Account) -> Application:
        """Return the account's application, inserting it on first use."""

        cached = self._applications.get(account.id)
        if cached is not None:
            return cached

        application = self.store.find_application(account.id)
        if application is None:
            self.store.insert_application(
                status=SUBMITTED_STATUS,
                registered_at=self.registered_at,
                account_id=account.id,
            )
            application = self.store.find_application(account.id)
            if application is None:
                raise NotFoundError(f"Application for account {account.id} vanished after insert")
            self.applications_created += 1
            logger.debug("Created application {} for account {}", application.id, account.id)

        self._applications[account.id] = application
        return application


__all__ = ["IdentityResolver"]
