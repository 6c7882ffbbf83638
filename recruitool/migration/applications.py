"""Migrate availabilities, competences and competence profiles.

Every availability and competence profile hangs off the single application of
its owner's account, created on first reference by the identity resolver.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from loguru import logger

from .errors import DanglingReferenceError, MissingCompetenceError
from .models import (
    Application,
    LegacyAccount,
    LegacyAvailability,
    LegacyCompetenceProfile,
)
from .resolver import IdentityResolver
from .store import TargetStore


@dataclass(frozen=True)
class ApplicationMigrationResult:
    applications: int
    availabilities: int
    competences: int
    competence_profiles: int


class ApplicationTransformer:
    """Runs the availability, competence catalog and competence-profile passes."""

    def __init__(self, store: TargetStore, resolver: IdentityResolver):
        self.store = store
        self.resolver = resolver

    def migrate_applications(
        self,
        availabilities: Mapping[int, LegacyAvailability],
        profiles: Mapping[int, LegacyCompetenceProfile],
        accounts: Mapping[int, LegacyAccount],
        competences: Mapping[int, str],
    ) -> ApplicationMigrationResult:
        created_before = self.resolver.applications_created

        availability_count = self.migrate_availabilities(availabilities, accounts)
        logger.info("{} availabilities migrated", availability_count)

        competence_count = self.migrate_competences(competences)
        logger.info("{} competences migrated", competence_count)

        profile_count = self.migrate_competence_profiles(profiles, accounts, competences)
        logger.info("{} competence profiles migrated", profile_count)

        applications = self.resolver.applications_created - created_before
        logger.info("{} applications created", applications)
        return ApplicationMigrationResult(
            applications=applications,
            availabilities=availability_count,
            competences=competence_count,
            competence_profiles=profile_count,
        )

    def migrate_availabilities(
        self,
        availabilities: Mapping[int, LegacyAvailability],
        accounts: Mapping[int, LegacyAccount],
    ) -> int:
        for availability in availabilities.values():
            owner = self._owner(accounts, availability.account_id, f"availability {availability.legacy_id}")
            application = self._application_for(owner)
            self.store.insert_availability(
                from_date=availability.from_date,
                to_date=availability.to_date,
                application_id=application.id,
            )
        return len(availabilities)

    def migrate_competences(self, competences: Mapping[int, str]) -> int:
        for name in competences.values():
            self.store.insert_competence(name=name)
        return len(competences)

    def migrate_competence_profiles(
        self,
        profiles: Mapping[int, LegacyCompetenceProfile],
        accounts: Mapping[int, LegacyAccount],
        competences: Mapping[int, str],
    ) -> int:
        for profile in profiles.values():
            owner = self._owner(accounts, profile.account_id, f"competence profile {profile.legacy_id}")
            competence = competences.get(profile.competence_id)
            if competence is None:
                raise MissingCompetenceError(
                    f"Competence profile {profile.legacy_id} references unknown competence id {profile.competence_id}"
                )
            application = self._application_for(owner)
            self.store.insert_competence_profile(
                years_of_experience=profile.years_of_experience,
                competence_name=competence,
                application_id=application.id,
            )
        return len(profiles)

    def _application_for(self, owner: LegacyAccount) -> Application:
        account = self.resolver.resolve_account(owner.ssn)
        return self.resolver.resolve_or_create_application(account)

    @staticmethod
    def _owner(accounts: Mapping[int, LegacyAccount], account_id: int, what: str) -> LegacyAccount:
        owner = accounts.get(account_id)
        if owner is None:
            raise DanglingReferenceError(f"Legacy {what} is owned by unknown person {account_id}")
        return owner


__all__ = ["ApplicationMigrationResult", "ApplicationTransformer"]
