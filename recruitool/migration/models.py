"""Record types shared by the extractor, the transformers and the target store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

APPLICANT_ROLE = "APPLICANT"
SUBMITTED_STATUS = "SUBMITTED"


# ----------------------------------------------------------------------
# Legacy schema snapshots


@dataclass(frozen=True, slots=True)
class LegacyAccount:
    legacy_id: int
    first_name: str | None
    last_name: str | None
    ssn: str | None
    email: str | None
    username: str | None
    password: str | None
    role_id: int


@dataclass(frozen=True, slots=True)
class LegacyAvailability:
    legacy_id: int
    from_date: date | None
    to_date: date | None
    account_id: int


@dataclass(frozen=True, slots=True)
class LegacyCompetenceProfile:
    legacy_id: int
    years_of_experience: Decimal | None
    account_id: int
    competence_id: int


@dataclass(frozen=True, slots=True)
class LegacySnapshot:
    """Read-only view of every legacy table, keyed by legacy identifier."""

    roles: Mapping[int, str]
    accounts: Mapping[int, LegacyAccount]
    availabilities: Mapping[int, LegacyAvailability]
    competences: Mapping[int, str]
    competence_profiles: Mapping[int, LegacyCompetenceProfile]

    @classmethod
    def freeze(
        cls,
        *,
        roles: dict[int, str],
        accounts: dict[int, LegacyAccount],
        availabilities: dict[int, LegacyAvailability],
        competences: dict[int, str],
        competence_profiles: dict[int, LegacyCompetenceProfile],
    ) -> "LegacySnapshot":
        return cls(
            roles=MappingProxyType(dict(roles)),
            accounts=MappingProxyType(dict(accounts)),
            availabilities=MappingProxyType(dict(availabilities)),
            competences=MappingProxyType(dict(competences)),
            competence_profiles=MappingProxyType(dict(competence_profiles)),
        )

    def counts(self) -> dict[str, int]:
        return {
            "roles": len(self.roles),
            "accounts": len(self.accounts),
            "availabilities": len(self.availabilities),
            "competences": len(self.competences),
            "competence_profiles": len(self.competence_profiles),
        }


# ----------------------------------------------------------------------
# Target schema rows as read back from the store


@dataclass(frozen=True, slots=True)
class Account:
    id: int
    first_name: str | None
    last_name: str | None
    email: str | None
    username: str | None
    password_hash: str | None
    role: str
    ssn: str | None


@dataclass(frozen=True, slots=True)
class AccountMembership:
    group_name: str
    username: str | None
    account_id: int


@dataclass(frozen=True, slots=True)
class Application:
    id: int
    status: str
    registered_at: datetime | None
    account_id: int


__all__ = [
    "APPLICANT_ROLE",
    "SUBMITTED_STATUS",
    "LegacyAccount",
    "LegacyAvailability",
    "LegacyCompetenceProfile",
    "LegacySnapshot",
    "Account",
    "AccountMembership",
    "Application",
]
