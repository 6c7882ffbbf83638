"""Legacy recruitment database migration."""

from __future__ import annotations

from .accounts import AccountMigrationResult, AccountTransformer
from .applications import ApplicationMigrationResult, ApplicationTransformer
from .errors import (
    DanglingReferenceError,
    ExtractionError,
    MigrationError,
    MissingCompetenceError,
    MissingRoleError,
    NotFoundError,
    StoreError,
)
from .extractor import LegacyExtractor
from .loader import LegacyStore
from .pipeline import RecruitoolMigrator
from .resolver import IdentityResolver
from .store import TargetStore, open_target_store

__all__ = [
    "AccountMigrationResult",
    "AccountTransformer",
    "ApplicationMigrationResult",
    "ApplicationTransformer",
    "DanglingReferenceError",
    "ExtractionError",
    "IdentityResolver",
    "LegacyExtractor",
    "LegacyStore",
    "MigrationError",
    "MissingCompetenceError",
    "MissingRoleError",
    "NotFoundError",
    "RecruitoolMigrator",
    "StoreError",
    "TargetStore",
    "open_target_store",
]
