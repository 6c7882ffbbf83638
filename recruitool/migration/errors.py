"""Exceptions raised while migrating the legacy database.

Every error aborts the run. Only failing statements in the legacy dump are
tolerated, and those never raise (see :mod:`recruitool.migration.loader`).
"""

from __future__ import annotations


class MigrationError(RuntimeError):
    """Base class for fatal migration failures."""


class ExtractionError(MigrationError):
    """A legacy row is missing a column or cannot be decoded."""


class MissingRoleError(MigrationError):
    """A legacy person references a role id that does not exist."""


class MissingCompetenceError(MigrationError):
    """A legacy competence profile references an unknown competence id."""


class DanglingReferenceError(MigrationError):
    """An availability or competence profile is owned by an unknown person."""


class NotFoundError(MigrationError):
    """A target-store lookup ran before the row it needs was written."""


class StoreError(MigrationError):
    """The legacy or target database rejected an operation."""


__all__ = [
    "MigrationError",
    "ExtractionError",
    "MissingRoleError",
    "MissingCompetenceError",
    "DanglingReferenceError",
    "NotFoundError",
    "StoreError",
]
