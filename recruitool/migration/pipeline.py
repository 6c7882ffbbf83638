"""End-to-end migration of a legacy dump into the target database."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, cast

from loguru import logger

from recruitool.config import MigrationConfig, resolve_env_reference
from recruitool.crypto import simple_hash

from .accounts import AccountTransformer, PasswordHasher
from .applications import ApplicationTransformer
from .errors import MigrationError
from .extractor import LegacyExtractor
from .loader import LegacyStore
from .models import LegacySnapshot
from .resolver import IdentityResolver
from .store import TargetStore, open_target_store


class RecruitoolMigrator:
    """Orchestrates load, extraction and the two transformers.

    The legacy store is drained and closed before the target store is opened.
    The write phase runs in one transaction: committed on success, rolled back
    on failure when ``config.atomic`` is set, and always rolled back in dry-run
    mode.
    """

    def __init__(
        self,
        config: MigrationConfig,
        *,
        dry_run: bool = False,
        hasher: PasswordHasher = simple_hash,
        now: datetime | None = None,
    ):
        self.config = config
        self.dry_run = dry_run
        self.hasher = hasher
        self.started_at = now or datetime.now(timezone.utc)
        self.report: dict[str, Any] = {
            "generated_at": self.started_at.isoformat(),
            "dry_run": dry_run,
            "source": {},
            "legacy": {},
            "target": {
                "accounts": 0,
                "memberships": 0,
                "applications": 0,
                "availabilities": 0,
                "competences": 0,
                "competence_profiles": 0,
            },
            "status": "pending",
        }

    def run(self) -> dict[str, Any]:
        snapshot = self.extract()

        database = resolve_env_reference(self.config.target.database)
        assert database is not None  # validated by TargetStoreConfig
        with open_target_store(database, timeout=self.config.target.timeout) as store:
            self.write(store, snapshot)

        logger.info("Database migration completed ({})", self.report["status"])
        if self.config.report_path is not None and not self.dry_run:
            self._write_report(self.config.report_path)
        return self.report

    def extract(self) -> LegacySnapshot:
        """Replay the dump into a scratch database and read it into memory."""

        source = self.config.source
        with LegacyStore() as legacy:
            stats = legacy.load_dump(source.dump_path, encoding=source.encoding)
            snapshot = LegacyExtractor(legacy).extract()

        self.report["source"] = stats.as_dict()
        self.report["legacy"] = snapshot.counts()
        return snapshot

    def write(self, store: TargetStore, snapshot: LegacySnapshot) -> None:
        """Run both transformers inside the caller-level transaction."""

        try:
            self._transform(store, snapshot)
        except MigrationError as exc:
            if self.config.atomic or self.dry_run:
                logger.error("Migration failed, rolling back target writes: {}", exc)
                store.rollback()
                self.report["status"] = "rolled_back"
            else:
                logger.error("Migration failed, keeping rows written so far: {}", exc)
                store.commit()
                self.report["status"] = "partial"
            raise

        if self.dry_run:
            store.rollback()
            self.report["status"] = "rolled_back"
            logger.info("[dry-run] Target writes rolled back")
        else:
            store.commit()
            self.report["status"] = "committed"

    def _transform(self, store: TargetStore, snapshot: LegacySnapshot) -> None:
        target = cast(dict[str, int], self.report["target"])

        account_result = AccountTransformer(store, hasher=self.hasher).migrate_accounts(
            snapshot.accounts,
            snapshot.roles,
        )
        target["accounts"] = account_result.accounts
        target["memberships"] = account_result.memberships

        resolver = IdentityResolver(store, registered_at=self.started_at)
        application_result = ApplicationTransformer(store, resolver).migrate_applications(
            snapshot.availabilities,
            snapshot.competence_profiles,
            snapshot.accounts,
            snapshot.competences,
        )
        target["applications"] = application_result.applications
        target["availabilities"] = application_result.availabilities
        target["competences"] = application_result.competences
        target["competence_profiles"] = application_result.competence_profiles

    def _write_report(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.report, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        logger.info("Wrote migration report {}", path)


__all__ = ["RecruitoolMigrator"]
