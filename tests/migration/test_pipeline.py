"""End-to-end runs of the migrator against the fixture dump."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

import pytest

from recruitool.config import LegacySourceConfig, MigrationConfig, TargetStoreConfig
from recruitool.crypto import simple_hash
from recruitool.migration import MissingCompetenceError, RecruitoolMigrator, StoreError

from tests.utils import count_rows

RUN_AT = datetime(2017, 3, 1, 12, 0, tzinfo=timezone.utc)


def _config(dump_path: Path, target_db: Path, **overrides: object) -> MigrationConfig:
    return MigrationConfig(
        source=LegacySourceConfig(dump_path=dump_path),
        target=TargetStoreConfig(database=str(target_db)),
        **overrides,
    )


def _broken_dump(tmp_path: Path, legacy_dump_path: Path) -> Path:
    dump = tmp_path / "broken.sql"
    dump.write_text(
        legacy_dump_path.read_text(encoding="utf-8")
        + "INSERT INTO competence_profile VALUES (3, 2, 99, 1.0);\n",
        encoding="utf-8",
    )
    return dump


def test_full_migration(legacy_dump_path: Path, target_db: Path) -> None:
    report = RecruitoolMigrator(_config(legacy_dump_path, target_db), now=RUN_AT).run()

    assert report["status"] == "committed"
    assert report["source"]["statements_failed"] == 2
    assert report["legacy"]["accounts"] == 2
    assert report["target"] == {
        "accounts": 2,
        "memberships": 1,
        "applications": 1,
        "availabilities": 2,
        "competences": 2,
        "competence_profiles": 2,
    }

    conn = sqlite3.connect(target_db)
    try:
        accounts = conn.execute("SELECT USERNAME, PASSWORD, ACC_ROLE, SSN FROM ACCOUNT ORDER BY ID").fetchall()
        assert accounts == [
            ("borg", simple_hash("wl9nk23a"), "RECRUITER", None),
            (None, None, "APPLICANT", "19671212-1211"),
        ]
        assert conn.execute("SELECT GROUPNAME, USERNAME FROM ACCOUNT_GROUPS").fetchall() == [("RECRUITER", "borg")]

        application_id, status, registered_at = conn.execute(
            "SELECT ID, APPL_STATUS, TIME_OF_REG FROM APPLICATION"
        ).fetchone()
        assert status == "SUBMITTED"
        assert datetime.fromisoformat(registered_at) == RUN_AT
        appl_ids = {row[0] for row in conn.execute("SELECT APPL_ID FROM AVAILABILITY")}
        appl_ids |= {row[0] for row in conn.execute("SELECT APPL_ID FROM COMPETENCEPROFILE")}
        assert appl_ids == {application_id}
    finally:
        conn.close()


def test_dry_run_rolls_back(legacy_dump_path: Path, target_db: Path) -> None:
    report_path = target_db.parent / "report.json"
    config = _config(legacy_dump_path, target_db, report_path=report_path)

    report = RecruitoolMigrator(config, dry_run=True).run()

    assert report["dry_run"] is True
    assert report["status"] == "rolled_back"
    assert report["target"]["accounts"] == 2
    assert not report_path.exists()
    conn = sqlite3.connect(target_db)
    try:
        assert count_rows(conn, "ACCOUNT") == 0
        assert count_rows(conn, "APPLICATION") == 0
    finally:
        conn.close()


def test_failure_rolls_back_atomic_run(tmp_path: Path, legacy_dump_path: Path, target_db: Path) -> None:
    migrator = RecruitoolMigrator(_config(_broken_dump(tmp_path, legacy_dump_path), target_db))

    with pytest.raises(MissingCompetenceError):
        migrator.run()

    assert migrator.report["status"] == "rolled_back"
    conn = sqlite3.connect(target_db)
    try:
        assert count_rows(conn, "ACCOUNT") == 0
        assert count_rows(conn, "COMPETENCEPROFILE") == 0
    finally:
        conn.close()


def test_non_atomic_failure_keeps_written_rows(tmp_path: Path, legacy_dump_path: Path, target_db: Path) -> None:
    config = _config(_broken_dump(tmp_path, legacy_dump_path), target_db, atomic=False)
    migrator = RecruitoolMigrator(config)

    with pytest.raises(MissingCompetenceError):
        migrator.run()

    assert migrator.report["status"] == "partial"
    conn = sqlite3.connect(target_db)
    try:
        assert count_rows(conn, "ACCOUNT") == 2
        assert count_rows(conn, "COMPETENCEPROFILE") == 2
    finally:
        conn.close()


def test_report_written_when_configured(legacy_dump_path: Path, target_db: Path) -> None:
    report_path = target_db.parent / "reports" / "migration-report.json"
    config = _config(legacy_dump_path, target_db, report_path=report_path)

    RecruitoolMigrator(config, now=RUN_AT).run()

    persisted = json.loads(report_path.read_text(encoding="utf-8"))
    assert persisted["status"] == "committed"
    assert persisted["generated_at"] == RUN_AT.isoformat()


def test_target_without_schema_raises_store_error(tmp_path: Path, legacy_dump_path: Path) -> None:
    config = _config(legacy_dump_path, tmp_path / "empty.db")

    with pytest.raises(StoreError, match="ACCOUNT"):
        RecruitoolMigrator(config).run()


def test_target_from_environment(
    monkeypatch: pytest.MonkeyPatch, legacy_dump_path: Path, target_db: Path
) -> None:
    monkeypatch.setenv("RECRUITOOL_TEST_DB", str(target_db))
    config = MigrationConfig(
        source=LegacySourceConfig(dump_path=legacy_dump_path),
        target=TargetStoreConfig(database="env:RECRUITOOL_TEST_DB"),
    )

    report = RecruitoolMigrator(config).run()

    assert report["status"] == "committed"
