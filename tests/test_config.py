"""Tests for environment-driven settings and the SQLite wiring."""

import os
from pathlib import Path

import pytest

import config
from app import open_service
from archival import ArchivalService
from config import Settings
from domain import ConsultationDTO, EntityType, MedicalHistoryDTO, PatientDTO

ENV_VARS = (
    "ARCHIVE_DB_PATH",
    "ARCHIVE_VERIFY_AFTER_COMMIT",
    "ARCHIVE_LOCK_TIMEOUT",
    "ARCHIVE_LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield
    # load_dotenv writes straight into os.environ
    for name in ENV_VARS:
        os.environ.pop(name, None)


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env()
        assert settings.db_path == config.DB_PATH
        assert settings.verify_after_commit is True
        assert settings.lock_timeout_seconds == 10.0
        assert settings.log_level == "INFO"

    def test_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ARCHIVE_DB_PATH", str(tmp_path / "clinic.db"))
        monkeypatch.setenv("ARCHIVE_VERIFY_AFTER_COMMIT", "false")
        monkeypatch.setenv("ARCHIVE_LOCK_TIMEOUT", "2.5")
        monkeypatch.setenv("ARCHIVE_LOG_LEVEL", "debug")

        settings = Settings.from_env()

        assert settings.db_path == tmp_path / "clinic.db"
        assert settings.verify_after_commit is False
        assert settings.lock_timeout_seconds == 2.5
        assert settings.log_level == "DEBUG"

    def test_zero_timeout_waits_forever(self, monkeypatch):
        monkeypatch.setenv("ARCHIVE_LOCK_TIMEOUT", "0")
        assert Settings.from_env().lock_timeout_seconds is None

    def test_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("ARCHIVE_LOCK_TIMEOUT=3\nARCHIVE_VERIFY_AFTER_COMMIT=0\n")

        settings = Settings.from_env(env_file)

        assert settings.lock_timeout_seconds == 3.0
        assert settings.verify_after_commit is False

    def test_settings_are_frozen(self):
        with pytest.raises(Exception):
            Settings().log_level = "DEBUG"


class TestOpenService:
    def test_end_to_end_on_sqlite(self, tmp_path):
        service = open_service(Settings(db_path=tmp_path / "clinic.db", log_level="WARNING"))
        assert isinstance(service, ArchivalService)
        repo = service.adapter

        pid = repo.create(PatientDTO(full_name="Ana Perez"))
        hid = repo.create(MedicalHistoryDTO(patient_id=pid))
        cid = repo.create(ConsultationDTO(medical_history_id=hid))

        assert service.archive(EntityType.PATIENT, pid).archived_count == 3
        assert service.probe(EntityType.CONSULTATION, cid).ancestor.name == "Ana Perez"
        assert service.commit(EntityType.CONSULTATION, cid, cascade=True).restored_count == 3
        assert service.check(pid) == []
        assert Path(tmp_path / "clinic.db").exists()
