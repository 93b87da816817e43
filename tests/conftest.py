"""Shared fixtures: storage backends, services and seeded patient trees."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

import pytest

from archival import ArchivalService, MemoryStore, load_subtree
from config import Settings
from database import init_db, make_engine, make_session_factory
from domain import (
    ConsultationDTO,
    EntityRef,
    EntityType,
    MedicalHistoryDTO,
    PatientDTO,
    PrescriptionDTO,
    RepresentativeDTO,
)
from models import Base
from repo import ArchiveRepo


@dataclass
class PatientTree:
    """Ids of one seeded patient record."""

    patient: int
    history: int | None
    consultations: list[int] = field(default_factory=list)
    prescriptions: list[int] = field(default_factory=list)
    representatives: list[int] = field(default_factory=list)

    @property
    def patient_ref(self) -> EntityRef:
        return EntityRef(EntityType.PATIENT, self.patient)

    def refs(self) -> list[EntityRef]:
        out = [self.patient_ref]
        if self.history is not None:
            out.append(EntityRef(EntityType.MEDICAL_HISTORY, self.history))
        out += [EntityRef(EntityType.REPRESENTATIVE, i) for i in self.representatives]
        out += [EntityRef(EntityType.CONSULTATION, i) for i in self.consultations]
        out += [EntityRef(EntityType.PRESCRIPTION, i) for i in self.prescriptions]
        return out


@pytest.fixture
def store():
    """Empty in-memory store."""
    return MemoryStore()


@pytest.fixture
def repo(tmp_path):
    """SQLAlchemy repository over a fresh SQLite file."""
    engine = make_engine(tmp_path / "test.db")
    init_db(engine, Base)
    yield ArchiveRepo(make_session_factory(engine))
    engine.dispose()


@pytest.fixture(params=["memory", "sqlite"])
def adapter(request):
    """Each test using this runs against both storage backends."""
    return request.getfixturevalue("store" if request.param == "memory" else "repo")


@pytest.fixture
def settings(tmp_path):
    return Settings(db_path=tmp_path / "test.db", lock_timeout_seconds=2.0)


@pytest.fixture
def service(adapter, settings):
    return ArchivalService(adapter, settings)


@pytest.fixture
def make_patient(adapter):
    """Factory seeding a patient with a medical history and leaf records."""

    def _make(
        name: str = "Ana Perez",
        consultations: int = 2,
        prescriptions: int = 1,
        representatives: int = 0,
        with_history: bool = True,
    ) -> PatientTree:
        pid = adapter.create(PatientDTO(full_name=name, cedula=None, birth_date=date(1980, 5, 17)))
        tree = PatientTree(patient=pid, history=None)
        for i in range(representatives):
            tree.representatives.append(adapter.create(
                RepresentativeDTO(patient_id=pid, full_name=f"Guardian {i}", relationship="parent")))
        if not with_history:
            return tree
        tree.history = adapter.create(MedicalHistoryDTO(patient_id=pid, blood_type="O+"))
        for i in range(consultations):
            tree.consultations.append(adapter.create(
                ConsultationDTO(medical_history_id=tree.history, reason=f"visit {i}",
                                consultation_date=date(2024, 1, i + 1))))
        for i in range(prescriptions):
            tree.prescriptions.append(adapter.create(
                PrescriptionDTO(medical_history_id=tree.history, patient_name=name,
                                medications=f"drug {i}")))
        return tree

    return _make


@pytest.fixture
def statuses(adapter):
    """``is_active`` of every record under a patient, keyed by reference."""

    def _statuses(tree: PatientTree) -> dict[EntityRef, bool]:
        return load_subtree(adapter, tree.patient_ref).status()

    return _statuses
