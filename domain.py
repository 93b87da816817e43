from __future__ import annotations
from dataclasses import dataclass, fields
from datetime import date
from enum import Enum
from typing import ClassVar


class EntityType(str, Enum):
    PATIENT = "patient"
    MEDICAL_HISTORY = "medical_history"
    REPRESENTATIVE = "representative"
    CONSULTATION = "consultation"
    PRESCRIPTION = "prescription"


@dataclass(frozen=True)
class EntityRef:
    """Type-qualified id; ids are only unique within one entity type."""
    type: EntityType
    id: int

    def __str__(self) -> str:
        return f"{self.type.value}:{self.id}"


@dataclass(kw_only=True)
class EntityDTO:
    entity_type: ClassVar[EntityType]

    id: int | None = None
    is_active: bool = True
    # True when an ancestor's archive cascade deactivated the row
    archived_by_cascade: bool = False
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def ref(self) -> EntityRef:
        assert self.id is not None
        return EntityRef(self.entity_type, self.id)

    @property
    def display_name(self) -> str:
        return f"{self.entity_type.value} #{self.id}"

    @classmethod
    def field_names(cls) -> set[str]:
        return {f.name for f in fields(cls)}


@dataclass(kw_only=True)
class PatientDTO(EntityDTO):
    entity_type: ClassVar[EntityType] = EntityType.PATIENT

    full_name: str
    cedula: str | None = None
    birth_date: date | None = None
    phone: str | None = None
    address: str | None = None

    @property
    def display_name(self) -> str:
        return self.full_name


@dataclass(kw_only=True)
class MedicalHistoryDTO(EntityDTO):
    entity_type: ClassVar[EntityType] = EntityType.MEDICAL_HISTORY

    patient_id: int
    blood_type: str | None = None
    allergies: str | None = None
    notes: str | None = None


@dataclass(kw_only=True)
class RepresentativeDTO(EntityDTO):
    entity_type: ClassVar[EntityType] = EntityType.REPRESENTATIVE

    patient_id: int
    full_name: str
    relationship: str | None = None
    phone: str | None = None

    @property
    def display_name(self) -> str:
        return self.full_name


@dataclass(kw_only=True)
class ConsultationDTO(EntityDTO):
    entity_type: ClassVar[EntityType] = EntityType.CONSULTATION

    medical_history_id: int | None = None
    reason: str | None = None
    diagnosis: str | None = None
    consultation_date: date | None = None


@dataclass(kw_only=True)
class PrescriptionDTO(EntityDTO):
    entity_type: ClassVar[EntityType] = EntityType.PRESCRIPTION

    medical_history_id: int | None = None
    consultation_id: int | None = None
    patient_name: str | None = None
    medications: str = ""
    date_prescribed: date | None = None

    @property
    def display_name(self) -> str:
        return self.patient_name or super().display_name


DTO_TYPES: dict[EntityType, type[EntityDTO]] = {
    EntityType.PATIENT: PatientDTO,
    EntityType.MEDICAL_HISTORY: MedicalHistoryDTO,
    EntityType.REPRESENTATIVE: RepresentativeDTO,
    EntityType.CONSULTATION: ConsultationDTO,
    EntityType.PRESCRIPTION: PrescriptionDTO,
}
