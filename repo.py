from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Iterator, Mapping
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from models import (
    Base, Patient as PatientORM, MedicalHistory as MedicalHistoryORM,
    Representative as RepresentativeORM, Consultation as ConsultationORM,
    Prescription as PrescriptionORM,
)
from domain import DTO_TYPES, EntityDTO, EntityRef, EntityType
from archival.adapter import StorageError
from archival.errors import NotFound
from archival.graph import GRAPH, ArchivalGraph

ORM_TYPES: dict[EntityType, type[Base]] = {
    EntityType.PATIENT: PatientORM,
    EntityType.MEDICAL_HISTORY: MedicalHistoryORM,
    EntityType.REPRESENTATIVE: RepresentativeORM,
    EntityType.CONSULTATION: ConsultationORM,
    EntityType.PRESCRIPTION: PrescriptionORM,
}

# Filled in by the database, never copied from a DTO
_DB_OWNED = {"id", "created_at", "updated_at"}

def _to_dto(entity_type: EntityType, orm: Base) -> EntityDTO:
    dto_cls = DTO_TYPES[entity_type]
    return dto_cls(**{name: getattr(orm, name) for name in dto_cls.field_names()})

def _apply(dto: EntityDTO, orm: Base | None = None) -> Base:
    t = orm or ORM_TYPES[dto.entity_type]()
    for name in dto.field_names() - _DB_OWNED:
        setattr(t, name, getattr(dto, name))
    return t

class ArchiveRepo:
    """SQLAlchemy persistence adapter; one short session per call so it is safe across threads."""

    def __init__(self, sessions: sessionmaker, graph: ArchivalGraph = GRAPH):
        self.sessions = sessions
        self.graph = graph

    @contextmanager
    def _session(self) -> Iterator[Session]:
        s = self.sessions()
        try:
            yield s
        except SQLAlchemyError as e:
            s.rollback()
            raise StorageError(str(e)) from e
        finally:
            s.close()

    def _load(self, s: Session, entity_type: EntityType, entity_id: int) -> Base:
        entity_type = EntityType(entity_type)
        orm = s.get(ORM_TYPES[entity_type], entity_id)
        if orm is None:
            raise NotFound(EntityRef(entity_type, entity_id))
        return orm

    # --- adapter protocol ---

    def get(self, entity_type: EntityType, entity_id: int) -> EntityDTO:
        with self._session() as s:
            return _to_dto(EntityType(entity_type), self._load(s, entity_type, entity_id))

    def update(self, entity_type: EntityType, entity_id: int, fields: Mapping[str, Any]) -> None:
        entity_type = EntityType(entity_type)
        unknown = set(fields) - (DTO_TYPES[entity_type].field_names() - _DB_OWNED)
        if unknown:
            raise ValueError(f"unknown field(s) for {entity_type.value}: {sorted(unknown)}")
        with self._session() as s:
            orm = self._load(s, entity_type, entity_id)
            for name, value in fields.items():
                setattr(orm, name, value)
            s.commit()

    def list_children(self, parent_type: EntityType, parent_id: int) -> list[EntityDTO]:
        out: list[EntityDTO] = []
        with self._session() as s:
            for edge in self.graph.child_edges(EntityType(parent_type)):
                orm_cls = ORM_TYPES[edge.child_type]
                stmt = (select(orm_cls)
                        .where(getattr(orm_cls, edge.parent_key_field) == parent_id)
                        .order_by(orm_cls.id))
                out.extend(_to_dto(edge.child_type, r) for r in s.scalars(stmt).all())
        return out

    # --- glue for the record screens ---

    def create(self, dto: EntityDTO) -> int:
        orm = _apply(dto)
        with self._session() as s:
            s.add(orm)
            try:
                s.commit()
            except IntegrityError as e:
                s.rollback()
                if dto.entity_type is EntityType.MEDICAL_HISTORY:
                    raise ValueError(f"Patient {dto.patient_id} already has a medical history.") from e
                raise ValueError(f"Cannot create {dto.entity_type.value}: {e.orig}") from e
            return orm.id

    def list_by_status(self, entity_type: EntityType, active: bool) -> list[EntityDTO]:
        """Active or archived records of one type, most recently changed first."""
        entity_type = EntityType(entity_type)
        orm_cls = ORM_TYPES[entity_type]
        stmt = (select(orm_cls)
                .where(orm_cls.is_active == active)
                .order_by(orm_cls.updated_at.desc(), orm_cls.id.desc()))
        with self._session() as s:
            return [_to_dto(entity_type, r) for r in s.scalars(stmt).all()]
