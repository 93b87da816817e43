from __future__ import annotations
from datetime import date
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import String, Date, Text, Boolean, ForeignKey, func

class Base(DeclarativeBase):
    pass

class ArchivableMixin:
    # Soft-delete status shared by every clinical table
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, server_default="1", index=True)
    archived_by_cascade: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")
    created_at: Mapped[str] = mapped_column(server_default=func.datetime("now"))
    updated_at: Mapped[str] = mapped_column(server_default=func.datetime("now"), onupdate=func.datetime("now"))

class Patient(ArchivableMixin, Base):
    __tablename__ = "patients"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(200))
    # National id; optional, duplicated patients carry none
    cedula:     Mapped[str | None] = mapped_column(String(64), nullable=True, index=True)
    birth_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    phone:      Mapped[str | None] = mapped_column(String(60), nullable=True)
    address:    Mapped[str | None] = mapped_column(Text, nullable=True)

class MedicalHistory(ArchivableMixin, Base):
    __tablename__ = "medical_histories"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    # 1:1 with the patient
    patient_id: Mapped[int] = mapped_column(ForeignKey("patients.id"), unique=True, index=True)
    blood_type: Mapped[str | None] = mapped_column(String(8), nullable=True)
    allergies:  Mapped[str | None] = mapped_column(Text, nullable=True)
    notes:      Mapped[str | None] = mapped_column(Text, nullable=True)

class Representative(ArchivableMixin, Base):
    __tablename__ = "patient_representatives"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    patient_id:   Mapped[int] = mapped_column(ForeignKey("patients.id"), index=True)
    full_name:    Mapped[str] = mapped_column(String(200))
    relationship: Mapped[str | None] = mapped_column(String(60), nullable=True)
    phone:        Mapped[str | None] = mapped_column(String(60), nullable=True)

class Consultation(ArchivableMixin, Base):
    __tablename__ = "consultations"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    medical_history_id: Mapped[int | None] = mapped_column(ForeignKey("medical_histories.id"), nullable=True, index=True)
    reason:            Mapped[str | None] = mapped_column(Text, nullable=True)
    diagnosis:         Mapped[str | None] = mapped_column(Text, nullable=True)
    consultation_date: Mapped[date | None] = mapped_column(Date, nullable=True)

class Prescription(ArchivableMixin, Base):
    __tablename__ = "prescriptions"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    medical_history_id: Mapped[int | None] = mapped_column(ForeignKey("medical_histories.id"), nullable=True, index=True)
    # Reference only; archiving the consultation never touches the prescription
    consultation_id: Mapped[int | None] = mapped_column(ForeignKey("consultations.id"), nullable=True, index=True)
    patient_name:    Mapped[str | None] = mapped_column(String(200), nullable=True)
    medications:     Mapped[str] = mapped_column(Text, default="")
    date_prescribed: Mapped[date | None] = mapped_column(Date, nullable=True)
