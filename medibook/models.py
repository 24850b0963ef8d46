# medibook/models.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid
from sqlalchemy import DateTime, UniqueConstraint, Index

from .utils import utcnow


def _new_id() -> str:
    return uuid.uuid4().hex


class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"

    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str
    email: Optional[str] = Field(default=None, max_length=100)
    speciality: Optional[str] = None
    fees: float = Field(default=0)
    type: str = Field(default="Private")  # Government, Private
    available: bool = Field(default=True)
    address: str = Field(default="{}")  # JSON string
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class Patient(SQLModel, table=True):
    __tablename__ = "patients"

    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str
    email: Optional[str] = Field(default=None, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class SlotReservation(SQLModel, table=True):
    """One held (doctor, date, time) slot. The unique key is the booking guard."""
    __tablename__ = "slot_reservations"
    __table_args__ = (
        UniqueConstraint("doctor_id", "date_key", "time_key", name="uq_slot_reservations_slot"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    doctor_id: str = Field(foreign_key="doctors.id", index=True)
    date_key: str = Field(max_length=10)  # D_M_YYYY
    time_key: str = Field(max_length=8)  # HH:MM
    reserved_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    source: str = Field(default="booking", max_length=16)  # booking, legacy


class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_slot", "doctor_id", "date_key", "time_key"),
    )

    id: str = Field(default_factory=_new_id, primary_key=True)
    patient_id: str = Field(foreign_key="patients.id", index=True)
    doctor_id: str = Field(foreign_key="doctors.id", index=True)
    user_data: str = Field(default="{}")  # JSON snapshot of the patient at booking time
    doc_data: str = Field(default="{}")  # JSON snapshot of the doctor at booking time
    date_key: str = Field(max_length=10)
    time_key: str = Field(max_length=8)
    amount: float = Field(default=0)
    payment: str = Field(default="pending")  # pending, rejected, complete
    status: str = Field(default="booked")  # booked, cancelled, completed
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
