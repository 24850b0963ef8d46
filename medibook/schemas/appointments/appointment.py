# medibook/schemas/appointments/appointment.py
from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List
from datetime import datetime

from ...application.ports.appointments_repo import AppointmentDto
from ...domain.enums import PaymentStatus
from ...domain.slot_map import is_valid_date_key, is_valid_time_key

class BookAppointmentRequest(BaseModel):
    docId: str = Field(min_length=1)
    slotDate: str  # D_M_YYYY
    slotTime: str  # HH:MM

    @field_validator("slotDate")
    @classmethod
    def _check_date_key(cls, v: str) -> str:
        if not is_valid_date_key(v):
            raise ValueError("slotDate must be a calendar date formatted as DD_MM_YYYY")
        return v

    @field_validator("slotTime")
    @classmethod
    def _check_time_key(cls, v: str) -> str:
        if not is_valid_time_key(v):
            raise ValueError("slotTime must be formatted as HH:MM")
        return v

class AppointmentActionRequest(BaseModel):
    appointmentId: str = Field(min_length=1)

class PaymentUpdateRequest(BaseModel):
    payment: PaymentStatus

class AppointmentResponse(BaseModel):
    id: str
    userId: str
    docId: str
    slotDate: str
    slotTime: str
    userData: Dict[str, Any]
    docData: Dict[str, Any]
    amount: float
    payment: PaymentStatus
    status: str
    cancelled: bool
    isCompleted: bool
    date: datetime

    @classmethod
    def from_dto(cls, a: AppointmentDto) -> "AppointmentResponse":
        return cls(
            id=a.id,
            userId=a.patient_id,
            docId=a.doctor_id,
            slotDate=a.date_key,
            slotTime=a.time_key,
            userData=a.user_data,
            docData=a.doc_data,
            amount=a.amount,
            payment=a.payment,
            status=a.status.value,
            cancelled=a.cancelled,
            isCompleted=a.is_completed,
            date=a.created_at,
        )

def appointments_payload(appts: List[AppointmentDto]) -> List[dict]:
    return [AppointmentResponse.from_dto(a).model_dump(mode="json") for a in appts]
