from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime

from ...domain.enums import AppointmentStatus, PaymentStatus


@dataclass
class AppointmentDto:
    id: str
    patient_id: str
    doctor_id: str
    date_key: str
    time_key: str
    amount: float
    payment: PaymentStatus
    status: AppointmentStatus
    created_at: datetime
    user_data: Dict[str, Any] = field(default_factory=dict)
    doc_data: Dict[str, Any] = field(default_factory=dict)
    updated_at: Optional[datetime] = None

    @property
    def cancelled(self) -> bool:
        return self.status is AppointmentStatus.CANCELLED

    @property
    def is_completed(self) -> bool:
        return self.status is AppointmentStatus.COMPLETED


class AppointmentsRepository:
    def create(self, patient_id: str, doctor_id: str, user_data: Dict[str, Any], doc_data: Dict[str, Any], date_key: str, time_key: str, amount: float, payment: PaymentStatus) -> AppointmentDto:
        ...

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        ...

    def transition(self, appointment_id: str, from_status: AppointmentStatus, to_status: AppointmentStatus) -> Optional[AppointmentDto]:
        """Conditional state change; returns None when the row was not in ``from_status``."""
        ...

    def set_payment(self, appointment_id: str, payment: PaymentStatus) -> Optional[AppointmentDto]:
        """Updates payment of a non-cancelled appointment; None otherwise."""
        ...

    def find_holder(self, doctor_id: str, date_key: str, time_key: str) -> Optional[AppointmentDto]:
        """Booked or completed appointment holding the slot, if any."""
        ...

    def list_for_patient(self, patient_id: str) -> List[AppointmentDto]:
        ...

    def list_for_doctor(self, doctor_id: str) -> List[AppointmentDto]:
        ...

    def list_all(self) -> List[AppointmentDto]:
        ...
