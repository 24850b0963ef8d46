import json
from typing import Any, Dict, List, Optional

from sqlalchemy import update
from sqlmodel import Session, select

from .....models import Appointment
from .....application.ports.appointments_repo import AppointmentsRepository, AppointmentDto
from .....domain.enums import AppointmentStatus, PaymentStatus
from .....utils import utcnow


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            patient_id=a.patient_id,
            doctor_id=a.doctor_id,
            date_key=a.date_key,
            time_key=a.time_key,
            amount=a.amount,
            payment=PaymentStatus(a.payment),
            status=AppointmentStatus(a.status),
            created_at=a.created_at,
            user_data=json.loads(a.user_data or "{}"),
            doc_data=json.loads(a.doc_data or "{}"),
            updated_at=a.updated_at,
        )

    def create(self, patient_id: str, doctor_id: str, user_data: Dict[str, Any], doc_data: Dict[str, Any], date_key: str, time_key: str, amount: float, payment: PaymentStatus) -> AppointmentDto:
        appt = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            user_data=json.dumps(user_data),
            doc_data=json.dumps(doc_data),
            date_key=date_key,
            time_key=time_key,
            amount=amount,
            payment=payment.value,
            status=AppointmentStatus.BOOKED.value,
        )
        self.session.add(appt)
        try:
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        self.session.refresh(appt)
        return self._appt_to_dto(appt)

    def get_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        a = self.session.exec(
            select(Appointment)
            .where(Appointment.id == appointment_id)
            .execution_options(populate_existing=True)
        ).first()
        return self._appt_to_dto(a) if a else None

    def transition(self, appointment_id: str, from_status: AppointmentStatus, to_status: AppointmentStatus) -> Optional[AppointmentDto]:
        result = self.session.exec(
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .where(Appointment.status == from_status.value)
            .values(status=to_status.value, updated_at=utcnow())
        )
        self.session.commit()
        if result.rowcount != 1:
            return None
        return self.get_by_id(appointment_id)

    def set_payment(self, appointment_id: str, payment: PaymentStatus) -> Optional[AppointmentDto]:
        result = self.session.exec(
            update(Appointment)
            .where(Appointment.id == appointment_id)
            .where(Appointment.status != AppointmentStatus.CANCELLED.value)
            .values(payment=payment.value, updated_at=utcnow())
        )
        self.session.commit()
        if result.rowcount != 1:
            return None
        return self.get_by_id(appointment_id)

    def find_holder(self, doctor_id: str, date_key: str, time_key: str) -> Optional[AppointmentDto]:
        a = self.session.exec(
            select(Appointment)
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.date_key == date_key)
            .where(Appointment.time_key == time_key)
            .where(Appointment.status.in_([AppointmentStatus.BOOKED.value, AppointmentStatus.COMPLETED.value]))
        ).first()
        return self._appt_to_dto(a) if a else None

    def list_for_patient(self, patient_id: str) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.patient_id == patient_id)
            .order_by(Appointment.created_at.desc())
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def list_for_doctor(self, doctor_id: str) -> List[AppointmentDto]:
        rows = self.session.exec(
            select(Appointment)
            .where(Appointment.doctor_id == doctor_id)
            .order_by(Appointment.created_at.desc())
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def list_all(self) -> List[AppointmentDto]:
        rows = self.session.exec(select(Appointment).order_by(Appointment.created_at.desc())).all()
        return [self._appt_to_dto(r) for r in rows]
