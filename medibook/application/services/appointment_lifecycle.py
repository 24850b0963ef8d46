from dataclasses import dataclass
import logging

from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto
from ..ports.doctor_repo import DoctorDto
from ..ports.patient_repo import PatientDto
from ..ports.reservation_store import ReservationStore
from ...domain.enums import AppointmentStatus, PaymentStatus, Requester, Role
from ...domain.errors import DoctorNotFound, InvalidTransition, Unauthorized

logger = logging.getLogger(__name__)


@dataclass
class AppointmentLifecycle:
    """Booked -> Cancelled | Completed. Both targets are terminal.

    Transitions are conditional writes on the current status, so when a
    cancel and a complete race on one appointment exactly one of them lands.
    """
    appointments: AppointmentsRepository
    store: ReservationStore

    def create(self, doctor: DoctorDto, patient: PatientDto, date_key: str, time_key: str, amount: float, payment: PaymentStatus) -> AppointmentDto:
        # Caller must already hold the reservation for (doctor, date_key, time_key)
        return self.appointments.create(
            patient_id=patient.id,
            doctor_id=doctor.id,
            user_data=patient.snapshot(),
            doc_data=doctor.snapshot(),
            date_key=date_key,
            time_key=time_key,
            amount=amount,
            payment=payment,
        )

    def cancel(self, appointment: AppointmentDto, requester: Requester) -> AppointmentDto:
        if not self._may_cancel(appointment, requester):
            raise Unauthorized(appointment_id=appointment.id, requester_id=requester.id)
        updated = self._transition(appointment, AppointmentStatus.CANCELLED)
        try:
            self.store.release_slot(appointment.doctor_id, appointment.date_key, appointment.time_key)
        except DoctorNotFound:
            # Doctor record removed after booking; nothing left to release
            logger.warning(f"Cancelled appointment {appointment.id} but doctor {appointment.doctor_id} no longer exists")
        except Exception:
            # The cancel is already committed; reconcile_orphans frees the slot later
            logger.exception(f"Cancelled appointment {appointment.id} but could not release its slot")
        logger.info(f"Appointment {appointment.id} cancelled by {requester.role.value} {requester.id}")
        return updated

    def complete(self, appointment: AppointmentDto, requester_doctor_id: str) -> AppointmentDto:
        if appointment.doctor_id != requester_doctor_id:
            raise Unauthorized(appointment_id=appointment.id, requester_id=requester_doctor_id)
        updated = self._transition(appointment, AppointmentStatus.COMPLETED)
        logger.info(f"Appointment {appointment.id} completed by doctor {requester_doctor_id}")
        return updated

    def _transition(self, appointment: AppointmentDto, target: AppointmentStatus) -> AppointmentDto:
        if appointment.status.is_terminal:
            raise InvalidTransition.between(appointment.status.value, target.value, appointment_id=appointment.id)
        updated = self.appointments.transition(appointment.id, AppointmentStatus.BOOKED, target)
        if updated is None:
            # Lost the race against a concurrent transition
            current = self.appointments.get_by_id(appointment.id)
            current_status = current.status.value if current else "missing"
            raise InvalidTransition.between(current_status, target.value, appointment_id=appointment.id)
        return updated

    @staticmethod
    def _may_cancel(appointment: AppointmentDto, requester: Requester) -> bool:
        if requester.role is Role.ADMIN:
            return True
        if requester.role is Role.DOCTOR:
            return appointment.doctor_id == requester.id
        return appointment.patient_id == requester.id
