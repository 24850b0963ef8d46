from dataclasses import dataclass, field
from datetime import timedelta
from typing import List, Tuple
import logging

from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto
from ..ports.doctor_repo import DoctorRepository, DoctorDto
from ..ports.patient_repo import PatientRepository
from ..ports.reservation_store import ReservationStore
from .appointment_lifecycle import AppointmentLifecycle
from ...domain.enums import AppointmentStatus, PaymentStatus, Requester, ReservationSource
from ...domain.errors import AppointmentNotFound, DoctorNotFound, InvalidTransition, PatientNotFound
from ...utils import utcnow

logger = logging.getLogger(__name__)


def price_for(doctor: DoctorDto) -> Tuple[float, PaymentStatus]:
    """Government doctors are free and settled up front."""
    if doctor.is_government:
        return 0, PaymentStatus.COMPLETE
    return doctor.fees, PaymentStatus.PENDING


@dataclass
class AdminDashboard:
    doctors: int
    appointments: int
    patients: int
    latest_appointments: List[AppointmentDto] = field(default_factory=list)


@dataclass
class BookingService:
    store: ReservationStore
    lifecycle: AppointmentLifecycle
    appointments: AppointmentsRepository
    doctors: DoctorRepository
    patients: PatientRepository

    def book(self, patient_id: str, doctor_id: str, date_key: str, time_key: str) -> AppointmentDto:
        doctor = self.doctors.get_by_id(doctor_id)
        if doctor is None:
            raise DoctorNotFound(doctor_id=doctor_id)

        self.store.reserve_slot(doctor_id, date_key, time_key)
        try:
            patient = self.patients.get_by_id(patient_id)
            if patient is None:
                raise PatientNotFound(patient_id=patient_id)
            amount, payment = price_for(doctor)
            appointment = self.lifecycle.create(doctor, patient, date_key, time_key, amount, payment)
        except Exception:
            # Reservation without an appointment would keep the slot blocked forever
            logger.warning(f"Booking of {doctor_id} {date_key} {time_key} failed after reserve; releasing slot")
            try:
                self.store.release_slot(doctor_id, date_key, time_key)
            except Exception:
                # Left for reconcile_orphans; the caller still sees the booking error
                logger.exception(f"Could not release {doctor_id} {date_key} {time_key} after failed booking")
            raise

        logger.info(f"Appointment {appointment.id} booked: doctor={doctor_id} patient={patient_id} slot={date_key} {time_key}")
        return appointment

    def cancel(self, appointment_id: str, requester: Requester) -> AppointmentDto:
        return self.lifecycle.cancel(self._get(appointment_id), requester)

    def complete(self, appointment_id: str, requester_doctor_id: str) -> AppointmentDto:
        return self.lifecycle.complete(self._get(appointment_id), requester_doctor_id)

    def update_payment(self, appointment_id: str, payment: PaymentStatus) -> AppointmentDto:
        appointment = self._get(appointment_id)
        if appointment.status is AppointmentStatus.CANCELLED:
            raise InvalidTransition("Cannot change payment of a cancelled appointment", appointment_id=appointment_id)
        updated = self.appointments.set_payment(appointment_id, payment)
        if updated is None:
            raise InvalidTransition("Cannot change payment of a cancelled appointment", appointment_id=appointment_id)
        return updated

    def list_for_patient(self, patient_id: str) -> List[AppointmentDto]:
        return self.appointments.list_for_patient(patient_id)

    def list_for_doctor(self, doctor_id: str) -> List[AppointmentDto]:
        return self.appointments.list_for_doctor(doctor_id)

    def list_all(self) -> List[AppointmentDto]:
        return self.appointments.list_all()

    def admin_dashboard(self, latest: int = 5) -> AdminDashboard:
        appts = self.appointments.list_all()
        return AdminDashboard(
            doctors=len(self.doctors.list_all()),
            appointments=len(appts),
            patients=self.patients.count(),
            latest_appointments=appts[:latest],
        )

    def reconcile_orphans(self, grace_seconds: int) -> int:
        """Release reservations left behind by a crash between reserve and create.

        Only reservations older than ``grace_seconds`` are considered, so an
        in-flight booking is never robbed of its slot. Imported legacy
        reservations have no appointment row and are always kept.
        """
        cutoff = utcnow() - timedelta(seconds=grace_seconds)
        released = 0
        for reservation in self.store.list_reservations(reserved_before=cutoff):
            if reservation.source is ReservationSource.LEGACY:
                continue
            if self.appointments.find_holder(reservation.doctor_id, reservation.date_key, reservation.time_key):
                continue
            self.store.release_slot(reservation.doctor_id, reservation.date_key, reservation.time_key)
            logger.warning(f"Released orphaned reservation {reservation.doctor_id} {reservation.date_key} {reservation.time_key}")
            released += 1
        return released

    def _get(self, appointment_id: str) -> AppointmentDto:
        appointment = self.appointments.get_by_id(appointment_id)
        if appointment is None:
            raise AppointmentNotFound(appointment_id=appointment_id)
        return appointment
