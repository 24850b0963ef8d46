from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..ports.appointments_repo import AppointmentsRepository, AppointmentDto
from ..ports.doctor_repo import DoctorRepository, DoctorDto
from ..ports.reservation_store import ReservationStore
from ...domain.enums import PaymentStatus
from ...domain.errors import DoctorNotFound


@dataclass
class DoctorDashboard:
    earnings: float
    appointments: int
    patients: int
    latest_appointments: List[AppointmentDto] = field(default_factory=list)


@dataclass
class DoctorService:
    doctors: DoctorRepository
    store: ReservationStore
    appointments: AppointmentsRepository

    def list_with_slots(self) -> List[Dict[str, Any]]:
        result = []
        for doctor in self.doctors.list_all():
            result.append({"doctor": doctor, "slots_booked": self.store.slot_map(doctor.id).to_dict()})
        return result

    def toggle_availability(self, doctor_id: str) -> bool:
        available = self.doctors.toggle_availability(doctor_id)
        if available is None:
            raise DoctorNotFound(doctor_id=doctor_id)
        return available

    def dashboard(self, doctor_id: str, latest: int = 5) -> DoctorDashboard:
        doctor: DoctorDto = self.doctors.get_by_id(doctor_id)
        if doctor is None:
            raise DoctorNotFound(doctor_id=doctor_id)
        appts = self.appointments.list_for_doctor(doctor_id)
        earnings = sum(
            a.amount for a in appts
            if a.is_completed or (not a.cancelled and a.payment is PaymentStatus.COMPLETE)
        )
        return DoctorDashboard(
            earnings=earnings,
            appointments=len(appts),
            patients=len({a.patient_id for a in appts}),
            latest_appointments=appts[:latest],
        )
