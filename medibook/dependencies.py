from fastapi import Depends
from sqlmodel import Session

from .database import get_session
from .application.services.appointment_lifecycle import AppointmentLifecycle
from .application.services.booking_service import BookingService
from .application.services.doctor_service import DoctorService
from .application.ports.notifier import Notifier
from .infrastructure.notifications.log_notifier import LogNotifier
from .infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from .infrastructure.persistence.sqlalchemy.repositories.doctor_repository_sql import SqlDoctorRepository
from .infrastructure.persistence.sqlalchemy.repositories.patient_repository_sql import SqlPatientRepository
from .infrastructure.persistence.sqlalchemy.repositories.reservation_store_sql import SqlReservationStore


def get_booking_service(session: Session = Depends(get_session)) -> BookingService:
    store = SqlReservationStore(session)
    appointments = SqlAppointmentsRepository(session)
    return BookingService(
        store=store,
        lifecycle=AppointmentLifecycle(appointments=appointments, store=store),
        appointments=appointments,
        doctors=SqlDoctorRepository(session),
        patients=SqlPatientRepository(session),
    )


def get_doctor_service(session: Session = Depends(get_session)) -> DoctorService:
    return DoctorService(
        doctors=SqlDoctorRepository(session),
        store=SqlReservationStore(session),
        appointments=SqlAppointmentsRepository(session),
    )


def get_notifier() -> Notifier:
    return LogNotifier()
