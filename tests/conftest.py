import os

# Must be set before medibook.config is imported
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DATABASE_URL"] = "sqlite://"

import threading
import uuid
from dataclasses import replace

import pytest
from sqlmodel import SQLModel, Session, create_engine
from sqlalchemy.pool import StaticPool

from medibook import models  # noqa: F401
from medibook.application.ports.appointments_repo import AppointmentDto
from medibook.application.ports.doctor_repo import DoctorDto
from medibook.application.ports.patient_repo import PatientDto
from medibook.application.ports.reservation_store import ReservationDto
from medibook.application.services.appointment_lifecycle import AppointmentLifecycle
from medibook.application.services.booking_service import BookingService
from medibook.domain.enums import AppointmentStatus, ReservationSource
from medibook.domain.errors import AlreadyReserved, DoctorNotFound, DoctorUnavailable, SlotUnavailable
from medibook.domain.slot_map import SlotMap
from medibook.utils import utcnow


class FakeDoctors:
    def __init__(self, *doctors: DoctorDto):
        self.rows = {d.id: d for d in doctors}

    def get_by_id(self, doctor_id):
        return self.rows.get(doctor_id)

    def list_all(self):
        return list(self.rows.values())

    def toggle_availability(self, doctor_id):
        d = self.rows.get(doctor_id)
        if d is None:
            return None
        d.available = not d.available
        return d.available


class FakePatients:
    def __init__(self, *patients: PatientDto):
        self.rows = {p.id: p for p in patients}

    def get_by_id(self, patient_id):
        return self.rows.get(patient_id)

    def count(self):
        return len(self.rows)


class FakeReservationStore:
    """Thread-safe in-process store; one lock makes check-and-insert a single step."""

    def __init__(self, doctors):
        self._doctors = doctors
        self._lock = threading.Lock()
        self._slots = {}
        self._reserved_at = {}
        self._sources = {}

    def _require_doctor(self, doctor_id):
        doctor = self._doctors.get_by_id(doctor_id)
        if doctor is None:
            raise DoctorNotFound(doctor_id=doctor_id)
        return doctor

    def reserve_slot(self, doctor_id, date_key, time_key, source=ReservationSource.BOOKING):
        if not self._require_doctor(doctor_id).available:
            raise DoctorUnavailable(doctor_id=doctor_id)
        with self._lock:
            try:
                self._slots.setdefault(doctor_id, SlotMap()).reserve(date_key, time_key)
            except AlreadyReserved:
                raise SlotUnavailable(doctor_id=doctor_id, date_key=date_key, time_key=time_key)
            self._reserved_at[(doctor_id, date_key, time_key)] = utcnow()
            self._sources[(doctor_id, date_key, time_key)] = source

    def release_slot(self, doctor_id, date_key, time_key):
        self._require_doctor(doctor_id)
        with self._lock:
            slot_map = self._slots.get(doctor_id)
            if slot_map is not None:
                slot_map.release(date_key, time_key)
            self._reserved_at.pop((doctor_id, date_key, time_key), None)
            self._sources.pop((doctor_id, date_key, time_key), None)

    def slot_map(self, doctor_id):
        with self._lock:
            return SlotMap.from_pairs(self._slots.get(doctor_id, SlotMap()))

    def list_reservations(self, reserved_before):
        with self._lock:
            rows = [
                ReservationDto(doctor_id=d, date_key=dk, time_key=tk, reserved_at=at, source=self._sources[(d, dk, tk)])
                for (d, dk, tk), at in self._reserved_at.items()
                if at < reserved_before
            ]
        return sorted(rows, key=lambda r: r.reserved_at)


class FakeAppointments:
    def __init__(self):
        self._lock = threading.Lock()
        self._rows = {}

    def create(self, patient_id, doctor_id, user_data, doc_data, date_key, time_key, amount, payment):
        now = utcnow()
        appt = AppointmentDto(
            id=uuid.uuid4().hex,
            patient_id=patient_id,
            doctor_id=doctor_id,
            date_key=date_key,
            time_key=time_key,
            amount=amount,
            payment=payment,
            status=AppointmentStatus.BOOKED,
            created_at=now,
            user_data=dict(user_data),
            doc_data=dict(doc_data),
            updated_at=now,
        )
        with self._lock:
            self._rows[appt.id] = appt
        return replace(appt)

    def get_by_id(self, appointment_id):
        with self._lock:
            appt = self._rows.get(appointment_id)
            return replace(appt) if appt else None

    def transition(self, appointment_id, from_status, to_status):
        with self._lock:
            appt = self._rows.get(appointment_id)
            if appt is None or appt.status is not from_status:
                return None
            appt.status = to_status
            appt.updated_at = utcnow()
            return replace(appt)

    def set_payment(self, appointment_id, payment):
        with self._lock:
            appt = self._rows.get(appointment_id)
            if appt is None or appt.status is AppointmentStatus.CANCELLED:
                return None
            appt.payment = payment
            appt.updated_at = utcnow()
            return replace(appt)

    def find_holder(self, doctor_id, date_key, time_key):
        for appt in self.list_for_doctor(doctor_id):
            if appt.date_key == date_key and appt.time_key == time_key and not appt.cancelled:
                return appt
        return None

    def _select(self, predicate):
        with self._lock:
            rows = [replace(a) for a in self._rows.values() if predicate(a)]
        return sorted(rows, key=lambda a: a.created_at, reverse=True)

    def list_for_patient(self, patient_id):
        return self._select(lambda a: a.patient_id == patient_id)

    def list_for_doctor(self, doctor_id):
        return self._select(lambda a: a.doctor_id == doctor_id)

    def list_all(self):
        return self._select(lambda a: True)


@pytest.fixture
def doctors():
    return FakeDoctors(
        DoctorDto(id="docA", name="Dr. A", fees=500, type="Private", email="a@clinic.test"),
        DoctorDto(id="docGov", name="Dr. Gov", fees=750, type="Government"),
        DoctorDto(id="docOff", name="Dr. Off", fees=300, available=False),
    )


@pytest.fixture
def patients():
    return FakePatients(
        PatientDto(id="P", name="Patient P", email="p@mail.test"),
        PatientDto(id="Q", name="Patient Q", email="q@mail.test"),
    )


@pytest.fixture
def store(doctors):
    return FakeReservationStore(doctors)


@pytest.fixture
def appointments():
    return FakeAppointments()


@pytest.fixture
def booking(store, appointments, doctors, patients):
    return BookingService(
        store=store,
        lifecycle=AppointmentLifecycle(appointments=appointments, store=store),
        appointments=appointments,
        doctors=doctors,
        patients=patients,
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session
