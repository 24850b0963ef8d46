import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

import pytest
from sqlalchemy import event
from sqlmodel import SQLModel, Session, create_engine, select

from medibook.application.services.appointment_lifecycle import AppointmentLifecycle
from medibook.application.services.booking_service import BookingService
from medibook.domain.enums import AppointmentStatus, PaymentStatus, Requester, Role
from medibook.domain.errors import DoctorNotFound, DoctorUnavailable, InvalidTransition, PatientNotFound, SlotUnavailable
from medibook.infrastructure.persistence.sqlalchemy.repositories.appointments_repository_sql import SqlAppointmentsRepository
from medibook.infrastructure.persistence.sqlalchemy.repositories.doctor_repository_sql import SqlDoctorRepository
from medibook.infrastructure.persistence.sqlalchemy.repositories.patient_repository_sql import SqlPatientRepository
from medibook.infrastructure.persistence.sqlalchemy.repositories.reservation_store_sql import SqlReservationStore
from medibook.models import Doctor, Patient, SlotReservation
from medibook.utils import utcnow

DATE, TIME = "15_12_2024", "10:00"


def _seed(session):
    session.add(Doctor(id="docA", name="Dr. A", fees=500, type="Private"))
    session.add(Doctor(id="docGov", name="Dr. Gov", fees=750, type="Government"))
    session.add(Doctor(id="docOff", name="Dr. Off", fees=300, available=False))
    session.add(Patient(id="P", name="Patient P", email="p@mail.test"))
    session.add(Patient(id="Q", name="Patient Q"))
    session.commit()


def _service(session):
    store = SqlReservationStore(session)
    appts = SqlAppointmentsRepository(session)
    return BookingService(
        store=store,
        lifecycle=AppointmentLifecycle(appointments=appts, store=store),
        appointments=appts,
        doctors=SqlDoctorRepository(session),
        patients=SqlPatientRepository(session),
    )


def test_reserve_and_release(session):
    _seed(session)
    store = SqlReservationStore(session)
    store.reserve_slot("docA", DATE, TIME)
    assert store.slot_map("docA").to_dict() == {DATE: [TIME]}
    with pytest.raises(SlotUnavailable):
        store.reserve_slot("docA", DATE, TIME)
    store.release_slot("docA", DATE, TIME)
    store.release_slot("docA", DATE, TIME)
    assert len(store.slot_map("docA")) == 0
    store.reserve_slot("docA", DATE, TIME)


def test_reserve_errors(session):
    _seed(session)
    store = SqlReservationStore(session)
    with pytest.raises(DoctorNotFound):
        store.reserve_slot("nobody", DATE, TIME)
    with pytest.raises(DoctorUnavailable):
        store.reserve_slot("docOff", DATE, TIME)
    with pytest.raises(DoctorNotFound):
        store.release_slot("nobody", DATE, TIME)
    assert session.exec(select(SlotReservation)).all() == []


def test_list_reservations_by_age(session):
    _seed(session)
    store = SqlReservationStore(session)
    store.reserve_slot("docA", DATE, TIME)
    old = SlotReservation(doctor_id="docA", date_key=DATE, time_key="11:00", reserved_at=utcnow() - timedelta(hours=1))
    session.add(old)
    session.commit()
    rows = store.list_reservations(reserved_before=utcnow() - timedelta(minutes=5))
    assert [(r.date_key, r.time_key) for r in rows] == [(DATE, "11:00")]


def test_service_flow_on_sql(session):
    _seed(session)
    svc = _service(session)
    appt = svc.book("P", "docA", DATE, TIME)
    assert (appt.amount, appt.payment) == (500, PaymentStatus.PENDING)
    assert appt.user_data["name"] == "Patient P"
    with pytest.raises(SlotUnavailable):
        svc.book("Q", "docA", DATE, TIME)

    svc.cancel(appt.id, Requester(id="P", role=Role.PATIENT))
    assert svc.store.slot_map("docA").is_free(DATE, TIME)
    with pytest.raises(InvalidTransition):
        svc.complete(appt.id, "docA")

    gov = svc.book("Q", "docGov", DATE, TIME)
    assert (gov.amount, gov.payment) == (0, PaymentStatus.COMPLETE)
    done = svc.complete(gov.id, "docGov")
    assert done.status is AppointmentStatus.COMPLETED
    with pytest.raises(SlotUnavailable):
        svc.book("P", "docGov", DATE, TIME)


def test_missing_patient_compensates_on_sql(session):
    _seed(session)
    svc = _service(session)
    with pytest.raises(PatientNotFound):
        svc.book("ghost", "docA", DATE, TIME)
    assert session.exec(select(SlotReservation)).all() == []


def test_transition_is_conditional(session):
    _seed(session)
    svc = _service(session)
    appt = svc.book("P", "docA", DATE, TIME)
    repo = svc.appointments
    assert repo.transition(appt.id, AppointmentStatus.BOOKED, AppointmentStatus.COMPLETED).is_completed
    assert repo.transition(appt.id, AppointmentStatus.BOOKED, AppointmentStatus.CANCELLED) is None
    assert repo.get_by_id(appt.id).status is AppointmentStatus.COMPLETED


def test_set_payment_skips_cancelled(session):
    _seed(session)
    svc = _service(session)
    appt = svc.book("P", "docA", DATE, TIME)
    assert svc.appointments.set_payment(appt.id, PaymentStatus.COMPLETE).payment is PaymentStatus.COMPLETE
    svc.cancel(appt.id, Requester(id="root", role=Role.ADMIN))
    assert svc.appointments.set_payment(appt.id, PaymentStatus.REJECTED) is None


def test_concurrent_books_across_sessions(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'race.db'}", connect_args={"check_same_thread": False, "timeout": 30})

    # SQLite upgrades deferred read locks without waiting; take the write lock up front
    @event.listens_for(engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        _seed(session)

    n = 6
    barrier = threading.Barrier(n)

    def attempt(i):
        with Session(engine) as session:
            svc = _service(session)
            barrier.wait()
            try:
                svc.book("P" if i % 2 else "Q", "docA", DATE, TIME)
                return "ok"
            except SlotUnavailable:
                return "taken"

    with ThreadPoolExecutor(max_workers=n) as pool:
        results = list(pool.map(attempt, range(n)))

    assert results.count("ok") == 1
    assert results.count("taken") == n - 1
    with Session(engine) as session:
        assert len(SqlAppointmentsRepository(session).list_for_doctor("docA")) == 1
    engine.dispose()


def test_stored_timestamps_are_timezone_aware(session):
    _seed(session)
    assert SlotReservation(doctor_id="docA", date_key=DATE, time_key=TIME).reserved_at.tzinfo is not None
    appt = _service(session).book("P", "docA", DATE, TIME)
    assert appt.created_at is not None
    row = session.exec(select(SlotReservation)).one()
    assert row.source == "booking"
