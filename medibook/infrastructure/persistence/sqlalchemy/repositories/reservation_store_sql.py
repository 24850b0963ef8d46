from datetime import datetime
from typing import List
import logging

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from .....models import Doctor, SlotReservation
from .....application.ports.reservation_store import ReservationStore, ReservationDto
from .....domain.enums import ReservationSource
from .....domain.errors import DoctorNotFound, DoctorUnavailable, SlotUnavailable
from .....domain.slot_map import SlotMap

logger = logging.getLogger(__name__)


class SqlReservationStore(ReservationStore):
    """Reservations as uniquely keyed rows.

    Reserving is a plain INSERT: the unique constraint on
    (doctor_id, date_key, time_key) lets exactly one concurrent writer in.
    """

    def __init__(self, session: Session):
        self.session = session

    def _get_doctor(self, doctor_id: str) -> Doctor:
        d = self.session.get(Doctor, doctor_id)
        if not d:
            raise DoctorNotFound(doctor_id=doctor_id)
        return d

    def reserve_slot(self, doctor_id: str, date_key: str, time_key: str) -> None:
        d = self._get_doctor(doctor_id)
        if not d.available:
            raise DoctorUnavailable(doctor_id=doctor_id)
        self.session.add(SlotReservation(doctor_id=doctor_id, date_key=date_key, time_key=time_key))
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            logger.info(f"Slot {date_key} {time_key} of doctor {doctor_id} already reserved")
            raise SlotUnavailable(doctor_id=doctor_id, date_key=date_key, time_key=time_key)

    def release_slot(self, doctor_id: str, date_key: str, time_key: str) -> None:
        self._get_doctor(doctor_id)
        self.session.exec(
            delete(SlotReservation)
            .where(SlotReservation.doctor_id == doctor_id)
            .where(SlotReservation.date_key == date_key)
            .where(SlotReservation.time_key == time_key)
        )
        self.session.commit()

    def slot_map(self, doctor_id: str) -> SlotMap:
        rows = self.session.exec(
            select(SlotReservation).where(SlotReservation.doctor_id == doctor_id)
        ).all()
        return SlotMap.from_pairs((r.date_key, r.time_key) for r in rows)

    def list_reservations(self, reserved_before: datetime) -> List[ReservationDto]:
        rows = self.session.exec(
            select(SlotReservation)
            .where(SlotReservation.reserved_at < reserved_before)
            .order_by(SlotReservation.reserved_at)
        ).all()
        return [
            ReservationDto(
                doctor_id=r.doctor_id,
                date_key=r.date_key,
                time_key=r.time_key,
                reserved_at=r.reserved_at,
                source=ReservationSource(r.source),
            )
            for r in rows
        ]
