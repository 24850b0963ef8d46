from dataclasses import dataclass
from datetime import datetime
from typing import List, Protocol

from ...domain.enums import ReservationSource
from ...domain.slot_map import SlotMap


@dataclass
class ReservationDto:
    doctor_id: str
    date_key: str
    time_key: str
    reserved_at: datetime
    source: ReservationSource = ReservationSource.BOOKING


class ReservationStore(Protocol):
    """Sole writer of slot state.

    ``reserve_slot`` must be one atomic conditional write: it raises
    DoctorNotFound, DoctorUnavailable or SlotUnavailable and never retries.
    ``release_slot`` is idempotent and raises DoctorNotFound only.
    """

    def reserve_slot(self, doctor_id: str, date_key: str, time_key: str) -> None:
        ...

    def release_slot(self, doctor_id: str, date_key: str, time_key: str) -> None:
        ...

    def slot_map(self, doctor_id: str) -> SlotMap:
        ...

    def list_reservations(self, reserved_before: datetime) -> List[ReservationDto]:
        ...
