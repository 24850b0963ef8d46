from dataclasses import dataclass
from enum import Enum


class AppointmentStatus(str, Enum):
    BOOKED = "booked"
    CANCELLED = "cancelled"
    COMPLETED = "completed"

    @property
    def is_terminal(self) -> bool:
        return self is not AppointmentStatus.BOOKED


class PaymentStatus(str, Enum):
    PENDING = "pending"
    REJECTED = "rejected"
    COMPLETE = "complete"


class DoctorType(str, Enum):
    GOVERNMENT = "Government"
    PRIVATE = "Private"


class ReservationSource(str, Enum):
    BOOKING = "booking"
    # Imported from the old slots_booked maps; no appointment row backs these
    LEGACY = "legacy"


class Role(str, Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


@dataclass(frozen=True)
class Requester:
    """Authenticated actor behind a call, as resolved from the bearer token."""
    id: str
    role: Role
