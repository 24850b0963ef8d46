"""Booking error taxonomy.

Every error here is an expected, user-facing outcome rather than a defect.
The HTTP layer turns them into ``{"success": false, "message": ...}``.
"""
from typing import Any, Dict, Optional


class BookingError(Exception):
    code: str = "booking_error"
    default_message: str = "Booking request failed"

    def __init__(self, message: Optional[str] = None, **context: Any):
        self.message = message or self.default_message
        self.context: Dict[str, Any] = context
        super().__init__(self.message)


class AlreadyReserved(BookingError):
    code = "already_reserved"
    default_message = "Slot is already reserved"


class SlotUnavailable(BookingError):
    code = "slot_unavailable"
    default_message = "Slot not available, choose another time"


class DoctorUnavailable(BookingError):
    code = "doctor_unavailable"
    default_message = "Doctor not accepting appointments"


class DoctorNotFound(BookingError):
    code = "doctor_not_found"
    default_message = "Doctor not found"


class PatientNotFound(BookingError):
    code = "patient_not_found"
    default_message = "Patient not found"


class AppointmentNotFound(BookingError):
    code = "appointment_not_found"
    default_message = "Appointment not found"


class Unauthorized(BookingError):
    code = "unauthorized"
    default_message = "Not authorized to modify this appointment"


class InvalidTransition(BookingError):
    code = "invalid_transition"
    default_message = "Appointment can no longer be changed"

    @classmethod
    def between(cls, current: str, target: str, **context: Any) -> "InvalidTransition":
        return cls(f"Cannot mark a {current} appointment as {target}", current=current, target=target, **context)
