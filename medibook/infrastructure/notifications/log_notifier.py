import json
import logging
from typing import Any, Callable

from ...application.ports.appointments_repo import AppointmentDto
from ...application.ports.notifier import Notifier
from ...config import settings
from ...utils import utcnow

logger = logging.getLogger(__name__)


class LogNotifier(Notifier):
    """Writes appointment notices to the log; the mail relay tails this logger."""

    def __init__(self) -> None:
        self._logger = logging.getLogger(__name__)

    def _emit(self, event: str, appointment: AppointmentDto) -> None:
        entry = {
            "timestamp": utcnow().isoformat(),
            "event": event,
            "appointment_id": appointment.id,
            "patient_email": appointment.user_data.get("email"),
            "patient_name": appointment.user_data.get("name"),
            "doctor_name": appointment.doc_data.get("name"),
            "slot_date": appointment.date_key,
            "slot_time": appointment.time_key,
            "amount": appointment.amount,
        }
        self._logger.info(f"NOTIFY: {json.dumps(entry)}")

    def appointment_booked(self, appointment: AppointmentDto) -> None:
        self._emit("appointment_booked", appointment)

    def appointment_cancelled(self, appointment: AppointmentDto) -> None:
        self._emit("appointment_cancelled", appointment)


def notify_safely(send: Callable[[AppointmentDto], Any], appointment: AppointmentDto) -> None:
    """Background-task wrapper: a failed notice never undoes a booking."""
    if not settings.NOTIFICATIONS_ENABLED:
        return
    try:
        send(appointment)
    except Exception:
        logger.exception(f"Failed to send notification for appointment {appointment.id}")
