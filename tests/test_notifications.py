import json
import logging

from medibook.config import settings
from medibook.infrastructure.notifications.log_notifier import LogNotifier, notify_safely


def _appt(booking):
    return booking.book("P", "docA", "15_12_2024", "10:00")


def test_log_notifier_writes_notice(booking, caplog):
    appt = _appt(booking)
    with caplog.at_level(logging.INFO, logger="medibook.infrastructure.notifications.log_notifier"):
        LogNotifier().appointment_booked(appt)
    line = next(r.getMessage() for r in caplog.records if r.getMessage().startswith("NOTIFY: "))
    entry = json.loads(line[len("NOTIFY: "):])
    assert entry["event"] == "appointment_booked"
    assert entry["patient_email"] == "p@mail.test"
    assert entry["doctor_name"] == "Dr. A"


def test_failed_notice_is_logged_not_raised(booking, caplog):
    appt = _appt(booking)

    def broken(_):
        raise ConnectionError("smtp down")

    notify_safely(broken, appt)
    assert any("Failed to send notification" in r.getMessage() for r in caplog.records)
    # booking is untouched
    assert booking.appointments.get_by_id(appt.id).cancelled is False


def test_disabled_notifications_skip_sender(booking, monkeypatch):
    appt = _appt(booking)
    monkeypatch.setattr(settings, "NOTIFICATIONS_ENABLED", False)
    calls = []
    notify_safely(calls.append, appt)
    assert calls == []
