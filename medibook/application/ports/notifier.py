from typing import Protocol

from .appointments_repo import AppointmentDto


class Notifier(Protocol):
    def appointment_booked(self, appointment: AppointmentDto) -> None:
        ...

    def appointment_cancelled(self, appointment: AppointmentDto) -> None:
        ...
