from fastapi import APIRouter, BackgroundTasks, Depends
import logging

from ..application.ports.notifier import Notifier
from ..application.services.booking_service import BookingService
from ..auth import get_current_patient
from ..dependencies import get_booking_service, get_notifier
from ..domain.enums import Requester
from ..exceptions import create_success_response
from ..infrastructure.notifications.log_notifier import notify_safely
from ..schemas.appointments.appointment import (
    AppointmentActionRequest,
    AppointmentResponse,
    BookAppointmentRequest,
    appointments_payload,
)
from ..schemas.common.common import EnvelopeResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["Patient"])


@router.post("/book-appointment", response_model=EnvelopeResponse, response_model_exclude_none=True)
def book_appointment(
    body: BookAppointmentRequest,
    background_tasks: BackgroundTasks,
    patient: Requester = Depends(get_current_patient),
    booking: BookingService = Depends(get_booking_service),
    notifier: Notifier = Depends(get_notifier),
):
    appt = booking.book(patient.id, body.docId, body.slotDate, body.slotTime)
    background_tasks.add_task(notify_safely, notifier.appointment_booked, appt)
    return create_success_response(
        "Appointment Booked",
        AppointmentResponse.from_dto(appt).model_dump(mode="json"),
    )


@router.post("/cancel-appointment", response_model=EnvelopeResponse, response_model_exclude_none=True)
def cancel_appointment(
    body: AppointmentActionRequest,
    background_tasks: BackgroundTasks,
    patient: Requester = Depends(get_current_patient),
    booking: BookingService = Depends(get_booking_service),
    notifier: Notifier = Depends(get_notifier),
):
    appt = booking.cancel(body.appointmentId, patient)
    background_tasks.add_task(notify_safely, notifier.appointment_cancelled, appt)
    return create_success_response(
        "Appointment Cancelled",
        AppointmentResponse.from_dto(appt).model_dump(mode="json"),
    )


@router.get("/appointments", response_model=EnvelopeResponse, response_model_exclude_none=True)
def list_appointments(
    patient: Requester = Depends(get_current_patient),
    booking: BookingService = Depends(get_booking_service),
):
    return create_success_response("Appointments", appointments_payload(booking.list_for_patient(patient.id)))
