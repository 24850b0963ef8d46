from fastapi import APIRouter, BackgroundTasks, Depends
import logging

from ..application.ports.notifier import Notifier
from ..application.services.booking_service import BookingService
from ..application.services.doctor_service import DoctorService
from ..auth import get_current_admin
from ..config import settings
from ..dependencies import get_booking_service, get_doctor_service, get_notifier
from ..domain.enums import Requester
from ..exceptions import create_success_response
from ..infrastructure.notifications.log_notifier import notify_safely
from ..schemas.appointments.appointment import (
    AppointmentActionRequest,
    AppointmentResponse,
    PaymentUpdateRequest,
    appointments_payload,
)
from ..schemas.common.common import EnvelopeResponse, ReconcileResponse
from ..schemas.doctors.doctor import AdminDashboardResponse, AvailabilityRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin", tags=["Admin"])


@router.get("/appointments", response_model=EnvelopeResponse, response_model_exclude_none=True)
def all_appointments(
    admin: Requester = Depends(get_current_admin),
    booking: BookingService = Depends(get_booking_service),
):
    return create_success_response("Appointments", appointments_payload(booking.list_all()))


@router.post("/cancel-appointment", response_model=EnvelopeResponse, response_model_exclude_none=True)
def cancel_appointment(
    body: AppointmentActionRequest,
    background_tasks: BackgroundTasks,
    admin: Requester = Depends(get_current_admin),
    booking: BookingService = Depends(get_booking_service),
    notifier: Notifier = Depends(get_notifier),
):
    appt = booking.cancel(body.appointmentId, admin)
    background_tasks.add_task(notify_safely, notifier.appointment_cancelled, appt)
    return create_success_response("Appointment Cancelled", AppointmentResponse.from_dto(appt).model_dump(mode="json"))


@router.post("/change-availability", response_model=EnvelopeResponse, response_model_exclude_none=True)
def change_availability(
    body: AvailabilityRequest,
    admin: Requester = Depends(get_current_admin),
    doctors: DoctorService = Depends(get_doctor_service),
):
    available = doctors.toggle_availability(body.docId)
    return create_success_response("Availability Changed", {"available": available})


@router.put("/appointments/{appointment_id}/payment", response_model=EnvelopeResponse, response_model_exclude_none=True)
def update_payment(
    appointment_id: str,
    body: PaymentUpdateRequest,
    admin: Requester = Depends(get_current_admin),
    booking: BookingService = Depends(get_booking_service),
):
    appt = booking.update_payment(appointment_id, body.payment)
    return create_success_response(
        f"Payment status updated to {body.payment.value}",
        AppointmentResponse.from_dto(appt).model_dump(mode="json"),
    )


@router.post("/reconcile-reservations", response_model=EnvelopeResponse, response_model_exclude_none=True)
def reconcile_reservations(
    admin: Requester = Depends(get_current_admin),
    booking: BookingService = Depends(get_booking_service),
):
    released = booking.reconcile_orphans(settings.ORPHAN_GRACE_SECONDS)
    return create_success_response("Reservations reconciled", ReconcileResponse(released=released).model_dump())


@router.get("/dashboard", response_model=EnvelopeResponse, response_model_exclude_none=True)
def admin_dashboard(
    admin: Requester = Depends(get_current_admin),
    booking: BookingService = Depends(get_booking_service),
):
    dash = booking.admin_dashboard()
    payload = AdminDashboardResponse(
        doctors=dash.doctors,
        appointments=dash.appointments,
        patients=dash.patients,
        latestAppointments=appointments_payload(dash.latest_appointments),
    )
    return create_success_response("Dashboard", payload.model_dump(mode="json"))
