from fastapi import APIRouter, BackgroundTasks, Depends
import logging

from ..application.ports.notifier import Notifier
from ..application.services.booking_service import BookingService
from ..application.services.doctor_service import DoctorService
from ..auth import get_current_doctor
from ..dependencies import get_booking_service, get_doctor_service, get_notifier
from ..domain.enums import Requester
from ..exceptions import create_success_response
from ..infrastructure.notifications.log_notifier import notify_safely
from ..schemas.appointments.appointment import AppointmentActionRequest, AppointmentResponse, appointments_payload
from ..schemas.common.common import EnvelopeResponse
from ..schemas.doctors.doctor import DashboardResponse, DoctorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/doctor", tags=["Doctor"])


@router.get("/list", response_model=EnvelopeResponse, response_model_exclude_none=True)
def doctor_list(doctors: DoctorService = Depends(get_doctor_service)):
    payload = [
        DoctorResponse.from_dto(row["doctor"], row["slots_booked"]).model_dump(mode="json")
        for row in doctors.list_with_slots()
    ]
    return create_success_response("Doctors", payload)


@router.post("/complete-appointment", response_model=EnvelopeResponse, response_model_exclude_none=True)
def complete_appointment(
    body: AppointmentActionRequest,
    doctor: Requester = Depends(get_current_doctor),
    booking: BookingService = Depends(get_booking_service),
):
    appt = booking.complete(body.appointmentId, doctor.id)
    return create_success_response("Appointment Completed", AppointmentResponse.from_dto(appt).model_dump(mode="json"))


@router.post("/cancel-appointment", response_model=EnvelopeResponse, response_model_exclude_none=True)
def cancel_appointment(
    body: AppointmentActionRequest,
    background_tasks: BackgroundTasks,
    doctor: Requester = Depends(get_current_doctor),
    booking: BookingService = Depends(get_booking_service),
    notifier: Notifier = Depends(get_notifier),
):
    appt = booking.cancel(body.appointmentId, doctor)
    background_tasks.add_task(notify_safely, notifier.appointment_cancelled, appt)
    return create_success_response("Appointment Cancelled", AppointmentResponse.from_dto(appt).model_dump(mode="json"))


@router.get("/appointments", response_model=EnvelopeResponse, response_model_exclude_none=True)
def doctor_appointments(
    doctor: Requester = Depends(get_current_doctor),
    booking: BookingService = Depends(get_booking_service),
):
    return create_success_response("Appointments", appointments_payload(booking.list_for_doctor(doctor.id)))


@router.post("/change-availability", response_model=EnvelopeResponse, response_model_exclude_none=True)
def change_availability(
    doctor: Requester = Depends(get_current_doctor),
    doctors: DoctorService = Depends(get_doctor_service),
):
    available = doctors.toggle_availability(doctor.id)
    logger.info(f"Doctor {doctor.id} availability set to {available}")
    return create_success_response("Availability Changed", {"available": available})


@router.get("/dashboard", response_model=EnvelopeResponse, response_model_exclude_none=True)
def doctor_dashboard(
    doctor: Requester = Depends(get_current_doctor),
    doctors: DoctorService = Depends(get_doctor_service),
):
    dash = doctors.dashboard(doctor.id)
    payload = DashboardResponse(
        earnings=dash.earnings,
        appointments=dash.appointments,
        patients=dash.patients,
        latestAppointments=appointments_payload(dash.latest_appointments),
    )
    return create_success_response("Dashboard", payload.model_dump(mode="json"))
