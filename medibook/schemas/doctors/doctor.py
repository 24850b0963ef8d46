# medibook/schemas/doctors/doctor.py
from pydantic import BaseModel
from typing import Any, Dict, List, Optional

from ...application.ports.doctor_repo import DoctorDto

class DoctorResponse(BaseModel):
    id: str
    name: str
    speciality: Optional[str] = None
    fees: float
    type: str
    available: bool
    address: Dict[str, Any] = {}
    slots_booked: Dict[str, List[str]] = {}

    @classmethod
    def from_dto(cls, d: DoctorDto, slots_booked: Dict[str, List[str]]) -> "DoctorResponse":
        return cls(
            id=d.id,
            name=d.name,
            speciality=d.speciality,
            fees=d.fees,
            type=d.type,
            available=d.available,
            address=d.address,
            slots_booked=slots_booked,
        )

class AvailabilityRequest(BaseModel):
    docId: str

class DashboardResponse(BaseModel):
    earnings: float
    appointments: int
    patients: int
    latestAppointments: List[Dict[str, Any]]

class AdminDashboardResponse(BaseModel):
    doctors: int
    appointments: int
    patients: int
    latestAppointments: List[Dict[str, Any]]
