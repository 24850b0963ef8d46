from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol
from datetime import datetime

from ...domain.enums import DoctorType


@dataclass
class DoctorDto:
    id: str
    name: str
    fees: float
    type: str = DoctorType.PRIVATE.value
    available: bool = True
    email: Optional[str] = None
    speciality: Optional[str] = None
    address: Dict[str, Any] = field(default_factory=dict)
    created_at: Optional[datetime] = None

    @property
    def is_government(self) -> bool:
        return self.type == DoctorType.GOVERNMENT.value

    def snapshot(self) -> Dict[str, Any]:
        """Fields copied into an appointment; slot state is never part of it."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "speciality": self.speciality,
            "fees": self.fees,
            "type": self.type,
            "address": dict(self.address),
        }


class DoctorRepository(Protocol):
    def get_by_id(self, doctor_id: str) -> Optional[DoctorDto]:
        ...

    def list_all(self) -> List[DoctorDto]:
        ...

    def toggle_availability(self, doctor_id: str) -> Optional[bool]:
        ...
