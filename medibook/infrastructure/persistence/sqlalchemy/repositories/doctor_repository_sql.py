import json
from typing import List, Optional
from sqlmodel import Session, select

from .....models import Doctor
from .....application.ports.doctor_repo import DoctorRepository, DoctorDto


class SqlDoctorRepository(DoctorRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, d: Doctor) -> DoctorDto:
        return DoctorDto(
            id=d.id,
            name=d.name,
            fees=d.fees,
            type=d.type,
            available=bool(d.available),
            email=d.email,
            speciality=d.speciality,
            address=json.loads(d.address or "{}"),
            created_at=d.created_at,
        )

    def get_by_id(self, doctor_id: str) -> Optional[DoctorDto]:
        d = self.session.exec(select(Doctor).where(Doctor.id == doctor_id)).first()
        return self._to_dto(d) if d else None

    def list_all(self) -> List[DoctorDto]:
        rows = self.session.exec(select(Doctor).order_by(Doctor.name)).all()
        return [self._to_dto(d) for d in rows]

    def toggle_availability(self, doctor_id: str) -> Optional[bool]:
        d = self.session.exec(select(Doctor).where(Doctor.id == doctor_id)).first()
        if not d:
            return None
        d.available = not d.available
        self.session.add(d)
        self.session.commit()
        self.session.refresh(d)
        return d.available
