from typing import Optional
from sqlmodel import Session, func, select

from .....models import Patient
from .....application.ports.patient_repo import PatientRepository, PatientDto


class SqlPatientRepository(PatientRepository):
    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, patient_id: str) -> Optional[PatientDto]:
        p = self.session.exec(select(Patient).where(Patient.id == patient_id)).first()
        if not p:
            return None
        return PatientDto(id=p.id, name=p.name, email=p.email, phone=p.phone)

    def count(self) -> int:
        return self.session.exec(select(func.count()).select_from(Patient)).one()
