from typing import Any, Dict, Protocol, Optional


class PatientDto:
    def __init__(self, id: str, name: str, email: Optional[str] = None, phone: Optional[str] = None):
        self.id = id
        self.name = name
        self.email = email
        self.phone = phone

    def snapshot(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "email": self.email, "phone": self.phone}


class PatientRepository(Protocol):
    def get_by_id(self, patient_id: str) -> Optional[PatientDto]:
        ...

    def count(self) -> int:
        ...
