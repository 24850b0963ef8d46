"""Import doctor documents exported from the Mongo backend.

Each document's ``slots_booked`` map becomes one ``slot_reservations`` row
per booked slot, so the unique slot key takes over the booking guard.
Those rows are marked ``legacy``: the appointments that hold them were not
imported, so orphan reconciliation must leave them alone.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from sqlmodel import Session, select

from .domain.enums import DoctorType, ReservationSource
from .domain.slot_map import SlotMap, is_valid_date_key, is_valid_time_key
from .models import Doctor, SlotReservation

logger = logging.getLogger(__name__)


@dataclass
class ImportReport:
    doctors: int = 0
    reservations: int = 0
    skipped: List[str] = field(default_factory=list)


def _doctor_id(document: Dict[str, Any]) -> str:
    raw = document.get("_id")
    if isinstance(raw, dict):
        raw = raw.get("$oid")
    return str(raw or document.get("id") or "")


def import_doctors(session: Session, documents: Iterable[Dict[str, Any]]) -> ImportReport:
    report = ImportReport()
    for document in documents:
        doctor_id = _doctor_id(document)
        if not doctor_id or not document.get("name"):
            report.skipped.append(f"doctor without id or name: {document!r:.80}")
            continue

        doctor = session.get(Doctor, doctor_id)
        if doctor is None:
            doctor = Doctor(id=doctor_id, name=document["name"])
            report.doctors += 1
        doctor.email = document.get("email")
        doctor.speciality = document.get("speciality")
        doctor.fees = float(document.get("fees") or 0)
        doctor.type = document.get("type") if document.get("type") in {t.value for t in DoctorType} else DoctorType.PRIVATE.value
        doctor.available = bool(document.get("available", True))
        doctor.address = json.dumps(document.get("address") or {})
        session.add(doctor)

        existing = SlotMap.from_pairs(
            (r.date_key, r.time_key)
            for r in session.exec(select(SlotReservation).where(SlotReservation.doctor_id == doctor_id)).all()
        )
        for date_key, time_key in SlotMap.from_dict(document.get("slots_booked") or {}):
            if not (is_valid_date_key(date_key) and is_valid_time_key(time_key)):
                report.skipped.append(f"{doctor_id}: malformed slot {date_key} {time_key}")
                continue
            if (date_key, time_key) in existing:
                continue
            existing.reserve(date_key, time_key)
            session.add(SlotReservation(
                doctor_id=doctor_id,
                date_key=date_key,
                time_key=time_key,
                source=ReservationSource.LEGACY.value,
            ))
            report.reservations += 1

    session.commit()
    logger.info(f"Imported {report.doctors} doctors and {report.reservations} reservations ({len(report.skipped)} skipped)")
    return report
