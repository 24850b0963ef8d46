#!/usr/bin/env python3
"""
Legacy slot import script
Run this once with a JSON export of the Mongo `doctors` collection:

    python import_legacy_slots.py doctors.json
"""
import json
import sys

from sqlmodel import Session

from medibook.database import engine, create_db_and_tables
from medibook.legacy_import import import_doctors

def main(path: str) -> None:
    try:
        print(f"Reading {path}...")
        with open(path, encoding="utf-8") as fh:
            documents = json.load(fh)
        if isinstance(documents, dict):
            documents = [documents]

        create_db_and_tables()
        with Session(engine) as session:
            report = import_doctors(session, documents)

        print(f"✓ Doctors created: {report.doctors}")
        print(f"✓ Reservations imported: {report.reservations}")
        for line in report.skipped:
            print(f"⚠ Skipped {line}")
    except Exception as e:
        print(f"❌ Import failed: {e}")
        sys.exit(1)

if __name__ == "__main__":
    if len(sys.argv) != 2:
        print("usage: import_legacy_slots.py <doctors.json>")
        sys.exit(2)
    main(sys.argv[1])
