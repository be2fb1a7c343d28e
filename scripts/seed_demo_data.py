# scripts/seed_demo_data.py
"""
Demo seed script for the consultation queue.
Creates one admin, one patient and two approved doctors, the default room
flags, and a little clinical history for the patient.

Characters:
- PATIENT: Layla Haddad - follow-up for blood pressure readings
- DOCTOR: Dr. Omar Nasser - family medicine, takes the queue today
- DOCTOR: Dr. Sara Khalil - cardiology
- ADMIN: Clinic operations

Run: python -m scripts.seed_demo_data
"""

import asyncio
from datetime import timedelta

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.tokens import create_access_token
from src.common.database.database import async_session, engine
from src.common.utils import global_functions
from src.models.models import (
    Doctor, PatientFile, PatientVital, QueueEntry, SystemSetting, User, UserRole
)
from src.modules.settings.schemas import RoomFlags


async def clear_existing_data(db: AsyncSession):
    """Clear all demo data (if needed for re-seeding)."""
    print("🧹 Clearing existing data...")

    # Delete in reverse order of dependencies
    for model in (PatientFile, PatientVital, QueueEntry, Doctor, SystemSetting, User):
        await db.execute(delete(model))
    await db.commit()


async def create_users(db: AsyncSession) -> dict:
    users = {
        "admin": User(email="admin@clinic.test", full_name="Clinic Operations", username="ops", role=UserRole.ADMIN),
        "patient": User(email="layla@clinic.test", full_name="Layla Haddad", username="layla", role=UserRole.PATIENT),
        "doctor_omar": User(email="omar@clinic.test", full_name="Dr. Omar Nasser", username="dr.omar", role=UserRole.DOCTOR),
        "doctor_sara": User(email="sara@clinic.test", full_name="Dr. Sara Khalil", username="dr.sara", role=UserRole.DOCTOR),
    }
    db.add_all(users.values())
    await db.flush()

    db.add_all([
        Doctor(user_id=users["doctor_omar"].id, specialty="Family Medicine", is_approved=True),
        Doctor(user_id=users["doctor_sara"].id, specialty="Cardiology", is_approved=True),
    ])
    await db.flush()
    print(f"   ✓ Created {len(users)} users and 2 doctors")
    return users


async def create_room_flags(db: AsyncSession):
    for key, value in RoomFlags().model_dump().items():
        db.add(SystemSetting(key=key, value=value))
    await db.flush()
    print("   ✓ Stored default room flags")


async def create_clinical_history(db: AsyncSession, patient: User, doctor: User):
    now = global_functions.utcnow()
    db.add_all([
        PatientVital(patient_id=patient.id, recorded_by=doctor.id, vital_type="blood_pressure",
                     value_numeric=142, value2_numeric=91, unit="mmHg", recorded_at=now - timedelta(days=14)),
        PatientVital(patient_id=patient.id, recorded_by=doctor.id, vital_type="blood_pressure",
                     value_numeric=131, value2_numeric=85, unit="mmHg", recorded_at=now - timedelta(days=2)),
        PatientVital(patient_id=patient.id, vital_type="weight", value_numeric=68.5, unit="kg",
                     recorded_at=now - timedelta(days=2)),
        PatientVital(patient_id=patient.id, vital_type="temperature", value_numeric=36.8, unit="°C",
                     recorded_at=now - timedelta(hours=6)),
    ])
    db.add_all([
        PatientFile(patient_id=patient.id, storage_path=f"patients/{patient.id}/lipid-panel.pdf",
                    file_type="lab_result", mime_type="application/pdf", size_bytes=182_344),
        PatientFile(patient_id=patient.id, storage_path=f"patients/{patient.id}/ecg.png",
                    file_type="lab_result", mime_type="image/png", size_bytes=512_008),
    ])
    await db.flush()
    print("   ✓ Created vitals and files")


async def seed_all_data(db: AsyncSession):
    print("🌱 Seeding demo data...")
    users = await create_users(db)
    await create_room_flags(db)
    await create_clinical_history(db, users["patient"], users["doctor_omar"])
    await db.commit()

    print("\n🔑 Access tokens:")
    for name, user in users.items():
        print(f"   {name:<12} {create_access_token(user.id, user.role, expires_delta=timedelta(days=7))}")
    print(f"\n   doctor ids: omar={users['doctor_omar'].id} sara={users['doctor_sara'].id}")


async def main():
    async with async_session() as session:
        try:
            await clear_existing_data(session)
            await seed_all_data(session)
            print("🎉 Seeding complete!")
        except Exception as exc:
            print("❌ Error during seeding:", exc)
            await session.rollback()
            raise
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
