# src/models/models.py

import uuid
import enum

from sqlalchemy import (
    JSON, Boolean, Column, Float, ForeignKey, Index, Integer, Numeric,
    String, Text, DateTime, Uuid, Enum as SAEnum, func, text,
)
from sqlalchemy.orm import declarative_base, relationship, backref

Base = declarative_base()


def _enum_values(enum_cls):
    """Persist enum values (e.g. "in_session") rather than member names."""
    return [member.value for member in enum_cls]


# ============================================================================
# ENUMS
# ============================================================================

class UserRole(enum.Enum):
    PATIENT = "patient"
    DOCTOR = "doctor"
    ADMIN = "admin"


class QueueStatus(enum.Enum):
    WAITING = "waiting"
    CALLED = "called"
    IN_SESSION = "in_session"
    DONE = "done"
    CANCELED = "canceled"


ACTIVE_STATUSES = (QueueStatus.WAITING, QueueStatus.CALLED, QueueStatus.IN_SESSION)
TERMINAL_STATUSES = (QueueStatus.DONE, QueueStatus.CANCELED)

# Used by the partial unique index; must match the persisted enum values.
ACTIVE_STATUS_SQL = "status IN ('waiting', 'called', 'in_session')"


# ============================================================================
# IDENTITY / DIRECTORY
# ============================================================================

class User(Base):
    """Projection of the identity provider's user record."""
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(200), nullable=True)
    username = Column(String(100), unique=True, nullable=True)
    role = Column(SAEnum(UserRole, name="user_role", values_callable=_enum_values), nullable=False, default=UserRole.PATIENT)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    @property
    def display_name(self) -> str:
        return (self.full_name or "").strip() or (self.username or "").strip() or "—"

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email}, role={self.role.value})>"


class Doctor(Base):
    """Doctor directory entry; only approved, active doctors accept requests."""
    __tablename__ = "doctors"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    specialty = Column(String(100), nullable=True)
    is_approved = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    # Relationship
    user = relationship("User", backref=backref("doctor", uselist=False, cascade="all, delete-orphan"))

    def __repr__(self):
        return f"<Doctor(id={self.id}, user_id={self.user_id}, approved={self.is_approved})>"


# ============================================================================
# CONSULTATION QUEUE
# ============================================================================

class QueueEntry(Base):
    """One patient's request to consult one doctor.

    Timestamp columns form an append-only trail: each lifecycle transition
    sets exactly one of them and none is ever cleared.
    """
    __tablename__ = "consultation_queue"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    doctor_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    patient_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    status = Column(
        SAEnum(QueueStatus, name="queue_status", values_callable=_enum_values),
        nullable=False,
        default=QueueStatus.WAITING,
    )

    requested_at = Column(DateTime(timezone=True), nullable=False)
    called_at = Column(DateTime(timezone=True), nullable=True)
    started_at = Column(DateTime(timezone=True), nullable=True)
    ended_at = Column(DateTime(timezone=True), nullable=True)
    canceled_at = Column(DateTime(timezone=True), nullable=True)

    position = Column(Integer, nullable=True)
    expected_minutes = Column(Integer, nullable=True)

    is_free = Column(Boolean, default=False, nullable=False)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=True)
    currency = Column(String(3), nullable=True)

    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    doctor = relationship("User", foreign_keys=[doctor_id])
    patient = relationship("User", foreign_keys=[patient_id])

    __table_args__ = (
        Index("idx_queue_doctor_status", "doctor_id", "status"),
        Index("idx_queue_patient_status", "patient_id", "status"),
        Index(
            "uq_queue_active_pair",
            "doctor_id",
            "patient_id",
            unique=True,
            postgresql_where=text(ACTIVE_STATUS_SQL),
            sqlite_where=text(ACTIVE_STATUS_SQL),
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    def __repr__(self):
        return f"<QueueEntry(id={self.id}, doctor_id={self.doctor_id}, status={self.status.value})>"


# ============================================================================
# CONFIGURATION STORE
# ============================================================================

class SystemSetting(Base):
    """Flat key/value configuration snapshot (room flags and friends)."""
    __tablename__ = "system_settings_kv"

    key = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<SystemSetting(key={self.key}, value={self.value!r})>"


# ============================================================================
# CLINICAL RECORDS (read-only to the queue core)
# ============================================================================

class PatientVital(Base):
    """Typed, timestamped vital-sign reading."""
    __tablename__ = "patient_vitals"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    patient_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    recorded_by = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    vital_type = Column(String(50), nullable=False)  # blood_pressure, temperature, weight, ...
    value_numeric = Column(Float, nullable=True)
    value2_numeric = Column(Float, nullable=True)  # diastolic for blood pressure
    value_text = Column(Text, nullable=True)
    unit = Column(String(20), nullable=True)
    recorded_at = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_patient_vitals_patient", "patient_id", "recorded_at"),
    )

    def __repr__(self):
        return f"<PatientVital(id={self.id}, type={self.vital_type})>"


class PatientFile(Base):
    """Metadata for a file held by the external file store."""
    __tablename__ = "patient_files"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, nullable=False)
    patient_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    consultation_id = Column(Uuid(as_uuid=True), ForeignKey("consultation_queue.id", ondelete="SET NULL"), nullable=True)
    storage_path = Column(String(500), nullable=False)
    file_type = Column(String(50), nullable=True)  # lab_result, prescription, ...
    mime_type = Column(String(100), nullable=True)
    size_bytes = Column(Integer, nullable=True)
    public_url = Column(String(1000), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    __table_args__ = (
        Index("idx_patient_files_patient", "patient_id", "created_at"),
    )

    def __repr__(self):
        return f"<PatientFile(id={self.id}, type={self.file_type})>"
