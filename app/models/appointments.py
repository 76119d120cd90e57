"""Appointments table model using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    Uuid,
    func,
    text,
)

# Metadata for all tables
metadata = MetaData()

# Appointments table
appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("appointment_number", String(20), nullable=False, unique=True),
    # Ownership / references
    Column("patient_id", Uuid, nullable=False, index=True),
    Column("doctor_id", Uuid, nullable=False, index=True),
    # Scheduling
    Column("appointment_date", Date, nullable=False, index=True),
    Column("appointment_time", String(5), nullable=False),
    Column("duration_minutes", Integer, nullable=False, server_default=text("30")),
    # Classification
    Column("status", String(20), nullable=False, server_default="Scheduled", index=True),
    Column("type", String(20), nullable=False, server_default="Consultation"),
    Column("priority", String(20), nullable=False, server_default="Medium"),
    Column("department", String(50)),
    # Clinical documentation
    Column("reason", Text, nullable=False),
    Column("symptoms", JSON),
    Column("diagnosis", Text),
    Column("treatment", Text),
    Column("prescription", JSON),
    Column("notes", Text),
    Column("follow_up_required", Boolean, nullable=False, server_default=text("false")),
    Column("follow_up_date", Date),
    Column("room_number", String(20)),
    # Billing
    Column("insurance_covered", Boolean, nullable=False, server_default=text("false")),
    Column("cost", Numeric(10, 2), nullable=False, server_default=text("0")),
    Column("payment_status", String(20), nullable=False, server_default="Pending"),
    # Audit fields
    Column("created_by", Text, nullable=False, server_default="System"),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("cancelled_at", DateTime(timezone=True), nullable=True),
    # Constraints
    CheckConstraint(
        "status IN ('Scheduled', 'Confirmed', 'In Progress', 'Completed', 'Cancelled', 'No Show')",
        name="appointments_status_check",
    ),
    CheckConstraint(
        "duration_minutes BETWEEN 15 AND 120",
        name="appointments_duration_check",
    ),
    CheckConstraint("patient_id <> doctor_id", name="appointments_distinct_actors_check"),
    Index("idx_appointments_doctor_date", "doctor_id", "appointment_date"),
)
