"""Doctor working schedule model using SQLAlchemy Core."""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Uuid,
    func,
    text,
)

metadata = MetaData()

doctor_schedules = Table(
    "doctor_schedules",
    metadata,
    # One schedule per doctor
    Column("doctor_id", Uuid, primary_key=True),
    # Working week
    Column("working_days", JSON, nullable=False),
    Column("work_start", String(5), nullable=False, server_default="09:00"),
    Column("work_end", String(5), nullable=False, server_default="16:00"),
    Column("break_start", String(5)),
    Column("break_end", String(5)),
    Column("appointment_duration", Integer, nullable=False, server_default=text("30")),
    # Leave
    Column("currently_on_leave", Boolean, nullable=False, server_default=text("false")),
    Column("leave_days", JSON),
    # Audit
    Column("updated_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
)
