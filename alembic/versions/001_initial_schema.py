"""Create users, appointments and doctor_schedules tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the initial schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("username", sa.String(30), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("hashed_password", sa.Text(), nullable=False),
        sa.Column("first_name", sa.Text(), nullable=False),
        sa.Column("last_name", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("role", sa.String(30), nullable=False, server_default=sa.text("'user'")),
        sa.Column("department", sa.String(50), nullable=True),
        sa.Column("specialization", sa.Text(), nullable=True),
        sa.Column("employee_id", sa.String(50), nullable=True, unique=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_role", "users", ["role"], unique=False)

    op.create_table(
        "appointments",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("appointment_number", sa.String(20), nullable=False, unique=True),
        sa.Column("patient_id", sa.Uuid(), nullable=False),
        sa.Column("doctor_id", sa.Uuid(), nullable=False),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("appointment_time", sa.String(5), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("status", sa.String(20), nullable=False, server_default="Scheduled"),
        sa.Column("type", sa.String(20), nullable=False, server_default="Consultation"),
        sa.Column("priority", sa.String(20), nullable=False, server_default="Medium"),
        sa.Column("department", sa.String(50), nullable=True),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("symptoms", sa.JSON(), nullable=True),
        sa.Column("diagnosis", sa.Text(), nullable=True),
        sa.Column("treatment", sa.Text(), nullable=True),
        sa.Column("prescription", sa.JSON(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "follow_up_required", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("follow_up_date", sa.Date(), nullable=True),
        sa.Column("room_number", sa.String(20), nullable=True),
        sa.Column(
            "insurance_covered", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("cost", sa.Numeric(10, 2), nullable=False, server_default=sa.text("0")),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="Pending"),
        sa.Column("created_by", sa.Text(), nullable=False, server_default="System"),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "status IN ('Scheduled', 'Confirmed', 'In Progress', 'Completed', 'Cancelled', "
            "'No Show')",
            name="appointments_status_check",
        ),
        sa.CheckConstraint(
            "duration_minutes BETWEEN 15 AND 120",
            name="appointments_duration_check",
        ),
        sa.CheckConstraint("patient_id <> doctor_id", name="appointments_distinct_actors_check"),
    )
    op.create_index("ix_appointments_patient_id", "appointments", ["patient_id"])
    op.create_index("ix_appointments_doctor_id", "appointments", ["doctor_id"])
    op.create_index("ix_appointments_appointment_date", "appointments", ["appointment_date"])
    op.create_index("ix_appointments_status", "appointments", ["status"])
    # Conflict checks read one doctor's day
    op.create_index(
        "idx_appointments_doctor_date", "appointments", ["doctor_id", "appointment_date"]
    )

    op.create_table(
        "doctor_schedules",
        sa.Column("doctor_id", sa.Uuid(), primary_key=True),
        sa.Column("working_days", sa.JSON(), nullable=False),
        sa.Column("work_start", sa.String(5), nullable=False, server_default="09:00"),
        sa.Column("work_end", sa.String(5), nullable=False, server_default="16:00"),
        sa.Column("break_start", sa.String(5), nullable=True),
        sa.Column("break_end", sa.String(5), nullable=True),
        sa.Column(
            "appointment_duration", sa.Integer(), nullable=False, server_default=sa.text("30")
        ),
        sa.Column(
            "currently_on_leave", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("leave_days", sa.JSON(), nullable=True),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    """Drop the initial schema."""
    op.drop_table("doctor_schedules")

    op.drop_index("idx_appointments_doctor_date", table_name="appointments")
    op.drop_index("ix_appointments_status", table_name="appointments")
    op.drop_index("ix_appointments_appointment_date", table_name="appointments")
    op.drop_index("ix_appointments_doctor_id", table_name="appointments")
    op.drop_index("ix_appointments_patient_id", table_name="appointments")
    op.drop_table("appointments")

    op.drop_index("ix_users_role", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
