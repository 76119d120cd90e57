"""Appointment service for business logic."""

import math
from collections.abc import Mapping, Sequence
from datetime import UTC, date, datetime
from typing import Any
from uuid import UUID, uuid4

import structlog
from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core import notifications as topics
from app.core.exceptions import (
    ConflictException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from app.core.locks import booking_lock
from app.core.notifications import NotificationPublisher
from app.models.appointments import appointments
from app.scheduling.conflicts import find_conflicts
from app.scheduling.lifecycle import (
    ACTIVE_STATUSES,
    AppointmentStatus,
    InvalidTransitionError,
    is_terminal,
    transition,
)
from app.scheduling.slots import add_minutes
from app.scheduling.validation import validate_booking
from app.scheduling.visibility import (
    FULL_VISIBILITY_ROLES,
    PATIENT_ROLES,
    AppointmentQuery,
    AuthorizationError,
    UserRole,
    build_visibility_filter,
    can_view,
)
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentStatusUpdate,
    AppointmentUpdate,
    Pagination,
)
from app.schemas.users import UserSummary
from app.services.schedule_service import ScheduleService
from app.services.user_service import UserService, display_name

logger = structlog.get_logger(__name__)

# Fields whose change moves the appointment to another slot
RESCHEDULE_FIELDS = ("doctor_id", "appointment_date", "appointment_time", "duration_minutes")

# Fields a patient may edit on their own appointment
PATIENT_EDITABLE_FIELDS = frozenset(
    {"appointment_date", "appointment_time", "duration_minutes", "reason", "symptoms", "notes"}
)

# Columns that always hold a value; an explicit null for them is ignored
REQUIRED_FIELDS = frozenset(
    {
        "doctor_id",
        "appointment_date",
        "appointment_time",
        "duration_minutes",
        "reason",
        "type",
        "priority",
        "department",
        "follow_up_required",
        "insurance_covered",
        "cost",
        "payment_status",
    }
)


def _role_of(caller: Mapping[str, Any]) -> UserRole:
    try:
        return UserRole(caller["role"])
    except ValueError:
        raise ForbiddenException("Your role has no access to appointments") from None


class AppointmentService:
    """Service for booking and managing appointments."""

    def __init__(self, db: AsyncSession, publisher: NotificationPublisher):
        """Initialize service with database session and notification publisher."""
        self.db = db
        self.publisher = publisher
        self.users = UserService(db)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _fetch_row(self, appointment_id: UUID) -> dict:
        result = await self.db.execute(
            select(appointments).where(appointments.c.id == appointment_id)
        )
        row = result.mappings().first()
        if not row:
            raise NotFoundException("Appointment not found")
        return dict(row)

    async def _fetch_visible_row(self, appointment_id: UUID, caller: Mapping[str, Any]) -> dict:
        row = await self._fetch_row(appointment_id)
        if not can_view(_role_of(caller), caller["id"], row):
            raise ForbiddenException("Access denied to this appointment")
        return row

    async def _fetch_day(self, doctor_id: UUID, day: date) -> list[dict]:
        """Get a doctor's calendar-occupying appointments on one day."""
        result = await self.db.execute(
            select(
                appointments.c.id,
                appointments.c.appointment_time,
                appointments.c.duration_minutes,
                appointments.c.status,
            ).where(
                appointments.c.doctor_id == doctor_id,
                appointments.c.appointment_date == day,
                appointments.c.status.in_([status.value for status in ACTIVE_STATUSES]),
            )
        )
        return [dict(row) for row in result.mappings().all()]

    async def _to_responses(self, rows: Sequence[Mapping[str, Any]]) -> list[AppointmentResponse]:
        """Build responses with the patient and doctor populated."""
        people = await self.users.get_users_by_ids(
            [row["patient_id"] for row in rows] + [row["doctor_id"] for row in rows]
        )

        def summary(user_id: UUID) -> UserSummary | None:
            user = people.get(user_id)
            return UserSummary.model_validate(user) if user else None

        return [
            AppointmentResponse.model_validate(
                {
                    **row,
                    "end_time": add_minutes(row["appointment_time"], row["duration_minutes"]),
                    "patient": summary(row["patient_id"]),
                    "doctor": summary(row["doctor_id"]),
                }
            )
            for row in rows
        ]

    async def _to_response(self, row: Mapping[str, Any]) -> AppointmentResponse:
        return (await self._to_responses([row]))[0]

    async def _validate_slot(
        self,
        appointment_time: str,
        duration_minutes: int,
        patient_id: UUID,
        doctor_id: UUID,
    ) -> None:
        slot_minutes, day_start = settings.slot_minutes, settings.clinic_day_start
        if settings.enforce_slot_alignment:
            # Align to the grid available-slots offers for this doctor
            schedule = await ScheduleService(self.db).get_schedule(doctor_id)
            slot_minutes, day_start = schedule.appointment_duration, schedule.work_start

        result = validate_booking(
            appointment_time,
            duration_minutes,
            patient_id=patient_id,
            doctor_id=doctor_id,
            slot_minutes=slot_minutes,
            day_start=day_start,
            enforce_slot_alignment=settings.enforce_slot_alignment,
        )
        if not result.is_valid:
            raise ValidationException(result.message)

    async def _resolve_patient(self, caller: Mapping[str, Any], patient_id: UUID | None) -> UUID:
        role = _role_of(caller)

        if role in PATIENT_ROLES:
            if patient_id is not None and patient_id != caller["id"]:
                raise ForbiddenException("Patients can only book appointments for themselves")
            return caller["id"]

        if role not in FULL_VISIBILITY_ROLES and role != UserRole.DOCTOR:
            raise ForbiddenException("Your role cannot book appointments")

        if patient_id is None:
            raise ValidationException("Patient information is required")

        if not await self.users.is_patient(patient_id):
            if await self.users.lookup_actor(patient_id) is None:
                raise NotFoundException("Patient not found")
            raise ValidationException("Invalid patient selected")

        return patient_id

    async def _resolve_doctor(self, caller: Mapping[str, Any], doctor_id: UUID) -> str:
        """Check the doctor reference and return the doctor's display name."""
        if _role_of(caller) == UserRole.DOCTOR and doctor_id != caller["id"]:
            raise ForbiddenException("Doctors can only book appointments in their own calendar")

        actor = await self.users.lookup_actor(doctor_id)
        if actor is None:
            raise NotFoundException("Doctor not found")
        if actor.role != UserRole.DOCTOR.value:
            raise ValidationException("Invalid doctor selected")

        return actor.display_name

    async def _ensure_free(
        self,
        doctor_id: UUID,
        day: date,
        appointment_time: str,
        duration_minutes: int,
        exclude_id: UUID | None = None,
    ) -> None:
        """Raise ConflictException if the slot overlaps an active appointment."""
        existing = await self._fetch_day(doctor_id, day)
        conflicts = find_conflicts(appointment_time, duration_minutes, existing, exclude_id)
        if conflicts:
            await self.db.rollback()
            logger.info(
                "appointment_conflict",
                doctor_id=str(doctor_id),
                date=day.isoformat(),
                time=appointment_time,
                duration=duration_minutes,
                conflicting=[str(row["id"]) for row in conflicts],
            )
            raise ConflictException("Appointment time conflict detected")

    def _publish(self, topic: str, payload: dict[str, Any]) -> None:
        try:
            self.publisher.publish(topic, payload)
        except Exception as e:
            # Log error but don't fail the request
            logger.warning("failed_to_publish_notification", topic=topic, error=str(e))

    async def _count_for_day(self, day: date) -> int:
        result = await self.db.execute(
            select(func.count())
            .select_from(appointments)
            .where(appointments.c.appointment_date == day)
        )
        return result.scalar() or 0

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create_appointment(
        self,
        caller: Mapping[str, Any],
        data: AppointmentCreate,
    ) -> AppointmentResponse:
        """
        Book a new appointment.

        The booking is validated, then the conflict check and insert run
        while the doctor's calendar day is locked.

        Args:
            caller: Authenticated user making the booking
            data: Booking request

        Returns:
            Created appointment

        Raises:
            ValidationException: If the request is malformed
            NotFoundException: If the patient or doctor does not exist
            ForbiddenException: If the caller may not make this booking
            ConflictException: If the slot overlaps an active appointment
        """
        patient_id = await self._resolve_patient(caller, data.patient_id)
        doctor_name = await self._resolve_doctor(caller, data.doctor_id)

        duration = (
            data.duration_minutes
            if data.duration_minutes is not None
            else settings.default_appointment_duration
        )
        await self._validate_slot(data.appointment_time, duration, patient_id, data.doctor_id)

        appointment_id = uuid4()
        values = {
            "id": appointment_id,
            "appointment_number": f"A{appointment_id.hex[:8].upper()}",
            "patient_id": patient_id,
            "doctor_id": data.doctor_id,
            "appointment_date": data.appointment_date,
            "appointment_time": data.appointment_time,
            "duration_minutes": duration,
            "status": AppointmentStatus.SCHEDULED.value,
            "type": data.type.value,
            "priority": data.priority.value,
            "department": data.department.value,
            "reason": data.reason,
            "symptoms": data.symptoms,
            "notes": data.notes,
            "room_number": data.room_number,
            "follow_up_required": data.follow_up_required,
            "follow_up_date": data.follow_up_date,
            "insurance_covered": data.insurance_covered,
            "cost": data.cost,
            "created_by": caller["username"],
        }

        async with booking_lock(self.db, data.doctor_id, data.appointment_date):
            await self._ensure_free(
                data.doctor_id, data.appointment_date, data.appointment_time, duration
            )
            result = await self.db.execute(
                insert(appointments).values(**values).returning(appointments)
            )
            row = dict(result.mappings().first())
            await self.db.commit()

        logger.info(
            "appointment_created",
            appointment_id=str(appointment_id),
            doctor_id=str(data.doctor_id),
            patient_id=str(patient_id),
            date=data.appointment_date.isoformat(),
            time=data.appointment_time,
        )

        response = await self._to_response(row)

        self._publish(
            topics.NEW_APPOINTMENT,
            {
                "appointment_id": str(response.id),
                "patient_name": (
                    display_name(response.patient.model_dump())
                    if response.patient
                    else "Unknown Patient"
                ),
                "doctor_name": doctor_name,
                "date": response.appointment_date.isoformat(),
                "time": response.appointment_time,
                "timestamp": datetime.now(UTC).isoformat(),
            },
        )
        try:
            today_count = await self._count_for_day(date.today())
        except Exception as e:
            logger.warning("failed_to_count_todays_appointments", error=str(e))
        else:
            self._publish(topics.DASHBOARD_UPDATE, {"type": "appointment", "count": today_count})

        return response

    async def get_appointment(
        self,
        appointment_id: UUID,
        caller: Mapping[str, Any],
    ) -> AppointmentResponse:
        """
        Get appointment by ID.

        Raises:
            NotFoundException: If appointment not found
            ForbiddenException: If the appointment is outside the caller's scope
        """
        row = await self._fetch_visible_row(appointment_id, caller)
        return await self._to_response(row)

    async def list_appointments(
        self,
        caller: Mapping[str, Any],
        requested: AppointmentQuery,
        page: int = 1,
        limit: int = 10,
    ) -> AppointmentListResponse:
        """
        List the appointments visible to the caller.

        Args:
            caller: Authenticated user
            requested: Filters from the request, narrowed by role
            page: Page number (1-based)
            limit: Page size

        Returns:
            Page of appointments ordered by date and time
        """
        try:
            query = build_visibility_filter(caller["role"], caller["id"], requested)
        except AuthorizationError as e:
            raise ForbiddenException(e.message)

        conditions = []
        if query.doctor_id is not None:
            conditions.append(appointments.c.doctor_id == query.doctor_id)
        if query.patient_id is not None:
            conditions.append(appointments.c.patient_id == query.patient_id)
        if query.appointment_date is not None:
            conditions.append(appointments.c.appointment_date == query.appointment_date)
        if query.status is not None:
            conditions.append(appointments.c.status == query.status)
        if query.type is not None:
            conditions.append(appointments.c.type == query.type)

        count_stmt = select(func.count()).select_from(appointments).where(*conditions)
        total = (await self.db.execute(count_stmt)).scalar() or 0

        offset = (page - 1) * limit
        stmt = (
            select(appointments)
            .where(*conditions)
            .order_by(appointments.c.appointment_date, appointments.c.appointment_time)
            .limit(limit)
            .offset(offset)
        )
        result = await self.db.execute(stmt)
        rows = [dict(row) for row in result.mappings().all()]

        return AppointmentListResponse(
            appointments=await self._to_responses(rows),
            pagination=Pagination(
                current_page=page,
                total_pages=math.ceil(total / limit),
                total_appointments=total,
                has_next=offset + len(rows) < total,
                has_prev=page > 1,
            ),
        )

    async def list_in_range(
        self,
        caller: Mapping[str, Any],
        start: date,
        end: date,
        active_only: bool = False,
    ) -> list[AppointmentResponse]:
        """
        List the caller's visible appointments between two dates, inclusive.

        Args:
            caller: Authenticated user
            start: First day
            end: Last day
            active_only: Only Scheduled and Confirmed appointments

        Returns:
            Appointments ordered by date and time
        """
        if end < start:
            raise ValidationException("End date must not be before start date")

        try:
            query = build_visibility_filter(caller["role"], caller["id"])
        except AuthorizationError as e:
            raise ForbiddenException(e.message)

        conditions = [
            appointments.c.appointment_date >= start,
            appointments.c.appointment_date <= end,
        ]
        if query.doctor_id is not None:
            conditions.append(appointments.c.doctor_id == query.doctor_id)
        if query.patient_id is not None:
            conditions.append(appointments.c.patient_id == query.patient_id)
        if active_only:
            conditions.append(
                appointments.c.status.in_([status.value for status in ACTIVE_STATUSES])
            )

        stmt = (
            select(appointments)
            .where(*conditions)
            .order_by(appointments.c.appointment_date, appointments.c.appointment_time)
        )
        result = await self.db.execute(stmt)
        return await self._to_responses([dict(row) for row in result.mappings().all()])

    async def update_appointment(
        self,
        appointment_id: UUID,
        caller: Mapping[str, Any],
        data: AppointmentUpdate,
    ) -> AppointmentResponse:
        """
        Update an existing appointment.

        Changing the doctor, date, time or duration reschedules the
        appointment and re-runs validation and the conflict check.

        Raises:
            NotFoundException: If appointment not found
            ForbiddenException: If the caller may not edit this appointment
            InvalidTransitionException: If a finished appointment is rescheduled
            ConflictException: If the new slot is taken
        """
        current = await self._fetch_visible_row(appointment_id, caller)
        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None or field not in REQUIRED_FIELDS
        }

        if _role_of(caller) in PATIENT_ROLES:
            forbidden = set(changes) - PATIENT_EDITABLE_FIELDS
            if forbidden:
                raise ForbiddenException(
                    f"Patients cannot change: {', '.join(sorted(forbidden))}"
                )

        if not changes:
            return await self._to_response(current)

        update_values: dict[str, Any] = {}
        for field, value in changes.items():
            update_values[field] = getattr(value, "value", value)
        update_values["updated_at"] = datetime.now(UTC)

        target = {**current, **update_values}
        rescheduled = any(target[field] != current[field] for field in RESCHEDULE_FIELDS)

        stmt = (
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(**update_values)
            .returning(appointments)
        )

        if not rescheduled:
            result = await self.db.execute(stmt)
            row = dict(result.mappings().first())
            await self.db.commit()
            return await self._to_response(row)

        if is_terminal(current["status"]):
            raise InvalidTransitionException(
                f"Cannot reschedule an appointment that is {current['status']}"
            )

        if target["doctor_id"] != current["doctor_id"]:
            await self._resolve_doctor(caller, target["doctor_id"])

        await self._validate_slot(
            target["appointment_time"],
            target["duration_minutes"],
            target["patient_id"],
            target["doctor_id"],
        )

        async with booking_lock(self.db, target["doctor_id"], target["appointment_date"]):
            await self._ensure_free(
                target["doctor_id"],
                target["appointment_date"],
                target["appointment_time"],
                target["duration_minutes"],
                exclude_id=appointment_id,
            )
            result = await self.db.execute(stmt)
            row = dict(result.mappings().first())
            await self.db.commit()

        logger.info(
            "appointment_rescheduled",
            appointment_id=str(appointment_id),
            doctor_id=str(target["doctor_id"]),
            date=target["appointment_date"].isoformat(),
            time=target["appointment_time"],
        )
        return await self._to_response(row)

    async def update_appointment_status(
        self,
        appointment_id: UUID,
        caller: Mapping[str, Any],
        data: AppointmentStatusUpdate,
    ) -> AppointmentResponse:
        """
        Move an appointment through its lifecycle.

        Raises:
            NotFoundException: If appointment not found
            ForbiddenException: If the caller may not make this change
            InvalidTransitionException: If the lifecycle forbids the change
        """
        current = await self._fetch_visible_row(appointment_id, caller)
        old_status = AppointmentStatus(current["status"])

        if _role_of(caller) in PATIENT_ROLES and data.status != AppointmentStatus.CANCELLED:
            raise ForbiddenException("Patients can only cancel appointments")

        try:
            new_status = transition(old_status, data.status)
        except InvalidTransitionError as e:
            raise InvalidTransitionException(e.message)

        if new_status == old_status and not data.notes:
            return await self._to_response(current)

        update_values: dict[str, Any] = {
            "status": new_status.value,
            "updated_at": datetime.now(UTC),
        }
        if data.notes:
            update_values["notes"] = data.notes
        if new_status == AppointmentStatus.CANCELLED and old_status != new_status:
            update_values["cancelled_at"] = datetime.now(UTC)

        result = await self.db.execute(
            update(appointments)
            .where(appointments.c.id == appointment_id)
            .values(**update_values)
            .returning(appointments)
        )
        row = dict(result.mappings().first())
        await self.db.commit()

        if new_status == old_status:
            return await self._to_response(row)

        logger.info(
            "appointment_status_changed",
            appointment_id=str(appointment_id),
            old_status=old_status.value,
            new_status=new_status.value,
        )

        self._publish(
            topics.STATUS_CHANGED,
            {
                "appointment_id": str(appointment_id),
                "appointment_number": row["appointment_number"],
                "old_status": old_status.value,
                "new_status": new_status.value,
                "changed_by": caller["username"],
                "timestamp": datetime.now(UTC).isoformat(),
            },
        )
        if new_status == AppointmentStatus.COMPLETED and row["follow_up_required"]:
            self._publish(
                topics.FOLLOW_UP_REQUIRED,
                {
                    "appointment_id": str(appointment_id),
                    "patient_id": str(row["patient_id"]),
                    "doctor_id": str(row["doctor_id"]),
                    "follow_up_date": (
                        row["follow_up_date"].isoformat() if row["follow_up_date"] else None
                    ),
                },
            )

        return await self._to_response(row)

    async def delete_appointment(
        self,
        appointment_id: UUID,
        caller: Mapping[str, Any],
    ) -> None:
        """
        Permanently delete an appointment, regardless of its status.

        Raises:
            ForbiddenException: If the caller is not an administrator
            NotFoundException: If appointment not found
        """
        if _role_of(caller) != UserRole.ADMIN:
            raise ForbiddenException("Only administrators can delete appointments")

        await self._fetch_row(appointment_id)

        await self.db.execute(delete(appointments).where(appointments.c.id == appointment_id))
        await self.db.commit()

        logger.info(
            "appointment_deleted",
            appointment_id=str(appointment_id),
            deleted_by=caller["username"],
        )
