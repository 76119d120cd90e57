"""Doctor schedule and slot availability service."""

from datetime import UTC, date, datetime
from uuid import UUID

import structlog
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.exceptions import NotFoundException
from app.core.redis_client import CacheManager
from app.models.appointments import appointments
from app.models.doctor_schedules import doctor_schedules
from app.scheduling.conflicts import TimeWindow, free_slots
from app.scheduling.lifecycle import ACTIVE_STATUSES
from app.scheduling.slots import generate_slots, parse_time
from app.schemas.doctor_schedules import (
    DoctorScheduleResponse,
    DoctorScheduleUpdate,
    Weekday,
)
from app.services.user_service import UserService

logger = structlog.get_logger(__name__)


def default_slots() -> list[str]:
    """Get the clinic-wide slot grid."""
    return generate_slots(settings.clinic_day_start, settings.clinic_day_end, settings.slot_minutes)


class ScheduleService:
    """Service for doctor schedules and bookable slots."""

    # Cache TTL in seconds
    SCHEDULE_CACHE_TTL = 900

    def __init__(self, db: AsyncSession, cache_manager: CacheManager | None = None):
        """Initialize service with database session and optional cache manager."""
        self.db = db
        self.cache = cache_manager
        self.users = UserService(db)

    @staticmethod
    def _get_schedule_cache_key(doctor_id: UUID) -> str:
        """Generate cache key for a doctor schedule."""
        return f"doctor_schedule:{doctor_id}"

    async def _ensure_doctor(self, doctor_id: UUID) -> None:
        if not await self.users.is_doctor(doctor_id):
            raise NotFoundException("Doctor not found")

    async def get_schedule(self, doctor_id: UUID) -> DoctorScheduleResponse:
        """
        Get a doctor's schedule, falling back to the default working week.

        Args:
            doctor_id: Doctor user ID

        Returns:
            Stored or default schedule

        Raises:
            NotFoundException: If the doctor does not exist
        """
        if self.cache:
            cached = self.cache.get_json(self._get_schedule_cache_key(doctor_id))
            if cached:
                return DoctorScheduleResponse.model_validate(cached)

        await self._ensure_doctor(doctor_id)

        result = await self.db.execute(
            select(doctor_schedules).where(doctor_schedules.c.doctor_id == doctor_id)
        )
        row = result.mappings().first()

        if row:
            schedule = DoctorScheduleResponse.model_validate(dict(row))
        else:
            schedule = DoctorScheduleResponse(doctor_id=doctor_id, is_default=True)

        if self.cache:
            self.cache.set_json(
                self._get_schedule_cache_key(doctor_id),
                schedule.model_dump(mode="json"),
                ttl=self.SCHEDULE_CACHE_TTL,
            )

        return schedule

    async def update_schedule(
        self,
        doctor_id: UUID,
        data: DoctorScheduleUpdate,
    ) -> DoctorScheduleResponse:
        """
        Create or replace a doctor's schedule.

        Args:
            doctor_id: Doctor user ID
            data: New schedule

        Returns:
            Stored schedule

        Raises:
            NotFoundException: If the doctor does not exist
        """
        await self._ensure_doctor(doctor_id)

        values = data.model_dump()
        values["working_days"] = [day.value for day in data.working_days]
        values["leave_days"] = [day.isoformat() for day in data.leave_days]
        values["updated_at"] = datetime.now(UTC)

        existing = await self.db.execute(
            select(doctor_schedules.c.doctor_id).where(doctor_schedules.c.doctor_id == doctor_id)
        )
        if existing.first():
            stmt = (
                update(doctor_schedules)
                .where(doctor_schedules.c.doctor_id == doctor_id)
                .values(**values)
                .returning(doctor_schedules)
            )
        else:
            stmt = (
                doctor_schedules.insert()
                .values(doctor_id=doctor_id, **values)
                .returning(doctor_schedules)
            )

        result = await self.db.execute(stmt)
        row = result.mappings().first()
        await self.db.commit()

        if self.cache:
            self.cache.delete(self._get_schedule_cache_key(doctor_id))

        logger.info("doctor_schedule_updated", doctor_id=str(doctor_id))
        return DoctorScheduleResponse.model_validate(dict(row))

    async def available_slots(self, doctor_id: UUID, day: date) -> list[str]:
        """
        List a doctor's free slots on a date.

        A slot is free when the day is a working day outside any leave, the
        slot does not overlap the break and no Scheduled or Confirmed
        appointment overlaps it.

        Args:
            doctor_id: Doctor user ID
            day: Calendar date

        Returns:
            Ordered ``HH:MM`` slot start times
        """
        schedule = await self.get_schedule(doctor_id)

        if (
            schedule.currently_on_leave
            or day in schedule.leave_days
            or Weekday.of(day) not in schedule.working_days
        ):
            return []

        slot_minutes = schedule.appointment_duration
        slots = generate_slots(schedule.work_start, schedule.work_end, slot_minutes)

        if schedule.break_start and schedule.break_end:
            pause = TimeWindow(
                start=parse_time(schedule.break_start),
                end=parse_time(schedule.break_end),
            )
            slots = [
                slot
                for slot in slots
                if not TimeWindow.from_booking(slot, slot_minutes).overlaps(pause)
            ]

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
        booked = [dict(row) for row in result.mappings().all()]

        return free_slots(slots, slot_minutes, booked)
