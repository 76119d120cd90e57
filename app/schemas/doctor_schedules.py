"""Doctor schedule schemas."""

from datetime import date, datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from app.scheduling.slots import parse_time


class Weekday(str, Enum):
    """Day of the week, in ``date.weekday()`` order."""

    MONDAY = "monday"
    TUESDAY = "tuesday"
    WEDNESDAY = "wednesday"
    THURSDAY = "thursday"
    FRIDAY = "friday"
    SATURDAY = "saturday"
    SUNDAY = "sunday"

    @classmethod
    def of(cls, day: date) -> "Weekday":
        """Get the weekday of a calendar date."""
        return list(cls)[day.weekday()]


def _check_time(value: str | None) -> str | None:
    if value is not None:
        parse_time(value)
    return value


class DoctorScheduleBase(BaseModel):
    """Working week of a doctor."""

    working_days: list[Weekday] = Field(
        default_factory=lambda: [
            Weekday.MONDAY,
            Weekday.TUESDAY,
            Weekday.WEDNESDAY,
            Weekday.THURSDAY,
            Weekday.FRIDAY,
        ]
    )
    work_start: str = "09:00"
    work_end: str = "16:00"
    break_start: str | None = "12:00"
    break_end: str | None = "12:30"
    appointment_duration: int = Field(30, ge=15, le=120)
    currently_on_leave: bool = False
    leave_days: list[date] = Field(default_factory=list)

    @field_validator("work_start", "work_end", "break_start", "break_end")
    @classmethod
    def validate_time_format(cls, v: str | None) -> str | None:
        """Validate time format."""
        return _check_time(v)

    @model_validator(mode="after")
    def check_hours(self) -> "DoctorScheduleBase":
        """Check the working hours and the break against each other, defaults included."""
        if parse_time(self.work_end) <= parse_time(self.work_start):
            raise ValueError("Work end must be after work start")

        if (self.break_start is None) != (self.break_end is None):
            raise ValueError("Break start and end must be given together")
        if self.break_start is not None and self.break_end is not None:
            if parse_time(self.break_end) <= parse_time(self.break_start):
                raise ValueError("Break end must be after break start")

        return self


class DoctorScheduleUpdate(DoctorScheduleBase):
    """Schema for replacing a doctor's schedule."""


class DoctorScheduleResponse(DoctorScheduleBase):
    """Doctor schedule response."""

    doctor_id: UUID
    is_default: bool = False
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}
