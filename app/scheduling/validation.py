"""Explicit booking validation, run before any conflict check."""

from dataclasses import dataclass, field
from typing import Any

from app.scheduling.slots import MINUTES_PER_DAY, parse_time

MIN_DURATION_MINUTES = 15
MAX_DURATION_MINUTES = 120


@dataclass
class ValidationResult:
    """Outcome of validating a booking request."""

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """True when no problem was found."""
        return not self.errors

    @property
    def message(self) -> str:
        """All problems joined into one message."""
        return "; ".join(self.errors)


def validate_booking(
    appointment_time: Any,
    duration_minutes: Any,
    *,
    patient_id: Any = None,
    doctor_id: Any = None,
    slot_minutes: int = 30,
    day_start: str = "09:00",
    enforce_slot_alignment: bool = False,
) -> ValidationResult:
    """
    Validate the scheduling fields of a booking.

    Bookings may not run past midnight; ending exactly at 24:00 is allowed.
    When ``enforce_slot_alignment`` is set the start time must lie on the
    slot grid that begins at ``day_start``.

    Args:
        appointment_time: Requested start, ``HH:MM``
        duration_minutes: Requested length in minutes
        patient_id: Patient reference, checked against ``doctor_id``
        doctor_id: Doctor reference
        slot_minutes: Slot granularity
        day_start: Origin of the slot grid
        enforce_slot_alignment: Require the start to sit on the grid

    Returns:
        Validation result listing every problem found
    """
    result = ValidationResult()

    start: int | None
    try:
        start = parse_time(appointment_time)
        if start >= MINUTES_PER_DAY:
            raise ValueError(appointment_time)
    except ValueError:
        result.errors.append(f"Invalid appointment time '{appointment_time}', expected HH:MM")
        start = None

    duration_ok = (
        isinstance(duration_minutes, int)
        and not isinstance(duration_minutes, bool)
        and MIN_DURATION_MINUTES <= duration_minutes <= MAX_DURATION_MINUTES
    )
    if not duration_ok:
        result.errors.append(
            f"Duration must be an integer between {MIN_DURATION_MINUTES} "
            f"and {MAX_DURATION_MINUTES} minutes"
        )

    if start is not None and duration_ok and start + duration_minutes > MINUTES_PER_DAY:
        result.errors.append("Appointment may not extend past midnight")

    if start is not None and enforce_slot_alignment:
        origin = parse_time(day_start)
        if start < origin or (start - origin) % slot_minutes != 0:
            result.errors.append(
                f"Appointment time must align to {slot_minutes}-minute slots "
                f"starting at {day_start}"
            )

    if patient_id is not None and doctor_id is not None and patient_id == doctor_id:
        result.errors.append("Patient and doctor must be different people")

    return result
