"""Overlap detection between appointments of the same doctor and day."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from app.scheduling.lifecycle import ACTIVE_STATUSES, AppointmentStatus
from app.scheduling.slots import parse_time


@dataclass(frozen=True)
class TimeWindow:
    """Half-open ``[start, end)`` interval in minutes since midnight."""

    start: int
    end: int

    @classmethod
    def from_booking(cls, start_time: str, duration_minutes: int) -> "TimeWindow":
        """Build the window covered by a booking."""
        start = parse_time(start_time)
        return cls(start=start, end=start + duration_minutes)

    def overlaps(self, other: "TimeWindow") -> bool:
        """Touching windows (``self.end == other.start``) do not overlap."""
        return self.start < other.end and other.start < self.end


def occupies_calendar(appointment: Mapping[str, Any]) -> bool:
    """Check whether an existing appointment blocks its time window."""
    try:
        return AppointmentStatus(appointment["status"]) in ACTIVE_STATUSES
    except ValueError:
        return False


def find_conflicts(
    start_time: str,
    duration_minutes: int,
    existing: Iterable[Mapping[str, Any]],
    exclude_id: Any | None = None,
) -> list[Mapping[str, Any]]:
    """
    Find existing appointments that overlap a candidate booking.

    ``existing`` is expected to hold the appointments of one doctor on one
    date. Only Scheduled and Confirmed appointments are considered.

    Args:
        start_time: Candidate start, ``HH:MM``
        duration_minutes: Candidate length
        existing: Appointment rows with ``appointment_time``,
            ``duration_minutes``, ``status`` and ``id``
        exclude_id: Appointment to ignore, used when rescheduling

    Returns:
        The conflicting appointments, in input order
    """
    candidate = TimeWindow.from_booking(start_time, duration_minutes)

    conflicts = []
    for appointment in existing:
        if exclude_id is not None and appointment.get("id") == exclude_id:
            continue
        if not occupies_calendar(appointment):
            continue
        window = TimeWindow.from_booking(
            appointment["appointment_time"],
            appointment["duration_minutes"],
        )
        if candidate.overlaps(window):
            conflicts.append(appointment)

    return conflicts


def has_conflict(
    start_time: str,
    duration_minutes: int,
    existing: Iterable[Mapping[str, Any]],
    exclude_id: Any | None = None,
) -> bool:
    """Return True if the candidate booking overlaps any active appointment."""
    return bool(find_conflicts(start_time, duration_minutes, existing, exclude_id))


def free_slots(
    slots: Iterable[str],
    slot_minutes: int,
    existing: Iterable[Mapping[str, Any]],
) -> list[str]:
    """Filter ``slots`` down to the ones no active appointment overlaps."""
    booked = list(existing)
    return [slot for slot in slots if not has_conflict(slot, slot_minutes, booked)]
