"""Appointment status lifecycle."""

from enum import Enum


class SchedulingError(Exception):
    """Base class for errors raised by the scheduling core."""

    def __init__(self, message: str):
        """Initialize with a human-readable message."""
        self.message = message
        super().__init__(message)


class InvalidTransitionError(SchedulingError):
    """A status change is not permitted by the lifecycle."""


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    SCHEDULED = "Scheduled"
    CONFIRMED = "Confirmed"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    NO_SHOW = "No Show"


# Statuses that occupy a doctor's calendar
ACTIVE_STATUSES = frozenset({AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED})

TERMINAL_STATUSES = frozenset(
    {
        AppointmentStatus.COMPLETED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.NO_SHOW,
    }
)

ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {
            AppointmentStatus.CONFIRMED,
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.NO_SHOW,
            AppointmentStatus.CANCELLED,
        }
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {
            AppointmentStatus.IN_PROGRESS,
            AppointmentStatus.COMPLETED,
            AppointmentStatus.NO_SHOW,
            AppointmentStatus.CANCELLED,
        }
    ),
    AppointmentStatus.IN_PROGRESS: frozenset(
        {
            AppointmentStatus.COMPLETED,
            AppointmentStatus.CANCELLED,
        }
    ),
}


def is_terminal(status: AppointmentStatus | str) -> bool:
    """Check whether no further transition is possible from ``status``."""
    return AppointmentStatus(status) in TERMINAL_STATUSES


def can_transition(current: AppointmentStatus | str, target: AppointmentStatus | str) -> bool:
    """Check whether moving from ``current`` to ``target`` is allowed."""
    current = AppointmentStatus(current)
    target = AppointmentStatus(target)
    if current == target:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(
    current: AppointmentStatus | str,
    target: AppointmentStatus | str,
) -> AppointmentStatus:
    """
    Validate a status change.

    Moves go forward along Scheduled -> Confirmed -> In Progress -> Completed,
    No Show is reachable before the visit starts, and every non-terminal
    status may be cancelled. Re-writing the current status is a no-op.

    Args:
        current: Status stored on the appointment
        target: Requested status

    Returns:
        The new status

    Raises:
        InvalidTransitionError: If the change is not permitted
    """
    current = AppointmentStatus(current)
    target = AppointmentStatus(target)

    if current == target:
        return target

    if current in TERMINAL_STATUSES:
        raise InvalidTransitionError(
            f"Appointment is {current.value} and can no longer change status"
        )

    if not can_transition(current, target):
        raise InvalidTransitionError(
            f"Cannot change appointment status from {current.value} to {target.value}"
        )

    return target
