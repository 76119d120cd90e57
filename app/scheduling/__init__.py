"""Appointment scheduling core: slots, conflicts, visibility and lifecycle."""

from app.scheduling.conflicts import TimeWindow, find_conflicts, free_slots, has_conflict
from app.scheduling.lifecycle import (
    ACTIVE_STATUSES,
    TERMINAL_STATUSES,
    AppointmentStatus,
    InvalidTransitionError,
    SchedulingError,
    can_transition,
    is_terminal,
    transition,
)
from app.scheduling.slots import add_minutes, format_time, generate_slots, parse_time
from app.scheduling.validation import ValidationResult, validate_booking
from app.scheduling.visibility import (
    AppointmentQuery,
    AuthorizationError,
    UserRole,
    build_visibility_filter,
    can_view,
)

__all__ = [
    "ACTIVE_STATUSES",
    "TERMINAL_STATUSES",
    "AppointmentQuery",
    "AppointmentStatus",
    "AuthorizationError",
    "InvalidTransitionError",
    "SchedulingError",
    "TimeWindow",
    "UserRole",
    "ValidationResult",
    "add_minutes",
    "build_visibility_filter",
    "can_transition",
    "can_view",
    "find_conflicts",
    "format_time",
    "free_slots",
    "generate_slots",
    "has_conflict",
    "is_terminal",
    "parse_time",
    "transition",
    "validate_booking",
]
