"""Role-scoped visibility of appointments."""

from collections.abc import Mapping
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Any
from uuid import UUID

from app.scheduling.lifecycle import SchedulingError


class AuthorizationError(SchedulingError):
    """The caller's role does not grant access to the requested records."""


class UserRole(str, Enum):
    """User role enumeration."""

    ADMIN = "admin"
    DOCTOR = "doctor"
    NURSE = "nurse"
    RECEPTIONIST = "receptionist"
    PHARMACIST = "pharmacist"
    LAB_TECHNICIAN = "lab_technician"
    IT = "it"
    STAFF = "staff"
    USER = "user"
    PATIENT = "patient"


# Roles that see every appointment and may filter by doctor or patient
FULL_VISIBILITY_ROLES = frozenset({UserRole.ADMIN, UserRole.NURSE, UserRole.RECEPTIONIST})

PATIENT_ROLES = frozenset({UserRole.USER, UserRole.PATIENT})


@dataclass(frozen=True)
class AppointmentQuery:
    """Filter predicate ANDed onto an appointment query."""

    doctor_id: UUID | None = None
    patient_id: UUID | None = None
    appointment_date: date | None = None
    status: str | None = None
    type: str | None = None


def _coerce_role(role: UserRole | str) -> UserRole:
    try:
        return UserRole(role)
    except ValueError:
        raise AuthorizationError(f"Role '{role}' has no access to appointments") from None


def build_visibility_filter(
    role: UserRole | str,
    caller_id: UUID,
    requested: AppointmentQuery | None = None,
) -> AppointmentQuery:
    """
    Narrow a requested appointment query to what the caller may see.

    Admins, nurses and receptionists see everything and their explicit
    doctor/patient filters are honoured. Doctors only see their own
    appointments and patients only their own; explicit doctor/patient filters
    from these roles are ignored. Date, status and type filters pass through
    for every role.

    Args:
        role: Caller's role
        caller_id: Caller's user ID
        requested: Filters supplied with the request

    Returns:
        The effective query

    Raises:
        AuthorizationError: If the role has no appointment visibility
    """
    role = _coerce_role(role)
    requested = requested or AppointmentQuery()

    if role in FULL_VISIBILITY_ROLES:
        return requested

    if role == UserRole.DOCTOR:
        return replace(requested, doctor_id=caller_id, patient_id=None)

    if role in PATIENT_ROLES:
        return replace(requested, doctor_id=None, patient_id=caller_id)

    raise AuthorizationError(f"Role '{role.value}' has no access to appointments")


def can_view(role: UserRole | str, caller_id: UUID, appointment: Mapping[str, Any]) -> bool:
    """Check whether a single appointment falls inside the caller's scope."""
    try:
        scope = build_visibility_filter(role, caller_id)
    except AuthorizationError:
        return False

    if scope.doctor_id is not None and appointment["doctor_id"] != scope.doctor_id:
        return False
    if scope.patient_id is not None and appointment["patient_id"] != scope.patient_id:
        return False
    return True
