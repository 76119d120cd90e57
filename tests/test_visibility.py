"""Tests for role-scoped appointment visibility."""

from datetime import date
from uuid import uuid4

import pytest

from app.scheduling.visibility import (
    AppointmentQuery,
    AuthorizationError,
    UserRole,
    build_visibility_filter,
    can_view,
)

CALLER = uuid4()
SOMEONE_ELSE = uuid4()


class TestBuildVisibilityFilter:
    """Policy table of the query builder."""

    @pytest.mark.parametrize("role", ["admin", "nurse", "receptionist"])
    def test_full_visibility_roles_see_everything(self, role):
        assert build_visibility_filter(role, CALLER) == AppointmentQuery()

    @pytest.mark.parametrize("role", ["admin", "nurse", "receptionist"])
    def test_full_visibility_roles_keep_explicit_filters(self, role):
        requested = AppointmentQuery(doctor_id=SOMEONE_ELSE, patient_id=uuid4())
        assert build_visibility_filter(role, CALLER, requested) == requested

    def test_doctor_is_scoped_to_own_calendar(self):
        query = build_visibility_filter(UserRole.DOCTOR, CALLER)
        assert query.doctor_id == CALLER
        assert query.patient_id is None

    def test_doctor_cannot_widen_scope_with_doctor_param(self):
        requested = AppointmentQuery(doctor_id=SOMEONE_ELSE, patient_id=SOMEONE_ELSE)
        query = build_visibility_filter("doctor", CALLER, requested)
        assert query.doctor_id == CALLER
        assert query.patient_id is None

    @pytest.mark.parametrize("role", ["user", "patient"])
    def test_patient_is_scoped_to_own_appointments(self, role):
        requested = AppointmentQuery(doctor_id=SOMEONE_ELSE, patient_id=SOMEONE_ELSE)
        query = build_visibility_filter(role, CALLER, requested)
        assert query.patient_id == CALLER
        assert query.doctor_id is None

    def test_other_filters_pass_through(self):
        requested = AppointmentQuery(
            appointment_date=date(2025, 3, 3), status="Confirmed", type="Follow-up"
        )
        query = build_visibility_filter("doctor", CALLER, requested)
        assert query.appointment_date == date(2025, 3, 3)
        assert query.status == "Confirmed"
        assert query.type == "Follow-up"

    @pytest.mark.parametrize("role", ["pharmacist", "lab_technician", "it", "staff"])
    def test_roles_without_visibility_are_rejected(self, role):
        with pytest.raises(AuthorizationError):
            build_visibility_filter(role, CALLER)

    def test_unknown_role_is_rejected(self):
        with pytest.raises(AuthorizationError):
            build_visibility_filter("janitor", CALLER)


class TestCanView:
    """Single-record access checks."""

    def test_doctor_sees_only_own_appointments(self):
        assert can_view("doctor", CALLER, {"doctor_id": CALLER, "patient_id": SOMEONE_ELSE})
        assert not can_view("doctor", CALLER, {"doctor_id": SOMEONE_ELSE, "patient_id": CALLER})

    def test_patient_sees_only_own_appointments(self):
        assert can_view("user", CALLER, {"doctor_id": SOMEONE_ELSE, "patient_id": CALLER})
        assert not can_view("patient", CALLER, {"doctor_id": CALLER, "patient_id": SOMEONE_ELSE})

    def test_receptionist_sees_everything(self):
        assert can_view("receptionist", CALLER, {"doctor_id": uuid4(), "patient_id": uuid4()})

    def test_pharmacist_sees_nothing(self):
        assert not can_view("pharmacist", CALLER, {"doctor_id": CALLER, "patient_id": CALLER})
