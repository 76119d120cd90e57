"""Tests for the appointment status lifecycle."""

import pytest

from app.scheduling.lifecycle import (
    AppointmentStatus,
    InvalidTransitionError,
    can_transition,
    is_terminal,
    transition,
)

S = AppointmentStatus

ALLOWED = [
    (S.SCHEDULED, S.CONFIRMED),
    (S.SCHEDULED, S.IN_PROGRESS),
    (S.SCHEDULED, S.COMPLETED),
    (S.SCHEDULED, S.NO_SHOW),
    (S.SCHEDULED, S.CANCELLED),
    (S.CONFIRMED, S.IN_PROGRESS),
    (S.CONFIRMED, S.COMPLETED),
    (S.CONFIRMED, S.NO_SHOW),
    (S.CONFIRMED, S.CANCELLED),
    (S.IN_PROGRESS, S.COMPLETED),
    (S.IN_PROGRESS, S.CANCELLED),
]


@pytest.mark.parametrize(("current", "target"), ALLOWED)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)
    assert transition(current, target) == target


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (S.COMPLETED, S.SCHEDULED),
        (S.CANCELLED, S.SCHEDULED),
        (S.NO_SHOW, S.CONFIRMED),
        (S.COMPLETED, S.CANCELLED),
        (S.CONFIRMED, S.SCHEDULED),
        (S.IN_PROGRESS, S.SCHEDULED),
        (S.IN_PROGRESS, S.NO_SHOW),
    ],
)
def test_rejected_transitions(current, target):
    assert not can_transition(current, target)
    with pytest.raises(InvalidTransitionError):
        transition(current, target)


@pytest.mark.parametrize("status", list(S))
def test_same_status_is_a_no_op(status):
    assert transition(status, status) == status


def test_accepts_plain_strings():
    assert transition("Scheduled", "In Progress") == S.IN_PROGRESS


def test_terminal_statuses():
    assert {status for status in S if is_terminal(status)} == {
        S.COMPLETED,
        S.CANCELLED,
        S.NO_SHOW,
    }


def test_error_message_names_both_statuses():
    with pytest.raises(InvalidTransitionError) as exc_info:
        transition(S.CONFIRMED, S.SCHEDULED)
    assert "Confirmed" in exc_info.value.message
    assert "Scheduled" in exc_info.value.message
