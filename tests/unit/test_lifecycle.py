"""Tests for the appointment transition table and field mutations."""

import pytest

from clinic.domain.appointments import lifecycle
from clinic.domain.appointments.lifecycle import ALLOWED_TRANSITIONS, Transition, ensure_transition
from clinic.exceptions import ConflictError, InvalidRequestError, InvalidTransitionError
from clinic.models import Appointment, AppointmentStatus


def make(total_sittings=1, current_sitting=0, status=AppointmentStatus.PENDING) -> Appointment:
    return Appointment(
        date="2026-11-02",
        time="09:30",
        service="Braces",
        status=status.value,
        total_sittings=total_sittings,
        current_sitting=current_sitting,
    )


class TestTransitionTable:
    """Tests for ALLOWED_TRANSITIONS / ensure_transition."""

    def test_every_status_has_an_entry(self) -> None:
        assert set(ALLOWED_TRANSITIONS) == set(AppointmentStatus)

    @pytest.mark.parametrize("status", [AppointmentStatus.PENDING, AppointmentStatus.CONFIRMED])
    @pytest.mark.parametrize("transition", list(Transition))
    def test_open_statuses_allow_all(self, status, transition) -> None:
        ensure_transition(status.value, transition)

    @pytest.mark.parametrize("status", [AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED])
    @pytest.mark.parametrize("transition", list(Transition))
    def test_terminal_statuses_reject_all(self, status, transition) -> None:
        with pytest.raises(InvalidTransitionError):
            ensure_transition(status.value, transition)

    def test_unknown_status_rejected(self) -> None:
        with pytest.raises(InvalidTransitionError):
            ensure_transition("archived", Transition.ACCEPT)

    def test_error_message_names_transition(self) -> None:
        with pytest.raises(InvalidTransitionError) as exc_info:
            ensure_transition("completed", Transition.COMPLETE_SITTING)
        assert exc_info.value.detail == "Cannot complete sitting an appointment that is completed"


class TestAcceptDecline:
    """Tests for accept/decline mutations."""

    def test_accept_sets_confirmed_and_time(self) -> None:
        appointment = make()
        lifecycle.accept(appointment, "10:00")

        assert appointment.status == "confirmed"
        assert appointment.time == "10:00"

    def test_accept_stores_time_verbatim(self) -> None:
        appointment = make()
        lifecycle.accept(appointment, "after lunch")

        assert appointment.time == "after lunch"

    def test_decline_sets_cancelled(self) -> None:
        appointment = make(status=AppointmentStatus.CONFIRMED)
        lifecycle.decline(appointment)

        assert appointment.status == "cancelled"


class TestCompleteSitting:
    """Tests for the sitting progression rule."""

    def test_three_sittings(self) -> None:
        """confirmed, confirmed, completed with counters 1, 2, 3."""
        appointment = make(total_sittings=3)
        seen = []

        for next_date in ["2026-11-09", "2026-11-16", "2026-11-23"]:
            continues = lifecycle.complete_sitting(appointment, next_date, "11:00")
            seen.append((appointment.status, appointment.current_sitting, continues))

        assert seen == [
            ("confirmed", 1, True),
            ("confirmed", 2, True),
            ("completed", 3, False),
        ]

    def test_single_sitting_completes_directly(self) -> None:
        appointment = make(total_sittings=1)

        assert lifecycle.complete_sitting(appointment, "2026-12-01", "08:00") is False
        assert appointment.status == "completed"
        assert appointment.current_sitting == 1

    def test_continuing_moves_date_and_time(self) -> None:
        appointment = make(total_sittings=2)
        lifecycle.complete_sitting(appointment, "2026-11-09", "11:00")

        assert (appointment.date, appointment.time) == ("2026-11-09", "11:00")

    def test_final_sitting_keeps_last_date(self) -> None:
        appointment = make(total_sittings=2, current_sitting=1, status=AppointmentStatus.CONFIRMED)
        lifecycle.complete_sitting(appointment, "2027-01-01", "12:00")

        assert (appointment.date, appointment.time) == ("2026-11-02", "09:30")

    @pytest.mark.parametrize("next_date, next_time", [(None, None), ("2026-11-09", None), (None, "11:00")])
    def test_continuing_requires_next_visit(self, next_date, next_time) -> None:
        appointment = make(total_sittings=3)

        with pytest.raises(InvalidRequestError):
            lifecycle.complete_sitting(appointment, next_date, next_time)

        assert appointment.current_sitting == 0
        assert (appointment.date, appointment.time, appointment.status) == ("2026-11-02", "09:30", "pending")

    def test_final_sitting_needs_no_next_visit(self) -> None:
        appointment = make(total_sittings=2, current_sitting=1, status=AppointmentStatus.CONFIRMED)

        assert lifecycle.complete_sitting(appointment, None, None) is False
        assert appointment.status == "completed"


class TestExpectedSitting:
    """Tests for check_expected_sitting."""

    def test_none_skips_check(self) -> None:
        lifecycle.check_expected_sitting(make(current_sitting=2, total_sittings=4), None)

    def test_next_sitting_accepted(self) -> None:
        lifecycle.check_expected_sitting(make(current_sitting=2, total_sittings=4), 3)

    @pytest.mark.parametrize("expected", [2, 4])
    def test_other_sittings_rejected(self, expected: int) -> None:
        with pytest.raises(ConflictError):
            lifecycle.check_expected_sitting(make(current_sitting=2, total_sittings=4), expected)
