"""
Appointment lifecycle - status transition table and field mutations

Status workflow:
    pending   → confirmed (accept) | cancelled (decline) | confirmed/completed (complete sitting)
    confirmed → confirmed (accept, re-timed) | cancelled (decline) | confirmed/completed (complete sitting)
    cancelled, completed → terminal
"""

from enum import Enum
from typing import Optional

from ...exceptions import ConflictError, InvalidRequestError, InvalidTransitionError
from ...models import Appointment, AppointmentStatus


class Transition(str, Enum):
    ACCEPT = "accept"
    DECLINE = "decline"
    COMPLETE_SITTING = "complete_sitting"


ALLOWED_TRANSITIONS: dict[AppointmentStatus, frozenset[Transition]] = {
    AppointmentStatus.PENDING: frozenset(
        {Transition.ACCEPT, Transition.DECLINE, Transition.COMPLETE_SITTING}
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {Transition.ACCEPT, Transition.DECLINE, Transition.COMPLETE_SITTING}
    ),
    AppointmentStatus.CANCELLED: frozenset(),
    AppointmentStatus.COMPLETED: frozenset(),
}


def ensure_transition(status: str, transition: Transition) -> None:
    """Raise InvalidTransitionError unless `transition` is defined for `status`"""
    try:
        current = AppointmentStatus(status)
    except ValueError as e:
        raise InvalidTransitionError(f"Unknown appointment status '{status}'") from e

    if transition not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Cannot {transition.value.replace('_', ' ')} an appointment that is {current.value}"
        )


def accept(appointment: Appointment, time: str) -> None:
    appointment.status = AppointmentStatus.CONFIRMED.value
    appointment.time = time


def decline(appointment: Appointment) -> None:
    appointment.status = AppointmentStatus.CANCELLED.value


def check_expected_sitting(appointment: Appointment, expected_sitting: Optional[int]) -> None:
    """
    Reject a completion for a sitting other than the next one, so a retried
    request cannot advance the counter twice.
    """
    if expected_sitting is None:
        return

    next_sitting = appointment.current_sitting + 1
    if expected_sitting != next_sitting:
        raise ConflictError(
            f"Sitting {expected_sitting} cannot be completed; next sitting is {next_sitting}"
        )


def complete_sitting(appointment: Appointment, next_date: Optional[str], next_time: Optional[str]) -> bool:
    """
    Advance the sitting counter. Returns True while the treatment continues.

    While sittings remain, the appointment moves to the next visit and stays
    confirmed. Once the counter reaches total_sittings the appointment is
    completed and date/time keep their last values. A continuing sitting
    needs both next_date and next_time; nothing is changed when one is missing.
    """
    continues = appointment.current_sitting + 1 < appointment.total_sittings
    if continues and (next_date is None or next_time is None):
        raise InvalidRequestError("nextDate and nextTime are required while sittings remain")

    appointment.current_sitting += 1

    if continues:
        appointment.date = next_date
        appointment.time = next_time
        appointment.status = AppointmentStatus.CONFIRMED.value
        return True

    appointment.status = AppointmentStatus.COMPLETED.value
    return False
