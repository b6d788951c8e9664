"""Appointment service - Booking and lifecycle transitions"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from ...exceptions import ConflictError, NotFoundError
from ...models import Appointment, AppointmentStatus
from ...services.notification_service import NotificationService
from ...services.sms_service import (
    appointment_cancelled_message,
    appointment_confirmed_message,
    sitting_done_message,
    treatment_completed_message,
)
from ...shared.locks import KeyedLocks
from ..users.repository import UserRepository
from . import lifecycle
from .lifecycle import Transition
from .repository import AppointmentRepository
from .schemas import AppointmentCreate

logger = logging.getLogger(__name__)

# Serializes read-modify-write on the same appointment within this process.
# The version column catches writers in other processes.
appointment_locks = KeyedLocks()


@dataclass
class TransitionResult:
    appointment: Appointment
    message: str
    notified: bool


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(
        self,
        db: Session,
        notifier: NotificationService,
        locks: KeyedLocks = appointment_locks,
    ):
        self.db = db
        self.notifier = notifier
        self.locks = locks
        self.repo = AppointmentRepository()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_appointment(self, appointment_id: int) -> Appointment:
        appointment = self.repo.get_appointment(self.db, appointment_id)
        if not appointment:
            raise NotFoundError("Appointment not found")
        return appointment

    def list_for_user(self, user_id: int) -> list[Appointment]:
        return self.repo.get_user_appointments(self.db, user_id)

    def list_all(self) -> list[Appointment]:
        return self.repo.get_all_appointments(self.db)

    def list_reviews(self) -> list[Appointment]:
        return self.repo.get_published_reviews(self.db)

    # ------------------------------------------------------------------
    # Booking and feedback
    # ------------------------------------------------------------------

    def book(self, data: AppointmentCreate) -> Appointment:
        if not UserRepository.get_user_by_id(self.db, data.userId):
            raise NotFoundError("User not found")

        appointment = self.repo.create_appointment(
            self.db,
            user_id=data.userId,
            date=data.date,
            time=data.time,
            service=data.service,
            total_sittings=data.totalSittings,
            current_sitting=0,
            status=AppointmentStatus.PENDING.value,
        )
        logger.info(
            f"📅 Appointment {appointment.id} booked for user {data.userId}: "
            f"{data.service} on {data.date} ({data.totalSittings} sitting(s))"
        )
        return appointment

    def submit_feedback(self, appointment_id: int, rating: int, review: str) -> Appointment:
        return self._update(appointment_id, lambda a: _set_feedback(a, rating, review))

    def set_feedback_visibility(self, appointment_id: int, is_visible: bool) -> Appointment:
        return self._update(appointment_id, lambda a: setattr(a, "is_visible", is_visible))

    def delete(self, appointment_id: int) -> None:
        """Remove an appointment regardless of its status"""
        with self.locks.hold(appointment_id):
            appointment = self.get_appointment(appointment_id)
            self.repo.delete_appointment(self.db, appointment)
        logger.info(f"🗑️ Appointment {appointment_id} deleted")

    # ------------------------------------------------------------------
    # Lifecycle transitions
    # ------------------------------------------------------------------

    async def accept(self, appointment_id: int, time: str) -> TransitionResult:
        appointment = self._transition(
            appointment_id, Transition.ACCEPT, lambda a: lifecycle.accept(a, time)
        )
        user = appointment.user
        body = appointment_confirmed_message(
            user.username if user else None, appointment.service, appointment.date, appointment.time
        )
        notified = await self._notify(appointment, body, "appointment_confirmation")
        return TransitionResult(
            appointment, "Confirmed & SMS Sent" if notified else "Confirmed (SMS Failed)", notified
        )

    async def decline(self, appointment_id: int) -> TransitionResult:
        appointment = self._transition(appointment_id, Transition.DECLINE, lifecycle.decline)
        body = appointment_cancelled_message(appointment.date)
        notified = await self._notify(appointment, body, "appointment_cancellation")
        return TransitionResult(
            appointment, "Cancelled & SMS Sent" if notified else "Cancelled (SMS Failed)", notified
        )

    async def complete_sitting(
        self,
        appointment_id: int,
        next_date: Optional[str],
        next_time: Optional[str],
        expected_sitting: Optional[int] = None,
    ) -> TransitionResult:
        outcome = {}

        def _advance(appointment: Appointment) -> None:
            lifecycle.check_expected_sitting(appointment, expected_sitting)
            outcome["continues"] = lifecycle.complete_sitting(appointment, next_date, next_time)

        appointment = self._transition(appointment_id, Transition.COMPLETE_SITTING, _advance)

        if outcome["continues"]:
            body = sitting_done_message(
                appointment.current_sitting, appointment.service, next_date, next_time
            )
            notified = await self._notify(appointment, body, "sitting_completed")
            message = "Sitting Updated & SMS Sent" if notified else "Sitting Updated (SMS Failed)"
        else:
            body = treatment_completed_message(appointment.service)
            notified = await self._notify(appointment, body, "treatment_completed")
            message = (
                "Treatment Completed & Final SMS Sent"
                if notified
                else "Treatment Completed (SMS Failed)"
            )

        return TransitionResult(appointment, message, notified)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _transition(
        self, appointment_id: int, transition: Transition, mutate: Callable[[Appointment], None]
    ) -> Appointment:
        """Load, check the transition table, mutate and commit under the appointment's lock"""
        with self.locks.hold(appointment_id):
            appointment = self.repo.get_appointment(self.db, appointment_id, refresh=True)
            if not appointment:
                raise NotFoundError("Appointment not found")

            lifecycle.ensure_transition(appointment.status, transition)
            mutate(appointment)
            appointment = self._save(appointment)

        logger.info(
            f"🔄 Appointment {appointment.id} {transition.value}: status={appointment.status}, "
            f"sitting={appointment.current_sitting}/{appointment.total_sittings}"
        )
        return appointment

    def _update(self, appointment_id: int, mutate: Callable[[Appointment], None]) -> Appointment:
        with self.locks.hold(appointment_id):
            appointment = self.repo.get_appointment(self.db, appointment_id, refresh=True)
            if not appointment:
                raise NotFoundError("Appointment not found")
            mutate(appointment)
            return self._save(appointment)

    def _save(self, appointment: Appointment) -> Appointment:
        appointment_id = appointment.id
        try:
            return self.repo.save(self.db, appointment)
        except StaleDataError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Concurrent update detected on appointment {appointment_id}")
            raise ConflictError("Appointment was modified by another request, please retry") from e

    async def _notify(self, appointment: Appointment, body: str, message_type: str) -> bool:
        to_phone = appointment.user.phone if appointment.user else None
        return await self.notifier.deliver(
            to_phone,
            body,
            message_type,
            entity_type="Appointment",
            entity_id=appointment.id,
        )


def _set_feedback(appointment: Appointment, rating: int, review: str) -> None:
    appointment.rating = rating
    appointment.review = review or ""
