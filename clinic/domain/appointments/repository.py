"""Appointment repository - Database operations for appointments"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, AppointmentStatus


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_appointment(db: Session, appointment_id: int, refresh: bool = False) -> Optional[Appointment]:
        """Get an appointment with its patient. `refresh` re-reads a row already in the session."""
        query = (
            db.query(Appointment)
            .options(joinedload(Appointment.user))
            .filter(Appointment.id == appointment_id)
        )
        if refresh:
            query = query.populate_existing()
        return query.first()

    @staticmethod
    def get_user_appointments(db: Session, user_id: int) -> list[Appointment]:
        """Get a patient's appointments, newest booking first"""
        return (
            db.query(Appointment)
            .filter(Appointment.user_id == user_id)
            .order_by(Appointment.created_at.desc(), Appointment.id.desc())
            .all()
        )

    @staticmethod
    def get_all_appointments(db: Session) -> list[Appointment]:
        """Get every appointment in schedule order"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.user))
            .order_by(Appointment.date.asc(), Appointment.time.asc())
            .all()
        )

    @staticmethod
    def get_published_reviews(db: Session) -> list[Appointment]:
        """Get completed appointments whose feedback is published"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.user))
            .filter(
                Appointment.is_visible.is_(True),
                Appointment.status == AppointmentStatus.COMPLETED.value,
            )
            .order_by(Appointment.updated_at.desc(), Appointment.id.desc())
            .all()
        )

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def save(db: Session, appointment: Appointment) -> Appointment:
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()
