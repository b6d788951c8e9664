"""Appointment router - FastAPI endpoints for booking and lifecycle transitions"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from ...models import Appointment
from ...services.notification_service import NotificationService
from ...services.sms_service import NotificationChannel, get_notification_channel
from ..users.schemas import UserSummary
from .schemas import (
    AcceptRequest,
    AppointmentCreate,
    AppointmentResponse,
    CompleteSittingRequest,
    FeedbackRequest,
    FeedbackVisibilityRequest,
    MessageResponse,
    TransitionResponse,
)
from .service import AppointmentService, TransitionResult

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Appointments"])


def get_appointment_service(
    db: Session = Depends(get_db),
    channel: NotificationChannel = Depends(get_notification_channel),
) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db, NotificationService(db, channel))


def to_response(appointment: Appointment, include_user: bool = False) -> AppointmentResponse:
    user = appointment.user if include_user else None
    return AppointmentResponse(
        id=appointment.id,
        userId=appointment.user_id,
        date=appointment.date,
        time=appointment.time,
        service=appointment.service,
        status=appointment.status,
        rating=appointment.rating,
        review=appointment.review,
        isVisible=appointment.is_visible,
        totalSittings=appointment.total_sittings,
        currentSitting=appointment.current_sitting,
        createdAt=appointment.created_at,
        updatedAt=appointment.updated_at,
        user=UserSummary(id=user.id, username=user.username, phone=user.phone) if user else None,
    )


def to_transition_response(result: TransitionResult) -> TransitionResponse:
    return TransitionResponse(message=result.message, appointment=to_response(result.appointment))


# ============================================================================
# BOOKING AND LISTINGS
# ============================================================================


@router.post("/book", response_model=AppointmentResponse)
async def book_appointment(
    data: AppointmentCreate,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book a new appointment (starts pending)"""
    return to_response(service.book(data))


@router.get("/my-appointments/{user_id}", response_model=list[AppointmentResponse])
async def get_my_appointments(
    user_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Get a patient's appointments, newest first"""
    return [to_response(a) for a in service.list_for_user(user_id)]


@router.get("/appointments", response_model=list[AppointmentResponse])
async def get_all_appointments(service: AppointmentService = Depends(get_appointment_service)):
    """Get every appointment with patient details, in schedule order"""
    return [to_response(a, include_user=True) for a in service.list_all()]


@router.get("/reviews", response_model=list[AppointmentResponse])
async def get_reviews(service: AppointmentService = Depends(get_appointment_service)):
    """Get published feedback for completed treatments"""
    return [to_response(a, include_user=True) for a in service.list_reviews()]


# ============================================================================
# LIFECYCLE TRANSITIONS
# ============================================================================


@router.put("/accept/{appointment_id}", response_model=TransitionResponse)
async def accept_appointment(
    appointment_id: int,
    data: AcceptRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Confirm an appointment at the given time"""
    result = await service.accept(appointment_id, data.time)
    return to_transition_response(result)


@router.put("/decline/{appointment_id}", response_model=TransitionResponse)
async def decline_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Cancel a pending or confirmed appointment"""
    result = await service.decline(appointment_id)
    return to_transition_response(result)


@router.put("/complete-sitting/{appointment_id}", response_model=TransitionResponse)
async def complete_sitting(
    appointment_id: int,
    data: CompleteSittingRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Record a finished sitting; schedules the next one or completes the treatment"""
    result = await service.complete_sitting(
        appointment_id, data.nextDate, data.nextTime, expected_sitting=data.expectedSitting
    )
    return to_transition_response(result)


@router.delete("/appointment/{appointment_id}", response_model=MessageResponse)
async def delete_appointment(
    appointment_id: int,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Delete an appointment"""
    service.delete(appointment_id)
    return MessageResponse(message="Deleted")


# ============================================================================
# FEEDBACK
# ============================================================================


@router.put("/feedback/{appointment_id}", response_model=MessageResponse)
async def submit_feedback(
    appointment_id: int,
    data: FeedbackRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Save the patient's rating and review"""
    service.submit_feedback(appointment_id, data.rating, data.review)
    return MessageResponse(message="Feedback Submitted")


@router.put("/feedback-visibility/{appointment_id}", response_model=MessageResponse)
async def set_feedback_visibility(
    appointment_id: int,
    data: FeedbackVisibilityRequest,
    service: AppointmentService = Depends(get_appointment_service),
):
    """Publish or hide feedback on the reviews page"""
    service.set_feedback_visibility(appointment_id, data.isVisible)
    return MessageResponse(message="Visibility Updated")
