"""Appointment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import validate_rating
from ..users.schemas import UserSummary


class AppointmentCreate(BaseModel):
    """Schema for booking an appointment"""

    userId: int
    date: str
    time: Optional[str] = None
    service: str
    totalSittings: int = 1

    @field_validator("totalSittings")
    @classmethod
    def validate_total_sittings(cls, v: int) -> int:
        if v < 1:
            raise ValueError("totalSittings must be at least 1")
        return v


class AcceptRequest(BaseModel):
    """Confirm an appointment at the given time (stored verbatim)"""

    time: str


class CompleteSittingRequest(BaseModel):
    """Record a finished sitting and, if more remain, when the next one is"""

    nextDate: Optional[str] = None
    nextTime: Optional[str] = None
    # Sitting number being completed; a mismatch is rejected instead of advancing twice
    expectedSitting: Optional[int] = None


class FeedbackRequest(BaseModel):
    rating: int
    review: str = ""

    @field_validator("rating")
    @classmethod
    def check_rating(cls, v: int) -> int:
        return validate_rating(v)


class FeedbackVisibilityRequest(BaseModel):
    isVisible: bool


class AppointmentResponse(BaseModel):
    """Schema for appointment response"""

    id: int
    userId: int
    date: Optional[str]
    time: Optional[str]
    service: Optional[str]
    status: str
    rating: int
    review: str
    isVisible: bool
    totalSittings: int
    currentSitting: int
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None
    user: Optional[UserSummary] = None


class TransitionResponse(BaseModel):
    message: str
    appointment: AppointmentResponse


class MessageResponse(BaseModel):
    message: str
