"""User domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

from ...shared.validators import normalize_phone


class RegisterRequest(BaseModel):
    """Schema for registering (or logging back in) with a verified phone"""

    username: Optional[str] = None
    phone: str
    secret: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v)


class UserResponse(BaseModel):
    id: int
    username: Optional[str]
    phone: str
    email: Optional[str] = None
    age: Optional[str] = None
    role: str
    createdAt: Optional[datetime] = None


class UserSummary(BaseModel):
    """Patient details embedded in appointment listings"""

    id: int
    username: Optional[str]
    phone: str
