"""OTP domain schemas - Pydantic models for validation"""

from typing import Optional, Union

from pydantic import BaseModel, field_validator

from ...shared.validators import normalize_phone


class SendOTPRequest(BaseModel):
    """Request a code for a phone number"""

    phone: str
    name: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v)


class VerifyOTPRequest(BaseModel):
    """Submit a phone + code claim"""

    phone: str
    otp: Union[str, int]

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        return normalize_phone(v)


class OTPResponse(BaseModel):
    success: bool
    message: str
