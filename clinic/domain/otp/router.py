"""OTP router - FastAPI endpoints for phone verification"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ...exceptions import ChannelFailure
from ...services.sms_service import NotificationChannel, get_notification_channel
from .schemas import OTPResponse, SendOTPRequest, VerifyOTPRequest
from .service import OtpService
from .store import get_otp_store

logger = logging.getLogger(__name__)

router = APIRouter(tags=["OTP"])


def get_otp_service(
    channel: NotificationChannel = Depends(get_notification_channel),
) -> OtpService:
    """Dependency injection for OtpService"""
    return OtpService(get_otp_store(), channel)


@router.post("/send-otp", response_model=OTPResponse)
async def send_otp(data: SendOTPRequest, service: OtpService = Depends(get_otp_service)):
    """Issue a code for the phone and text it"""
    try:
        await service.issue(data.phone, data.name)
    except ChannelFailure as e:
        logger.error(f"❌ Failed to send OTP SMS to {data.phone}: {e.detail}")
        return JSONResponse(status_code=500, content={"success": False, "message": "Failed to send SMS"})

    return OTPResponse(success=True, message="OTP Sent")


@router.post("/verify-otp", response_model=OTPResponse)
async def verify_otp(data: VerifyOTPRequest, service: OtpService = Depends(get_otp_service)):
    """Check a phone + code claim. Rejections surface as 400 via the InvalidClaimError handler."""
    service.verify(data.phone, data.otp)
    return OTPResponse(success=True, message="Verification Successful")
