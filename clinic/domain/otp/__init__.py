"""OTP domain - phone verification codes"""

from .router import router

__all__ = ["router"]
