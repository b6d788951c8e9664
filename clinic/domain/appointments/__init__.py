"""Appointments domain - booking, sittings and status lifecycle"""

from .router import router

__all__ = ["router"]
