"""Users domain - patient and admin accounts"""

from .router import router

__all__ = ["router"]
