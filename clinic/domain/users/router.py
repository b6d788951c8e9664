"""User router - FastAPI endpoints for registration"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...database import get_db
from .schemas import RegisterRequest, UserResponse
from .service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Users"])


def get_user_service(db: Session = Depends(get_db)) -> UserService:
    """Dependency injection for UserService"""
    return UserService(db)


@router.post("/register", response_model=UserResponse)
async def register(data: RegisterRequest, service: UserService = Depends(get_user_service)):
    """Create the account for a phone, or return the existing one"""
    user = service.register(data.username, data.phone, data.secret)
    return UserResponse(
        id=user.id,
        username=user.username,
        phone=user.phone,
        email=user.email,
        age=user.age,
        role=user.role,
        createdAt=user.created_at,
    )
