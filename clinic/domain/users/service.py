"""User service - Registration and role elevation"""

import logging
import secrets
from typing import Optional

from sqlalchemy.orm import Session

from ...config import ADMIN_REGISTRATION_SECRET
from ...models import User, UserRole
from ...shared.validators import normalize_phone
from .repository import UserRepository

logger = logging.getLogger(__name__)


def is_admin_secret(secret: Optional[str], expected: Optional[str] = ADMIN_REGISTRATION_SECRET) -> bool:
    if not secret or not expected:
        return False
    return secrets.compare_digest(secret.encode(), expected.encode())


class UserService:
    """Service layer for patient/admin accounts"""

    def __init__(self, db: Session, admin_secret: Optional[str] = ADMIN_REGISTRATION_SECRET):
        self.db = db
        self.repo = UserRepository()
        self.admin_secret = admin_secret

    def register(self, username: Optional[str], raw_phone: str, secret: Optional[str] = None) -> User:
        """
        Return the account for this phone, creating it if needed.
        A matching admin secret elevates the account; roles are never lowered.
        """
        phone = normalize_phone(raw_phone)
        grant_admin = is_admin_secret(secret, self.admin_secret)

        user = self.repo.get_user_by_phone(self.db, phone)
        if not user:
            role = UserRole.ADMIN.value if grant_admin else UserRole.PATIENT.value
            logger.info(f"👤 Registering new {role} for {phone}")
            return self.repo.create_user(self.db, username=username, phone=phone, role=role)

        if grant_admin and user.role != UserRole.ADMIN.value:
            logger.info(f"⬆️ Elevating user {user.id} to admin")
            return self.repo.update_user(self.db, user, role=UserRole.ADMIN.value)

        return user
