from enum import Enum

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class UserRole(str, Enum):
    PATIENT = "patient"
    ADMIN = "admin"


class AppointmentStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), nullable=True)
    phone = Column(String(32), unique=True, index=True, nullable=False)  # Normalized, "+"-prefixed
    email = Column(String(255), nullable=True)
    age = Column(String(10), nullable=True)
    role = Column(String(20), default=UserRole.PATIENT.value, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    appointments = relationship(
        "Appointment", back_populates="user", cascade="all, delete-orphan"
    )


class Appointment(Base):
    """A booked treatment, possibly spread across several sittings"""

    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Currently scheduled visit; overwritten when the next sitting is booked
    date = Column(String(32), nullable=True)
    time = Column(String(32), nullable=True)
    service = Column(String(255), nullable=True)

    # Status workflow: pending → confirmed → completed, cancelled from pending/confirmed
    status = Column(String(20), default=AppointmentStatus.PENDING.value, nullable=False, index=True)

    # Patient feedback
    rating = Column(Integer, default=0, nullable=False)  # 0 = not rated
    review = Column(Text, default="", nullable=False)
    is_visible = Column(Boolean, default=False, nullable=False)  # Published on the reviews page

    # Multi-sitting progress
    total_sittings = Column(Integer, default=1, nullable=False)
    current_sitting = Column(Integer, default=0, nullable=False)

    # Optimistic concurrency counter, bumped on every UPDATE
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="appointments")

    __mapper_args__ = {"version_id_col": version}
