"""User model for authentication and role-based access."""
from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nexus.models.base import Base, utcnow


class Role(str, enum.Enum):
    PLAYER = "PLAYER"
    ORGANIZER = "ORGANIZER"
    ADMIN = "ADMIN"


class User(Base):
    """User with role-based access."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(128), nullable=False)
    role: Mapped[Role] = mapped_column(
        Enum(Role, native_enum=False, length=16), nullable=False, default=Role.PLAYER
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)

    tournaments = relationship("Tournament", back_populates="organizer")
    captained_teams = relationship("Team", back_populates="captain")
    registrations = relationship("Registration", back_populates="player")
