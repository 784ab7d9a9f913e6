"""Team model."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nexus.models.base import Base, utcnow


class Team(Base):
    """Team owned by its captain. Name and tag are globally unique."""

    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    tag: Mapped[str] = mapped_column(String(5), unique=True, nullable=False)
    captain_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    captain: Mapped["User"] = relationship("User", back_populates="captained_teams")
    registrations = relationship("Registration", back_populates="team")
