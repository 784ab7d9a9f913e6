"""Tournament model."""
from __future__ import annotations

import enum
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nexus.models.base import Base, utcnow


class TournamentFormat(str, enum.Enum):
    SOLO = "SOLO"
    TEAM = "TEAM"


class TournamentStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    OPEN = "OPEN"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


TERMINAL_STATUSES = frozenset({TournamentStatus.COMPLETED, TournamentStatus.CANCELLED})


class Tournament(Base):
    """Competitive event with a capacity, a format and a status lifecycle."""

    __tablename__ = "tournaments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    game: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    format: Mapped[TournamentFormat] = mapped_column(
        Enum(TournamentFormat, native_enum=False, length=8), nullable=False, index=True
    )
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False)
    prize_pool: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    start_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    end_date: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    status: Mapped[TournamentStatus] = mapped_column(
        Enum(TournamentStatus, native_enum=False, length=16),
        nullable=False,
        default=TournamentStatus.DRAFT,
        index=True,
    )
    organizer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    organizer: Mapped["User"] = relationship("User", back_populates="tournaments")
    registrations = relationship(
        "Registration", back_populates="tournament", cascade="all, delete-orphan"
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES
