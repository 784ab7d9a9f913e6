"""Registration model - a player's or team's claim to a slot in a tournament."""
from __future__ import annotations

import enum
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Enum, ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from nexus.models.base import Base, utcnow


class RegistrationStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class Registration(Base):
    """Registration of exactly one player or one team for a tournament."""

    __tablename__ = "registrations"
    __table_args__ = (
        UniqueConstraint("tournament_id", "player_id", name="uq_registrations_tournament_player"),
        UniqueConstraint("tournament_id", "team_id", name="uq_registrations_tournament_team"),
        CheckConstraint(
            "(player_id IS NULL) <> (team_id IS NULL)",
            name="ck_registrations_player_xor_team",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tournament_id: Mapped[int] = mapped_column(ForeignKey("tournaments.id"), nullable=False, index=True)
    player_id: Mapped[Optional[int]] = mapped_column(ForeignKey("users.id"), nullable=True)
    team_id: Mapped[Optional[int]] = mapped_column(ForeignKey("teams.id"), nullable=True)
    status: Mapped[RegistrationStatus] = mapped_column(
        Enum(RegistrationStatus, native_enum=False, length=16),
        nullable=False,
        default=RegistrationStatus.PENDING,
    )
    confirmed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, onupdate=utcnow)

    tournament: Mapped["Tournament"] = relationship("Tournament", back_populates="registrations")
    player: Mapped[Optional["User"]] = relationship("User", back_populates="registrations")
    team: Mapped[Optional["Team"]] = relationship("Team", back_populates="registrations")
