"""Input models for the lifecycle engines (field shape and format only)."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

import config
from nexus.models import Role, TournamentFormat, TournamentStatus

_USERNAME_RE = re.compile(r"^[a-zA-Z0-9_]+$")


def _to_naive_utc(v: Optional[datetime]) -> Optional[datetime]:
    """Store timestamps as naive UTC. Aware values are converted first."""
    if v is None or v.tzinfo is None:
        return v
    return v.astimezone(timezone.utc).replace(tzinfo=None)


# --- Tournaments ---


class TournamentCreate(BaseModel):
    name: str = Field(min_length=3, max_length=100)
    game: str = Field(min_length=1, max_length=100)
    format: TournamentFormat
    max_participants: int = Field(ge=2)
    prize_pool: Decimal = Field(default=Decimal("0"), ge=0)
    start_date: datetime
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v):
        return _to_naive_utc(v)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class TournamentUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=100)
    game: Optional[str] = Field(default=None, min_length=1, max_length=100)
    format: Optional[TournamentFormat] = None
    max_participants: Optional[int] = Field(default=None, ge=2)
    prize_pool: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v):
        return _to_naive_utc(v)

    @model_validator(mode="after")
    def end_after_start(self):
        if self.start_date and self.end_date and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class TournamentFilter(BaseModel):
    status: Optional[TournamentStatus] = None
    game: Optional[str] = None
    format: Optional[TournamentFormat] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


# --- Registrations ---


class RegistrationCreate(BaseModel):
    """Player/team exclusivity is an eligibility rule, not a shape check."""

    tournament_id: int = Field(gt=0)
    player_id: Optional[int] = Field(default=None, gt=0)
    team_id: Optional[int] = Field(default=None, gt=0)


# --- Teams ---


class TeamCreate(BaseModel):
    name: str = Field(min_length=3, max_length=50)
    tag: str = Field(min_length=3, max_length=5, pattern=r"^[A-Z0-9]+$")


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3, max_length=50)
    tag: Optional[str] = Field(default=None, min_length=3, max_length=5, pattern=r"^[A-Z0-9]+$")


# --- Users ---


class UserCreate(BaseModel):
    username: str = Field(min_length=3, max_length=20)
    email: EmailStr
    password: str = Field(min_length=8)
    role: Role = Role.PLAYER

    @field_validator("username")
    @classmethod
    def username_charset(cls, v: str) -> str:
        if not _USERNAME_RE.match(v):
            raise ValueError("Username may only contain letters, digits and underscores")
        return v

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        if not re.search(r"[A-Z]", v):
            raise ValueError("Password must contain an uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("Password must contain a lowercase letter")
        if not re.search(r"[0-9]", v):
            raise ValueError("Password must contain a digit")
        return v
