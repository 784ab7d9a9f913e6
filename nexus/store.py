"""Entity store adapter: typed reads and writes over one AsyncSession. No business logic."""
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from nexus.models import (
    Registration,
    RegistrationStatus,
    Team,
    Tournament,
    TournamentFormat,
    TournamentStatus,
    User,
)


class Store:
    """Store capability handed to every lifecycle operation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    @asynccontextmanager
    async def transaction(self):
        """Commit on success, roll back on any error."""
        try:
            yield self
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

    async def add(self, entity) -> None:
        """Stage an insert and flush it so constraint violations surface here."""
        self.session.add(entity)
        await self.session.flush()

    async def flush(self) -> None:
        await self.session.flush()

    async def delete(self, entity) -> None:
        await self.session.delete(entity)
        await self.session.flush()

    async def refresh(self, entity) -> None:
        await self.session.refresh(entity)

    # --- Tournaments ---

    async def get_tournament(self, tournament_id: int, *, for_update: bool = False) -> Optional[Tournament]:
        stmt = select(Tournament).where(Tournament.id == tournament_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_tournaments(
        self,
        *,
        status: Optional[TournamentStatus] = None,
        game: Optional[str] = None,
        format: Optional[TournamentFormat] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Sequence[Tournament]:
        stmt = select(Tournament)
        if status is not None:
            stmt = stmt.where(Tournament.status == status)
        if game is not None:
            stmt = stmt.where(Tournament.game == game)
        if format is not None:
            stmt = stmt.where(Tournament.format == format)
        stmt = stmt.order_by(Tournament.start_date, Tournament.id).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    # --- Registrations ---

    async def get_registration(self, registration_id: int) -> Optional[Registration]:
        return await self.session.get(Registration, registration_id)

    async def list_registrations(self, tournament_id: int) -> Sequence[Registration]:
        result = await self.session.execute(
            select(Registration)
            .where(Registration.tournament_id == tournament_id)
            .order_by(Registration.id)
        )
        return result.scalars().all()

    async def find_registrations_for(
        self,
        tournament_id: int,
        player_id: Optional[int],
        team_id: Optional[int],
    ) -> Sequence[Registration]:
        """Registrations of any status held by this player or team in the tournament."""
        clauses = []
        if player_id is not None:
            clauses.append(Registration.player_id == player_id)
        if team_id is not None:
            clauses.append(Registration.team_id == team_id)
        if not clauses:
            return []
        result = await self.session.execute(
            select(Registration).where(Registration.tournament_id == tournament_id, or_(*clauses))
        )
        return result.scalars().all()

    async def count_registrations(
        self,
        tournament_id: int,
        status: Optional[RegistrationStatus] = None,
    ) -> int:
        stmt = select(func.count(Registration.id)).where(Registration.tournament_id == tournament_id)
        if status is not None:
            stmt = stmt.where(Registration.status == status)
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def confirm_registration(
        self,
        registration: Registration,
        capacity: int,
        confirmed_at: datetime,
    ) -> bool:
        """Set CONFIRMED only if the tournament still has a free confirmed slot.

        Count and write happen in one UPDATE statement. Returns False when no
        row was written because the tournament is full.
        """
        confirmed = (
            select(func.count(Registration.id))
            .where(
                Registration.tournament_id == registration.tournament_id,
                Registration.status == RegistrationStatus.CONFIRMED,
            )
            .scalar_subquery()
        )
        result = await self.session.execute(
            update(Registration)
            .where(Registration.id == registration.id, confirmed < capacity)
            .values(status=RegistrationStatus.CONFIRMED, confirmed_at=confirmed_at)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            return False
        await self.session.refresh(registration)
        return True

    # --- Teams ---

    async def get_team(self, team_id: int) -> Optional[Team]:
        return await self.session.get(Team, team_id)

    async def list_teams(self) -> Sequence[Team]:
        result = await self.session.execute(select(Team).order_by(Team.name))
        return result.scalars().all()

    async def find_team_by_name_or_tag(
        self,
        name: Optional[str],
        tag: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> Optional[Team]:
        clauses = []
        if name is not None:
            clauses.append(Team.name == name)
        if tag is not None:
            clauses.append(Team.tag == tag)
        if not clauses:
            return None
        stmt = select(Team).where(or_(*clauses))
        if exclude_id is not None:
            stmt = stmt.where(Team.id != exclude_id)
        result = await self.session.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def count_team_registrations(self, team_id: int) -> int:
        result = await self.session.execute(
            select(func.count(Registration.id)).where(Registration.team_id == team_id)
        )
        return result.scalar_one()

    # --- Users ---

    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.session.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def find_user_by_username_or_email(self, username: str, email: str) -> Optional[User]:
        result = await self.session.execute(
            select(User).where(or_(User.username == username, User.email == email)).limit(1)
        )
        return result.scalar_one_or_none()

    async def list_users(self) -> Sequence[User]:
        result = await self.session.execute(select(User).order_by(User.username))
        return result.scalars().all()

    async def user_has_dependents(self, user_id: int) -> bool:
        """True if the user organizes a tournament, captains a team or holds a registration."""
        for stmt in (
            select(Tournament.id).where(Tournament.organizer_id == user_id),
            select(Team.id).where(Team.captain_id == user_id),
            select(Registration.id).where(Registration.player_id == user_id),
        ):
            result = await self.session.execute(stmt.limit(1))
            if result.first() is not None:
                return True
        return False
