"""API routes for tournaments and their registrations."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from pydantic import BaseModel, ConfigDict, Field

import config
from nexus.models import RegistrationStatus, TournamentFormat, TournamentStatus
from nexus.permissions import Caller
from nexus.schemas import RegistrationCreate, TournamentCreate, TournamentFilter, TournamentUpdate
from nexus.services import registrations as registration_service
from nexus.services import tournaments as tournament_service
from nexus.store import Store
from web.api.utils import get_store
from web.auth import require_caller

router = APIRouter(prefix="/api", tags=["tournaments"])


# --- Pydantic schemas ---


class TournamentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    game: str
    format: TournamentFormat
    max_participants: int
    prize_pool: float
    start_date: datetime
    end_date: Optional[datetime] = None
    status: TournamentStatus
    organizer_id: int
    created_at: datetime


class RegistrationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tournament_id: int
    player_id: Optional[int] = None
    team_id: Optional[int] = None
    status: RegistrationStatus
    confirmed_at: Optional[datetime] = None
    created_at: datetime


class StatusChange(BaseModel):
    status: str  # validated by the core so unknown values map to InvalidStatus


class RegistrationRequest(BaseModel):
    player_id: Optional[int] = Field(default=None, gt=0)
    team_id: Optional[int] = Field(default=None, gt=0)


# --- Tournaments ---


@router.get("/tournaments", response_model=list[TournamentResponse])
async def list_tournaments(
    status: Optional[TournamentStatus] = None,
    game: Optional[str] = None,
    format: Optional[TournamentFormat] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(config.DEFAULT_PAGE_SIZE, ge=1, le=config.MAX_PAGE_SIZE),
    store: Store = Depends(get_store),
):
    """List tournaments, filtered by status/game/format and paginated."""
    filters = TournamentFilter(status=status, game=game, format=format, page=page, limit=limit)
    return await tournament_service.list_tournaments(store, filters)


@router.get("/tournaments/{tournament_id}", response_model=TournamentResponse)
async def get_tournament(tournament_id: int, store: Store = Depends(get_store)):
    return await tournament_service.get_tournament(store, tournament_id)


@router.post("/tournaments", response_model=TournamentResponse)
async def create_tournament(
    body: TournamentCreate,
    caller: Caller = Depends(require_caller),
    store: Store = Depends(get_store),
):
    """Create a DRAFT tournament (organizer or admin)."""
    return await tournament_service.create_tournament(store, body, caller)


@router.put("/tournaments/{tournament_id}", response_model=TournamentResponse)
async def update_tournament(
    tournament_id: int,
    body: TournamentUpdate,
    caller: Caller = Depends(require_caller),
    store: Store = Depends(get_store),
):
    return await tournament_service.update_tournament(store, tournament_id, body, caller)


@router.delete("/tournaments/{tournament_id}")
async def delete_tournament(
    tournament_id: int,
    caller: Caller = Depends(require_caller),
    store: Store = Depends(get_store),
):
    """Delete a tournament without confirmed registrations."""
    await tournament_service.delete_tournament(store, tournament_id, caller)
    return {"ok": True}


@router.patch("/tournaments/{tournament_id}/status", response_model=TournamentResponse)
async def change_tournament_status(
    tournament_id: int,
    body: StatusChange,
    caller: Caller = Depends(require_caller),
    store: Store = Depends(get_store),
):
    """Move the tournament to a new status (DRAFT -> OPEN -> ONGOING -> COMPLETED, or CANCELLED)."""
    return await tournament_service.change_tournament_status(store, tournament_id, body.status, caller)


# --- Registrations ---


@router.post("/tournaments/{tournament_id}/register", response_model=RegistrationResponse)
async def register(
    body: RegistrationRequest,
    tournament_id: int = Path(..., gt=0),
    caller: Caller = Depends(require_caller),
    store: Store = Depends(get_store),
):
    """Register a player (SOLO) or a team (TEAM, captain only). Starts PENDING."""
    data = RegistrationCreate(tournament_id=tournament_id, player_id=body.player_id, team_id=body.team_id)
    return await registration_service.create_registration(store, data, caller)


@router.get("/tournaments/{tournament_id}/registrations", response_model=list[RegistrationResponse])
async def list_registrations(tournament_id: int, store: Store = Depends(get_store)):
    return await registration_service.list_registrations(store, tournament_id)


@router.patch(
    "/tournaments/{tournament_id}/registrations/{registration_id}/status",
    response_model=RegistrationResponse,
)
async def change_registration_status(
    tournament_id: int,
    registration_id: int,
    body: StatusChange,
    caller: Caller = Depends(require_caller),
    store: Store = Depends(get_store),
):
    """Set a registration's status (organizer or admin). CONFIRMED stamps confirmed_at once."""
    return await registration_service.change_registration_status(
        store, registration_id, body.status, caller, tournament_id=tournament_id
    )


@router.delete("/tournaments/{tournament_id}/registrations/{registration_id}")
async def delete_registration(
    tournament_id: int,
    registration_id: int,
    caller: Caller = Depends(require_caller),
    store: Store = Depends(get_store),
):
    """Cancel a registration. CONFIRMED registrations must be WITHDRAWN instead."""
    await registration_service.delete_registration(store, registration_id, tournament_id=tournament_id)
    return {"ok": True}
