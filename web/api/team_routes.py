"""API routes for teams."""
from __future__ import annotations

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict

from nexus.permissions import Caller
from nexus.schemas import TeamCreate, TeamUpdate
from nexus.services import teams as team_service
from nexus.store import Store
from web.api.utils import get_store
from web.auth import require_caller

router = APIRouter(prefix="/api/teams", tags=["teams"])


class TeamResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    tag: str
    captain_id: int


@router.get("", response_model=list[TeamResponse])
async def list_teams(store: Store = Depends(get_store)):
    return await team_service.list_teams(store)


@router.get("/{team_id}", response_model=TeamResponse)
async def get_team(team_id: int, store: Store = Depends(get_store)):
    return await team_service.get_team(store, team_id)


@router.post("", response_model=TeamResponse)
async def create_team(
    body: TeamCreate,
    caller: Caller = Depends(require_caller),
    store: Store = Depends(get_store),
):
    """Create a team; the caller becomes its captain."""
    return await team_service.create_team(store, body, caller)


@router.put("/{team_id}", response_model=TeamResponse)
async def update_team(
    team_id: int,
    body: TeamUpdate,
    caller: Caller = Depends(require_caller),
    store: Store = Depends(get_store),
):
    return await team_service.update_team(store, team_id, body, caller)


@router.delete("/{team_id}")
async def delete_team(
    team_id: int,
    caller: Caller = Depends(require_caller),
    store: Store = Depends(get_store),
):
    """Delete a team with no registrations (captain only)."""
    await team_service.delete_team(store, team_id, caller)
    return {"ok": True}
