"""Team management with captain ownership and global name/tag uniqueness."""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy.exc import IntegrityError

from nexus.errors import DuplicateTeam, TeamHasRegistrations, TeamNotFound
from nexus.models import Team
from nexus.permissions import Caller, Operation, require
from nexus.schemas import TeamCreate, TeamUpdate
from nexus.store import Store

logger = logging.getLogger("nexus.teams")


async def _load(store: Store, team_id: int) -> Team:
    team = await store.get_team(team_id)
    if team is None:
        raise TeamNotFound()
    return team


async def get_team(store: Store, team_id: int) -> Team:
    return await _load(store, team_id)


async def list_teams(store: Store) -> Sequence[Team]:
    return await store.list_teams()


async def create_team(store: Store, data: TeamCreate, caller: Caller) -> Team:
    """Create a team captained by the caller."""
    async with store.transaction():
        if await store.find_team_by_name_or_tag(data.name, data.tag):
            raise DuplicateTeam()
        team = Team(name=data.name, tag=data.tag, captain_id=caller.caller_id)
        try:
            await store.add(team)
        except IntegrityError as e:
            logger.warning("Team insert rejected by store (%s/%s): %s", data.name, data.tag, e.orig)
            raise DuplicateTeam() from e
    logger.info("Team %s [%s] created by user %s", team.id, team.tag, caller.caller_id)
    return team


async def update_team(store: Store, team_id: int, data: TeamUpdate, caller: Caller) -> Team:
    """Rename or retag a team. Captain only."""
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    async with store.transaction():
        team = await _load(store, team_id)
        require(Operation.TEAM_UPDATE, caller, team.captain_id)
        if changes and await store.find_team_by_name_or_tag(
            changes.get("name"), changes.get("tag"), exclude_id=team.id
        ):
            raise DuplicateTeam()
        for key, value in changes.items():
            setattr(team, key, value)
        try:
            await store.flush()
        except IntegrityError as e:
            logger.warning("Team %s update rejected by store: %s", team_id, e.orig)
            raise DuplicateTeam() from e
    logger.info("Team %s updated by user %s: %s", team.id, caller.caller_id, sorted(changes))
    return team


async def delete_team(store: Store, team_id: int, caller: Caller) -> None:
    """Delete a team that holds no registrations of any status. Captain only."""
    async with store.transaction():
        team = await _load(store, team_id)
        require(Operation.TEAM_DELETE, caller, team.captain_id)
        if await store.count_team_registrations(team.id) > 0:
            raise TeamHasRegistrations()
        await store.delete(team)
    logger.info("Team %s deleted by user %s", team_id, caller.caller_id)
