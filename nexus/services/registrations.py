"""Registration lifecycle: eligibility-checked creation, status changes and removal.

Creation and confirmation each run in one store transaction. The tournament
row is locked first, so the confirmed count read by the eligibility rules is
the one the write is based on; the unique constraints on
``(tournament_id, player_id)`` and ``(tournament_id, team_id)`` and the
conditional confirm UPDATE are the backstop when two requests still race.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

from sqlalchemy.exc import IntegrityError

from nexus import rules
from nexus.errors import (
    CannotDeleteConfirmed,
    CapacityExceeded,
    DuplicateRegistration,
    InvalidStatus,
    NotCaptain,
    RegistrationNotFound,
    TeamNotFound,
    TournamentNotFound,
    UserNotFound,
)
from nexus.models import Registration, RegistrationStatus, TournamentFormat, utcnow
from nexus.permissions import Caller, Operation, require
from nexus.schemas import RegistrationCreate
from nexus.store import Store

logger = logging.getLogger("nexus.registrations")


def _parse_status(value) -> RegistrationStatus:
    try:
        return RegistrationStatus(value)
    except ValueError:
        raise InvalidStatus(value) from None


async def _load(store: Store, registration_id: int, tournament_id: Optional[int] = None) -> Registration:
    registration = await store.get_registration(registration_id)
    if registration is None:
        raise RegistrationNotFound()
    if tournament_id is not None and registration.tournament_id != tournament_id:
        raise RegistrationNotFound()
    return registration


async def list_registrations(store: Store, tournament_id: int) -> Sequence[Registration]:
    if await store.get_tournament(tournament_id) is None:
        raise TournamentNotFound()
    return await store.list_registrations(tournament_id)


async def create_registration(store: Store, data: RegistrationCreate, caller: Caller) -> Registration:
    """Register a player (SOLO) or a team (TEAM) as PENDING."""
    player_id, team_id = data.player_id, data.team_id
    async with store.transaction():
        tournament = await store.get_tournament(data.tournament_id, for_update=True)
        if tournament is None:
            raise TournamentNotFound()
        confirmed = await store.count_registrations(tournament.id, RegistrationStatus.CONFIRMED)

        rules.tournament_open_for_registration(tournament.status)
        rules.format_compatible(tournament.format, player_id, team_id)

        if tournament.format == TournamentFormat.TEAM:
            team = await store.get_team(team_id)
            if team is None:
                raise TeamNotFound()
            if team.captain_id != caller.caller_id:
                raise NotCaptain("Only the team captain can register the team")
        elif await store.get_user(player_id) is None:
            raise UserNotFound("Player not found")

        rules.capacity_available(confirmed, tournament.max_participants)
        existing = await store.find_registrations_for(tournament.id, player_id, team_id)
        rules.not_duplicate(existing, player_id, team_id)

        registration = Registration(
            tournament_id=tournament.id,
            player_id=player_id,
            team_id=team_id,
            status=RegistrationStatus.PENDING,
        )
        try:
            await store.add(registration)
        except IntegrityError as e:
            logger.warning(
                "Registration insert rejected by store for tournament %s (player=%s team=%s): %s",
                tournament.id, player_id, team_id, e.orig,
            )
            raise DuplicateRegistration() from e
    logger.info(
        "Registration %s created for tournament %s (player=%s team=%s) by user %s",
        registration.id, registration.tournament_id, player_id, team_id, caller.caller_id,
    )
    return registration


async def change_registration_status(
    store: Store,
    registration_id: int,
    new_status,
    caller: Caller,
    tournament_id: Optional[int] = None,
) -> Registration:
    """Set a registration's status. Any of the four statuses is an accepted target.

    confirmed_at is stamped the first time the registration becomes CONFIRMED
    and never cleared afterwards. Entering CONFIRMED re-checks capacity.
    """
    require(Operation.REGISTRATION_STATUS, caller)
    async with store.transaction():
        registration = await _load(store, registration_id, tournament_id)
        target = _parse_status(new_status)
        previous = registration.status

        if target == RegistrationStatus.CONFIRMED and previous != RegistrationStatus.CONFIRMED:
            tournament = await store.get_tournament(registration.tournament_id, for_update=True)
            confirmed_at = registration.confirmed_at or utcnow()
            if not await store.confirm_registration(registration, tournament.max_participants, confirmed_at):
                raise CapacityExceeded()
        else:
            registration.status = target
            await store.flush()
    logger.info(
        "Registration %s: %s -> %s by user %s",
        registration.id, previous.value, target.value, caller.caller_id,
    )
    return registration


async def delete_registration(
    store: Store,
    registration_id: int,
    tournament_id: Optional[int] = None,
) -> None:
    """Delete a registration that is not CONFIRMED."""
    async with store.transaction():
        registration = await _load(store, registration_id, tournament_id)
        if registration.status == RegistrationStatus.CONFIRMED:
            raise CannotDeleteConfirmed()
        await store.delete(registration)
    logger.info("Registration %s deleted", registration_id)
