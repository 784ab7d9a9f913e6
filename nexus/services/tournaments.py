"""Tournament lifecycle: creation, edits, deletion and the status state machine."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from nexus.errors import (
    HasConfirmedRegistrations,
    IllegalTransition,
    InvalidDates,
    InvalidStatus,
    TournamentLocked,
    TournamentNotFound,
    TransitionGuardFailed,
    ValidationFailed,
)
from nexus.models import RegistrationStatus, Tournament, TournamentStatus, utcnow
from nexus.permissions import Caller, Operation, require
from nexus.schemas import TournamentCreate, TournamentFilter, TournamentUpdate
from nexus.store import Store

logger = logging.getLogger("nexus.tournaments")

MIN_CONFIRMED_TO_START = 2


@dataclass
class TransitionContext:
    tournament: Tournament
    caller: Caller
    confirmed_count: int
    now: datetime


def _start_in_future(ctx: TransitionContext) -> None:
    if ctx.tournament.start_date <= ctx.now:
        raise TransitionGuardFailed(
            ctx.tournament.status,
            TournamentStatus.OPEN,
            "Start date must be in the future to open the tournament",
        )


def _enough_confirmed(ctx: TransitionContext) -> None:
    if ctx.confirmed_count < MIN_CONFIRMED_TO_START:
        raise TransitionGuardFailed(
            ctx.tournament.status,
            TournamentStatus.ONGOING,
            f"At least {MIN_CONFIRMED_TO_START} confirmed participants are required to start",
        )


def _admin_only(ctx: TransitionContext) -> None:
    require(Operation.TOURNAMENT_COMPLETE, ctx.caller)


def _organizer_or_admin(ctx: TransitionContext) -> None:
    require(Operation.TOURNAMENT_CANCEL, ctx.caller, ctx.tournament.organizer_id)


@dataclass(frozen=True)
class Transition:
    from_status: TournamentStatus
    to_status: TournamentStatus
    guard: Callable[[TransitionContext], None]


TRANSITIONS = [
    Transition(TournamentStatus.DRAFT, TournamentStatus.OPEN, _start_in_future),
    Transition(TournamentStatus.OPEN, TournamentStatus.ONGOING, _enough_confirmed),
    Transition(TournamentStatus.ONGOING, TournamentStatus.COMPLETED, _admin_only),
    Transition(TournamentStatus.DRAFT, TournamentStatus.CANCELLED, _organizer_or_admin),
    Transition(TournamentStatus.OPEN, TournamentStatus.CANCELLED, _organizer_or_admin),
    Transition(TournamentStatus.ONGOING, TournamentStatus.CANCELLED, _organizer_or_admin),
]

_TRANSITION_TABLE = {(t.from_status, t.to_status): t for t in TRANSITIONS}


def find_transition(from_status: TournamentStatus, to_status: TournamentStatus) -> Transition:
    """Return the table entry for this pair, or raise IllegalTransition."""
    transition = _TRANSITION_TABLE.get((from_status, to_status))
    if transition is None:
        raise IllegalTransition(from_status, to_status)
    return transition


def _parse_status(value) -> TournamentStatus:
    try:
        return TournamentStatus(value)
    except ValueError:
        raise InvalidStatus(value) from None


async def _load(store: Store, tournament_id: int, *, for_update: bool = False) -> Tournament:
    tournament = await store.get_tournament(tournament_id, for_update=for_update)
    if tournament is None:
        raise TournamentNotFound()
    return tournament


async def get_tournament(store: Store, tournament_id: int) -> Tournament:
    return await _load(store, tournament_id)


async def list_tournaments(store: Store, filters: TournamentFilter) -> Sequence[Tournament]:
    return await store.list_tournaments(
        status=filters.status,
        game=filters.game,
        format=filters.format,
        offset=filters.offset,
        limit=filters.limit,
    )


async def create_tournament(store: Store, data: TournamentCreate, caller: Caller) -> Tournament:
    """Create a DRAFT tournament owned by the caller."""
    require(Operation.TOURNAMENT_CREATE, caller)
    if data.start_date <= utcnow():
        raise InvalidDates("Start date must be in the future")
    async with store.transaction():
        tournament = Tournament(
            **data.model_dump(),
            organizer_id=caller.caller_id,
            status=TournamentStatus.DRAFT,
        )
        await store.add(tournament)
    logger.info("Tournament %s created by user %s", tournament.id, caller.caller_id)
    return tournament


async def update_tournament(
    store: Store,
    tournament_id: int,
    data: TournamentUpdate,
    caller: Caller,
) -> Tournament:
    """Edit a tournament that is not COMPLETED or CANCELLED."""
    require(Operation.TOURNAMENT_UPDATE, caller)
    changes = data.model_dump(exclude_unset=True)
    async with store.transaction():
        tournament = await _load(store, tournament_id, for_update=True)
        if tournament.is_terminal:
            raise TournamentLocked(tournament.status)

        now = utcnow()
        start_date = changes.get("start_date") or tournament.start_date
        end_date = changes["end_date"] if "end_date" in changes else tournament.end_date
        if "start_date" in changes and changes["start_date"] is not None and changes["start_date"] <= now:
            raise InvalidDates("Start date must be in the future")
        if end_date is not None and end_date <= start_date:
            raise InvalidDates("End date must be after start date")

        if changes.get("max_participants") is not None:
            confirmed = await store.count_registrations(tournament.id, RegistrationStatus.CONFIRMED)
            if changes["max_participants"] < confirmed:
                raise ValidationFailed(
                    f"max_participants cannot be lower than the {confirmed} confirmed registrations"
                )

        for key, value in changes.items():
            if value is None and key != "end_date":
                continue
            setattr(tournament, key, value)
        await store.flush()
    logger.info("Tournament %s updated by user %s: %s", tournament.id, caller.caller_id, sorted(changes))
    return tournament


async def delete_tournament(store: Store, tournament_id: int, caller: Caller) -> None:
    """Delete a tournament that has no CONFIRMED registrations, whatever its status."""
    require(Operation.TOURNAMENT_DELETE, caller)
    async with store.transaction():
        tournament = await _load(store, tournament_id, for_update=True)
        confirmed = await store.count_registrations(tournament.id, RegistrationStatus.CONFIRMED)
        if confirmed > 0:
            raise HasConfirmedRegistrations()
        await store.delete(tournament)
    logger.info("Tournament %s deleted by user %s", tournament_id, caller.caller_id)


async def change_tournament_status(
    store: Store,
    tournament_id: int,
    new_status,
    caller: Caller,
    now: Optional[datetime] = None,
) -> Tournament:
    """Move a tournament along the state machine, enforcing each transition's guard."""
    target = _parse_status(new_status)
    async with store.transaction():
        tournament = await _load(store, tournament_id, for_update=True)
        current = tournament.status
        transition = find_transition(current, target)
        confirmed = await store.count_registrations(tournament.id, RegistrationStatus.CONFIRMED)
        transition.guard(
            TransitionContext(
                tournament=tournament,
                caller=caller,
                confirmed_count=confirmed,
                now=now or utcnow(),
            )
        )
        tournament.status = target
        await store.flush()
    logger.info(
        "Tournament %s: %s -> %s by user %s", tournament.id, current.value, target.value, caller.caller_id
    )
    return tournament
