"""Registration eligibility rules. Pure functions: each returns None or raises."""
from __future__ import annotations

from typing import Iterable, Optional

from nexus.errors import CapacityExceeded, DuplicateRegistration, FormatMismatch, TournamentNotOpen
from nexus.models import Registration, TournamentFormat, TournamentStatus


def format_compatible(fmt: TournamentFormat, player_id: Optional[int], team_id: Optional[int]) -> None:
    """SOLO takes a player and no team; TEAM takes a team and no player."""
    if fmt == TournamentFormat.SOLO:
        if player_id is None or team_id is not None:
            raise FormatMismatch("A SOLO tournament only accepts individual players")
    elif fmt == TournamentFormat.TEAM:
        if team_id is None or player_id is not None:
            raise FormatMismatch("A TEAM tournament only accepts teams")
    else:
        raise FormatMismatch(f"Unknown tournament format: {fmt!r}")


def capacity_available(confirmed_count: int, max_participants: int) -> None:
    """Only CONFIRMED registrations count; the PENDING queue is unbounded."""
    if confirmed_count >= max_participants:
        raise CapacityExceeded()


def not_duplicate(
    existing: Iterable[Registration],
    player_id: Optional[int],
    team_id: Optional[int],
) -> None:
    """No registration of any status may already exist for the same player or team."""
    for reg in existing:
        if player_id is not None and reg.player_id == player_id:
            raise DuplicateRegistration()
        if team_id is not None and reg.team_id == team_id:
            raise DuplicateRegistration()


def tournament_open_for_registration(status: TournamentStatus) -> None:
    if status != TournamentStatus.OPEN:
        raise TournamentNotOpen()
