"""Authorization gate: who may perform which operation on which resource."""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional

from nexus.errors import Forbidden
from nexus.models import Role


@dataclass(frozen=True)
class Caller:
    """Identity resolved by the identity provider for one request."""

    caller_id: int
    role: Role


class Operation(str, enum.Enum):
    TOURNAMENT_CREATE = "tournament.create"
    TOURNAMENT_UPDATE = "tournament.update"
    TOURNAMENT_DELETE = "tournament.delete"
    TOURNAMENT_CANCEL = "tournament.cancel"
    TOURNAMENT_COMPLETE = "tournament.complete"
    REGISTRATION_STATUS = "registration.status"
    TEAM_UPDATE = "team.update"
    TEAM_DELETE = "team.delete"
    USER_LIST = "user.list"
    USER_REMOVE = "user.remove"


_STAFF = frozenset({Role.ORGANIZER, Role.ADMIN})

_DENIAL_MESSAGES = {
    Operation.TOURNAMENT_CREATE: "Organizer or admin access required",
    Operation.TOURNAMENT_UPDATE: "Organizer or admin access required",
    Operation.TOURNAMENT_DELETE: "Organizer or admin access required",
    Operation.TOURNAMENT_CANCEL: "Only the organizer or an admin can cancel this tournament",
    Operation.TOURNAMENT_COMPLETE: "Only an admin can mark a tournament as completed",
    Operation.REGISTRATION_STATUS: "Organizer or admin access required",
    Operation.TEAM_UPDATE: "Only the team captain can modify this team",
    Operation.TEAM_DELETE: "Only the team captain can delete this team",
    Operation.USER_LIST: "Admin access required",
    Operation.USER_REMOVE: "Admin access required",
}


def allowed(
    operation: Operation,
    caller_role: Role,
    caller_id: int,
    resource_owner_id: Optional[int] = None,
) -> bool:
    """Return True if the caller may perform the operation.

    ``resource_owner_id`` is the tournament organizer, the team captain, or
    (for user removal) the id of the account being removed.
    """
    if operation in (
        Operation.TOURNAMENT_CREATE,
        Operation.TOURNAMENT_UPDATE,
        Operation.TOURNAMENT_DELETE,
        Operation.REGISTRATION_STATUS,
    ):
        return caller_role in _STAFF
    if operation == Operation.TOURNAMENT_CANCEL:
        return caller_role == Role.ADMIN or (
            resource_owner_id is not None and caller_id == resource_owner_id
        )
    if operation == Operation.TOURNAMENT_COMPLETE:
        return caller_role == Role.ADMIN
    if operation in (Operation.TEAM_UPDATE, Operation.TEAM_DELETE):
        return resource_owner_id is not None and caller_id == resource_owner_id
    if operation == Operation.USER_LIST:
        return caller_role == Role.ADMIN
    if operation == Operation.USER_REMOVE:
        return caller_role == Role.ADMIN and caller_id != resource_owner_id
    return False


def require(operation: Operation, caller: Caller, resource_owner_id: Optional[int] = None) -> None:
    """Raise Forbidden unless the caller may perform the operation."""
    if not allowed(operation, caller.role, caller.caller_id, resource_owner_id):
        raise Forbidden(_DENIAL_MESSAGES.get(operation))
