"""Categorized errors raised by the lifecycle engines.

Callers handle the five categories (``NotFound``, ``ValidationFailed``,
``Conflict``, ``RuleViolation``, ``Forbidden``); the specific subclasses exist
so tests and logs can tell individual rules apart.
"""
from __future__ import annotations


class NexusError(Exception):
    """Base class for every failure the core reports."""

    category = "error"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message()
        super().__init__(self.message)

    def default_message(self) -> str:
        return "Request failed"


# --- Categories ---


class NotFound(NexusError):
    category = "not_found"


class ValidationFailed(NexusError):
    category = "validation_failed"


class Conflict(NexusError):
    category = "conflict"


class RuleViolation(NexusError):
    category = "rule_violation"


class Forbidden(NexusError):
    category = "forbidden"

    def default_message(self) -> str:
        return "Access forbidden"


# --- Not found ---


class TournamentNotFound(NotFound):
    def default_message(self) -> str:
        return "Tournament not found"


class RegistrationNotFound(NotFound):
    def default_message(self) -> str:
        return "Registration not found"


class TeamNotFound(NotFound):
    def default_message(self) -> str:
        return "Team not found"


class UserNotFound(NotFound):
    def default_message(self) -> str:
        return "User not found"


# --- Validation ---


class InvalidStatus(ValidationFailed):
    def __init__(self, status):
        self.status = status
        super().__init__(f"Invalid status: {status!r}")


class InvalidDates(ValidationFailed):
    pass


# --- Conflicts ---


class DuplicateRegistration(Conflict):
    def default_message(self) -> str:
        return "Already registered for this tournament"


class DuplicateTeam(Conflict):
    def default_message(self) -> str:
        return "Team name or tag is already in use"


class DuplicateUser(Conflict):
    def default_message(self) -> str:
        return "Username or email is already in use"


# --- Business rules ---


class FormatMismatch(RuleViolation):
    pass


class CapacityExceeded(RuleViolation):
    def default_message(self) -> str:
        return "Maximum number of participants reached"


class TournamentNotOpen(RuleViolation):
    def default_message(self) -> str:
        return "Registrations are only possible for OPEN tournaments"


class IllegalTransition(RuleViolation):
    def __init__(self, from_status, to_status, message: str | None = None):
        self.from_status = getattr(from_status, "value", from_status)
        self.to_status = getattr(to_status, "value", to_status)
        super().__init__(message or f"Cannot transition from {self.from_status} to {self.to_status}")


class TransitionGuardFailed(IllegalTransition):
    """Transition exists in the table but its guard condition does not hold."""

    def __init__(self, from_status, to_status, reason: str):
        self.reason = reason
        super().__init__(from_status, to_status, reason)


class TournamentLocked(RuleViolation):
    def __init__(self, status):
        self.status = getattr(status, "value", status)
        super().__init__(f"A {self.status} tournament cannot be modified")


class HasConfirmedRegistrations(RuleViolation):
    def default_message(self) -> str:
        return "Cannot delete a tournament with confirmed registrations"


class CannotDeleteConfirmed(RuleViolation):
    def default_message(self) -> str:
        return "Cannot delete a CONFIRMED registration; change its status to WITHDRAWN instead"


class TeamHasRegistrations(RuleViolation):
    def default_message(self) -> str:
        return "Cannot delete a team that has registrations"


class CannotRemoveSelf(RuleViolation):
    def default_message(self) -> str:
        return "Cannot delete your own account"


class UserInUse(RuleViolation):
    def default_message(self) -> str:
        return "User still organizes tournaments, captains teams or holds registrations"


# --- Authorization ---


class NotCaptain(Forbidden):
    def default_message(self) -> str:
        return "Only the team captain can do this"
