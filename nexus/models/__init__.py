"""Database models."""
from nexus.models.base import Base, init_db, utcnow
from nexus.models.user import Role, User
from nexus.models.tournament import Tournament, TournamentFormat, TournamentStatus
from nexus.models.team import Team
from nexus.models.registration import Registration, RegistrationStatus

__all__ = [
    "Base",
    "Role",
    "User",
    "Tournament",
    "TournamentFormat",
    "TournamentStatus",
    "Team",
    "Registration",
    "RegistrationStatus",
    "init_db",
    "utcnow",
]
