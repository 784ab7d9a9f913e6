"""Shared API utilities."""

from nexus.models.base import async_session_factory
from nexus.store import Store


async def get_store():
    """Dependency yielding a Store bound to a fresh session for one request."""
    async with async_session_factory() as session:
        yield Store(session)
