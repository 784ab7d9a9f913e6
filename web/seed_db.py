#!/usr/bin/env python3
"""
Reset the database and load demo data: an admin, an organizer and an OPEN
TEAM tournament. Run from project root: python web/seed_db.py
"""
import asyncio
import logging
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import config
from nexus.models import Role, Tournament, TournamentFormat, TournamentStatus, User, utcnow
from nexus.models.base import drop_db, engine, init_db, make_session_factory
from nexus.store import Store
from web.auth import hash_password

logger = logging.getLogger("nexus.seed")


async def seed(bind=None) -> dict:
    """Drop and recreate every table, then insert the demo rows. Returns their ids."""
    bind = bind or engine
    logger.info("Resetting database")
    await drop_db(bind)
    await init_db(bind)

    password_hash = hash_password(config.SEED_PASSWORD)
    async with make_session_factory(bind)() as session:
        store = Store(session)
        async with store.transaction():
            admin = User(
                username="admin_esport", email="admin@esport.com", password_hash=password_hash, role=Role.ADMIN
            )
            organizer = User(
                username="organizer_pro", email="org@esport.com", password_hash=password_hash, role=Role.ORGANIZER
            )
            await store.add(admin)
            await store.add(organizer)
            logger.info("Created users %s and %s", admin.username, organizer.username)

            tournament = Tournament(
                name="Masters Valorant",
                game="Valorant",
                format=TournamentFormat.TEAM,
                max_participants=16,
                prize_pool=Decimal("5000"),
                start_date=utcnow() + timedelta(days=30),
                status=TournamentStatus.OPEN,
                organizer_id=organizer.id,
            )
            await store.add(tournament)
            logger.info("Created tournament %s (%s)", tournament.id, tournament.name)
    return {"admin": admin.id, "organizer": organizer.id, "tournament": tournament.id}


async def main():
    await seed()
    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    asyncio.run(main())
