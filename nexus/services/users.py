"""User accounts: creation with uniqueness checks, admin listing and removal."""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy.exc import IntegrityError

from nexus.errors import CannotRemoveSelf, DuplicateUser, UserInUse, UserNotFound
from nexus.models import Role, User
from nexus.permissions import Caller, Operation, require
from nexus.schemas import UserCreate
from nexus.store import Store

logger = logging.getLogger("nexus.users")


async def get_user(store: Store, user_id: int) -> User:
    user = await store.get_user(user_id)
    if user is None:
        raise UserNotFound()
    return user


async def create_user(store: Store, data: UserCreate, password_hash: str) -> User:
    """Create an account. The credential arrives already hashed."""
    async with store.transaction():
        existing = await store.find_user_by_username_or_email(data.username, data.email)
        if existing is not None:
            if existing.email == data.email:
                raise DuplicateUser("Email is already in use")
            raise DuplicateUser("Username is already taken")
        user = User(
            username=data.username,
            email=data.email,
            password_hash=password_hash,
            role=data.role,
        )
        try:
            await store.add(user)
        except IntegrityError as e:
            logger.warning("User insert rejected by store (%s): %s", data.username, e.orig)
            raise DuplicateUser() from e
    logger.info("User %s (%s) created with role %s", user.id, user.username, user.role.value)
    return user


async def list_users(store: Store, caller: Caller) -> Sequence[User]:
    require(Operation.USER_LIST, caller)
    return await store.list_users()


async def remove_user(store: Store, user_id: int, caller: Caller) -> None:
    """Admin removal of another account."""
    if caller.role == Role.ADMIN and user_id == caller.caller_id:
        raise CannotRemoveSelf()
    require(Operation.USER_REMOVE, caller, user_id)
    async with store.transaction():
        user = await get_user(store, user_id)
        if await store.user_has_dependents(user.id):
            raise UserInUse()
        await store.delete(user)
    logger.info("User %s removed by admin %s", user_id, caller.caller_id)
