"""Auth API routes: register, login, current user, admin user management."""
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, EmailStr

import config
from nexus.models import Role, User
from nexus.permissions import Caller
from nexus.schemas import UserCreate
from nexus.services import users as user_service
from nexus.store import Store
from web.api.utils import get_store
from web.auth import create_access_token, hash_password, require_caller, require_user, verify_password

router = APIRouter(prefix="/api", tags=["auth"])


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    username: str
    role: Role


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role


def _login_response(user: User) -> LoginResponse:
    token = create_access_token(user.id, user.role.value)
    return LoginResponse(access_token=token, user_id=user.id, username=user.username, role=user.role)


async def _bootstrap_admin(store: Store) -> User:
    """Create the configured initial admin on first login."""
    data = UserCreate.model_construct(
        username=config.INITIAL_ADMIN_USERNAME,
        email=config.INITIAL_ADMIN_EMAIL,
        password=config.INITIAL_ADMIN_PASSWORD,
        role=Role.ADMIN,
    )
    return await user_service.create_user(store, data, hash_password(config.INITIAL_ADMIN_PASSWORD))


@router.post("/auth/register", response_model=UserResponse)
async def register(body: UserCreate, store: Store = Depends(get_store)):
    """Create a PLAYER or ORGANIZER account. Admins are bootstrapped from configuration."""
    if body.role == Role.ADMIN:
        raise HTTPException(400, "Cannot self-register as ADMIN")
    return await user_service.create_user(store, body, hash_password(body.password))


@router.post("/auth/login", response_model=LoginResponse)
async def login(body: LoginRequest, store: Store = Depends(get_store)):
    """Authenticate and return JWT."""
    user = await store.get_user_by_email(body.email)
    if not user:
        if (
            config.INITIAL_ADMIN_PASSWORD
            and body.email == config.INITIAL_ADMIN_EMAIL
            and body.password == config.INITIAL_ADMIN_PASSWORD
        ):
            user = await _bootstrap_admin(store)
            return _login_response(user)
        raise HTTPException(status_code=401, detail="Invalid email or password")
    if not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")
    return _login_response(user)


@router.get("/auth/me", response_model=UserResponse)
async def get_me(user: User = Depends(require_user)):
    """Get current authenticated user."""
    return user


@router.get("/users", response_model=list[UserResponse])
async def list_users(caller: Caller = Depends(require_caller), store: Store = Depends(get_store)):
    """List all users (admin only)."""
    return await user_service.list_users(store, caller)


@router.delete("/users/{user_id}")
async def delete_user(user_id: int, caller: Caller = Depends(require_caller), store: Store = Depends(get_store)):
    """Delete a user (admin only). Cannot delete self."""
    await user_service.remove_user(store, user_id, caller)
    return {"ok": True}
