from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from accounts_api.core.exceptions import ConflictError
from accounts_api.core.security import create_jwt, hash_password, verify_password
from accounts_api.models.user import USER_FIELDS, User, UserRole
from accounts_api.schemas.auth import Credentials, NewUser
from accounts_api.services.paginate import Paginator, PrivateFilter
from accounts_api.services.try_crud import TryCrud

_LOG = logging.getLogger("accounts_api.users")

user_crud = TryCrud(User, "user")
user_paginator: Paginator[User] = Paginator(User, USER_FIELDS, aliases={"created_at": "init_date"})


def normalize_username(raw: str | None) -> str:
    return str(raw or "").strip()


async def get_user_by_username(db: AsyncSession, username: str) -> User | None:
    normalized = normalize_username(username)
    if not normalized:
        return None
    return (await db.scalars(select(User).where(User.username == normalized))).first()


async def create_user(db: AsyncSession, payload: NewUser, role: UserRole = UserRole.REGULAR) -> User:
    username = normalize_username(payload.username)
    user = User(username=username, password_hash=hash_password(payload.password), role=role.value)
    db.add(user)
    try:
        await db.commit()
    except IntegrityError as exc:
        await db.rollback()
        raise ConflictError(f"username '{username}' is already taken") from exc
    await db.refresh(user)
    _LOG.info("created user id=%s role=%s", user.id, user.role)
    return user


async def find_by_credentials(db: AsyncSession, credentials: Credentials) -> User | None:
    user = await get_user_by_username(db, credentials.username)
    if user is None or not verify_password(credentials.password, user.password_hash):
        return None
    return user


def make_jwt(user: User) -> str:
    return create_jwt({"sub": str(user.id), "role": user.role})


def visible_users_filter(viewer: User) -> PrivateFilter | None:
    """Guest accounts are listed to admins only."""
    if viewer.role == UserRole.ADMIN.value:
        return None
    return PrivateFilter.where(User.role != UserRole.GUEST.value)
