from __future__ import annotations

import logging

from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from accounts_api.core.exceptions import ForbiddenError
from accounts_api.core.security import decode_jwt
from accounts_api.models.user import User
from accounts_api.schemas.pagination import as_uuid
from accounts_api.services.users import user_crud

_LOG = logging.getLogger("accounts_api.auth")


def bearer_token(authorization: str | None) -> str | None:
    value = str(authorization or "").strip()
    if not value:
        return None
    scheme, _, token = value.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise ForbiddenError("invalid jwt, expected 'Bearer <token>' authorization")
    return token.strip()


async def authenticate_jwt(db: AsyncSession, authorization: str | None) -> User | None:
    """Resolve an ``Authorization`` header to its user; ``None`` when the header is absent."""
    token = bearer_token(authorization)
    if token is None:
        return None
    try:
        payload = decode_jwt(token)
    except JWTError as exc:
        _LOG.info("rejected jwt: %s", exc)
        raise ForbiddenError(f"invalid jwt, {exc}") from exc
    try:
        user_id = as_uuid(payload.get("sub"))
    except (TypeError, ValueError) as exc:
        _LOG.info("rejected jwt: malformed sub claim")
        raise ForbiddenError("invalid jwt, 'sub' must be a user id") from exc
    return await user_crud.try_find_by_id(db, user_id)
