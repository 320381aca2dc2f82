"""
Session token verification.

Tokens are issued elsewhere; this service only verifies them. A token
carries ``user_id`` and the user's ``jwt_secret`` at issue time, so
rotating the stored secret revokes every outstanding token.
"""

from __future__ import annotations

from typing import Optional

import jwt
import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from dashboard_api.core.config import get_settings
from dashboard_api.core.database import get_session
from dashboard_api.core.permissions import RequestUser
from dashboard_api.core.roles import UserRole, has_all_roles
from dashboard_api.models.user import User
from dashboard_api.repositories.users import UserRepository

log = structlog.get_logger()

bearer_scheme = HTTPBearer(auto_error=False)


def decode_jwt(token: str) -> dict:
    """Decode and verify a JWT. Raises jwt.PyJWTError on failure."""
    settings = get_settings()
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[settings.jwt_algorithm],
        leeway=settings.jwt_clock_tolerance_seconds,
    )


def to_request_user(user: User) -> RequestUser:
    return RequestUser(
        id=user.id,
        email=user.email,
        title=user.title,
        is_admin=has_all_roles(user.roles_mask, [UserRole.admin]),
    )


async def authenticate_token(token: str, users: UserRepository) -> Optional[RequestUser]:
    """Resolve a bearer token to its user, or ``None`` if it does not verify."""
    try:
        payload = decode_jwt(token)
    except jwt.PyJWTError as exc:
        log.info("auth.token_rejected", reason=str(exc))
        return None

    user_id = payload.get("user_id")
    if user_id is None:
        return None

    user = await users.get_user(int(user_id))
    if user is None or user.jwt_secret != payload.get("jwt_secret"):
        log.info("auth.token_rejected", reason="secret mismatch", user_id=user_id)
        return None
    return to_request_user(user)


async def get_request_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_session),
) -> Optional[RequestUser]:
    """FastAPI dependency; ``None`` means unauthenticated and is rejected by the guards."""
    if credentials is None:
        return None
    return await authenticate_token(credentials.credentials, UserRepository(session))
