"""User lookups and session-secret rotation."""

from __future__ import annotations

import uuid
from typing import Optional

import sqlalchemy as sa
import structlog

from dashboard_api.models.user import User
from dashboard_api.repositories.base import Repository

log = structlog.get_logger()


class UserRepository(Repository):
    async def get_user(self, user_id: int) -> Optional[User]:
        return await self.get(User, user_id)

    async def rotate_user_secret(self, user_id: int) -> None:
        """Replace the user's token secret, invalidating every issued token."""
        await self.execute(
            sa.update(User)
            .where(User.id == user_id)
            .values(jwt_secret=str(uuid.uuid4()), updated_at=sa.func.now())
        )
        log.info("user.secret_rotated", user_id=user_id)
