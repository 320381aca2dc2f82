"""
Shared plumbing for SQL repositories.

An ``AsyncSession`` does not allow concurrent statements, but services
fan independent reads out with ``asyncio.gather``. Every repository
bound to the same session therefore runs its statements under one
per-session lock; work on different sessions (e.g. the reporting
database) still proceeds in parallel.
"""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Type, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

T = TypeVar("T")

_LOCK_KEY = "dashboard_api.statement_lock"


def session_lock(session: AsyncSession) -> asyncio.Lock:
    lock = session.info.get(_LOCK_KEY)
    if lock is None:
        lock = asyncio.Lock()
        session.info[_LOCK_KEY] = lock
    return lock


class Repository:
    def __init__(self, session: AsyncSession):
        self.session = session
        self._lock = session_lock(session)

    async def execute(self, statement: Any):
        async with self._lock:
            return await self.session.execute(statement)

    async def get(self, model: Type[T], ident: Any) -> Optional[T]:
        async with self._lock:
            return await self.session.get(model, ident)

    async def add(self, instance: T) -> T:
        """Insert ``instance`` and flush so its generated id is populated."""
        async with self._lock:
            self.session.add(instance)
            await self.session.flush()
            await self.session.refresh(instance)
        return instance
