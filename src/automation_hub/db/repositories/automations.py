"""
automation_hub.db.repositories.automations

Repository for `Automation` entities (the store port used by the services).

Responsibilities:
- Point reads (by id, by url path), ordered listing and max-position lookup.
- Committed single-record writes (create/update/delete).
- Running a multi-step unit of work atomically (`run_in_transaction`).
"""

from __future__ import annotations

import uuid
from collections.abc import Awaitable, Callable
from typing import Protocol, TypeVar

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from automation_hub.db.models import Automation

T = TypeVar("T")


class AutomationStore(Protocol):
    async def get(
        self, automation_id: uuid.UUID, *, for_update: bool = False
    ) -> Automation | None: ...

    async def list_all(self) -> list[Automation]: ...

    async def get_by_url_path(self, url_path: str) -> Automation | None: ...

    async def max_position(self) -> int: ...

    async def create(self, automation: Automation) -> Automation: ...

    async def update(self, automation: Automation) -> Automation: ...

    async def delete(self, automation: Automation) -> None: ...

    async def save(self, automation: Automation) -> None: ...

    async def run_in_transaction(
        self, steps: Callable[[AutomationStore], Awaitable[T]]
    ) -> T: ...


class AutomationRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(
        self, automation_id: uuid.UUID, *, for_update: bool = False
    ) -> Automation | None:
        # FOR UPDATE is dropped by dialects without row locks (SQLite).
        return await self._session.get(Automation, automation_id, with_for_update=for_update)

    async def list_all(self) -> list[Automation]:
        stmt = select(Automation).order_by(Automation.position)
        return list((await self._session.execute(stmt)).scalars().all())

    async def get_by_url_path(self, url_path: str) -> Automation | None:
        stmt = select(Automation).where(Automation.url_path == url_path)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def max_position(self) -> int:
        stmt = select(func.max(Automation.position))
        value = (await self._session.execute(stmt)).scalar_one_or_none()
        return int(value) if value is not None else 0

    async def create(self, automation: Automation) -> Automation:
        self._session.add(automation)
        await self._commit()
        return automation

    async def update(self, automation: Automation) -> Automation:
        await self._commit()
        return automation

    async def delete(self, automation: Automation) -> None:
        await self._session.delete(automation)
        await self._commit()

    async def save(self, automation: Automation) -> None:
        """
        Flush a pending change without committing; only meaningful inside
        `run_in_transaction`, where statement order matters for UNIQUE(position).
        """

        self._session.add(automation)
        await self._session.flush()

    async def run_in_transaction(self, steps: Callable[[AutomationStore], Awaitable[T]]) -> T:
        try:
            result = await steps(self)
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise
        return result

    async def _commit(self) -> None:
        try:
            await self._session.commit()
        except Exception:
            await self._session.rollback()
            raise


# --- Module Notes -----------------------------------------------------------
# Single writes commit immediately so callers can observe "persisted, then notified".
# Swaps go through run_in_transaction and never commit partway.
