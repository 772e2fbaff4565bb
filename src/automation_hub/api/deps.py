"""
automation_hub.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for DB sessions and shared app.state infrastructure.
- Assemble a request-scoped `AutomationService` from app.state infrastructure.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from automation_hub.db.repositories.automations import AutomationRepo
from automation_hub.events.publisher import EventPublisher
from automation_hub.images.pipeline import ImagePipeline
from automation_hub.services.automation_service import AutomationService


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    # Created on app startup in `automation_hub.api.app.create_app`.
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


def publisher_from_app(request: Request) -> EventPublisher:
    return request.app.state.publisher  # type: ignore[attr-defined]


def images_from_app(request: Request) -> ImagePipeline:
    return request.app.state.images  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is owned by the repository/service layer.
    async with session_factory() as session:
        yield session


def automation_service(
    session: AsyncSession = Depends(db_session),
    publisher: EventPublisher = Depends(publisher_from_app),
    images: ImagePipeline = Depends(images_from_app),
) -> AutomationService:
    return AutomationService(store=AutomationRepo(session), publisher=publisher, images=images)
