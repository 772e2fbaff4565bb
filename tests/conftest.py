"""
tests.conftest

Shared fixtures: a real SQLite database per test, a temp blob directory,
an in-memory publisher, and small image payload builders.
"""

from __future__ import annotations

import io
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio
from PIL import Image
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from automation_hub.db.init_db import init_db
from automation_hub.db.repositories.automations import AutomationRepo
from automation_hub.db.session import create_engine, create_sessionmaker
from automation_hub.events.publisher import InMemoryEventPublisher
from automation_hub.images.blob_store import BlobStore
from automation_hub.images.pipeline import ImagePipeline, ImageUpload
from automation_hub.services.automation_service import AutomationService
from automation_hub.settings import ImageConfig, Settings

MAX_IMAGE_SIZE = 64 * 1024


def image_bytes(fmt: str) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (4, 4), (200, 30, 30)).save(buf, format=fmt)
    return buf.getvalue()


def make_upload(filename: str, data: bytes, *, size: int | None = None) -> ImageUpload:
    return ImageUpload(
        filename=filename, size=len(data) if size is None else size, file=io.BytesIO(data)
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'automations.db'}",
        image_save_dir=tmp_path / "images",
        image_max_size=MAX_IMAGE_SIZE,
        image_extensions=[".png", ".jpg", ".jpeg", ".gif"],
    )


@pytest_asyncio.fixture
async def engine(settings: Settings) -> AsyncIterator[AsyncEngine]:
    engine = create_engine(settings)
    await init_db(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
def sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_sessionmaker(engine)


@pytest_asyncio.fixture
async def session(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    async with sessionmaker() as session:
        yield session


@pytest.fixture
def blobs(tmp_path: Path) -> BlobStore:
    store = BlobStore(tmp_path / "images")
    store.ensure_root()
    return store


@pytest.fixture
def pipeline(blobs: BlobStore) -> ImagePipeline:
    config = ImageConfig(
        max_size=MAX_IMAGE_SIZE,
        extensions=(".png", ".jpg", ".jpeg", ".gif"),
        save_dir=blobs.root,
    )
    return ImagePipeline(config=config, blobs=blobs)


@pytest.fixture
def publisher() -> InMemoryEventPublisher:
    return InMemoryEventPublisher()


@pytest.fixture
def repo(session: AsyncSession) -> AutomationRepo:
    return AutomationRepo(session)


@pytest.fixture
def service(
    repo: AutomationRepo, publisher: InMemoryEventPublisher, pipeline: ImagePipeline
) -> AutomationService:
    return AutomationService(store=repo, publisher=publisher, images=pipeline)


def blob_names(blobs: BlobStore) -> set[str]:
    return {p.name for p in blobs.root.iterdir()}
