"""
automation_hub.api.app

FastAPI app factory for the Automation Hub service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Initialize and dispose shared infrastructure (DB engine, publisher, blob store).
- Map domain errors to HTTP responses.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from automation_hub.api.routers.automations import router as automations_router
from automation_hub.api.routers.health import router as health_router
from automation_hub.api.routers.images import router as images_router
from automation_hub.db.init_db import init_db
from automation_hub.db.session import create_engine, create_sessionmaker
from automation_hub.errors import (
    AutomationHubError,
    NotFoundError,
    PublishError,
    ValidationError,
)
from automation_hub.events.publisher import EventPublisher, build_publisher
from automation_hub.images.blob_store import BlobStore
from automation_hub.images.pipeline import ImagePipeline
from automation_hub.observability.logging import configure_logging, get_logger
from automation_hub.observability.middleware import RequestContextMiddleware
from automation_hub.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, publisher: EventPublisher | None = None) -> FastAPI:
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.log_json,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            await init_db(engine)

        image_config = settings.image_config()
        blobs = BlobStore(image_config.save_dir)
        blobs.ensure_root()
        app.state.images = ImagePipeline(config=image_config, blobs=blobs)

        app.state.publisher = publisher or build_publisher(settings)
        try:
            await app.state.publisher.start()
        except PublishError as e:
            # Reads keep working; the first publish retries the connection.
            log.warning("publisher_start_failed", error=str(e))

        try:
            yield
        finally:
            await app.state.publisher.stop()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Automation Hub",
        version="0.1.0",
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(automations_router)
    app.include_router(images_router)
    _register_error_handlers(app)

    return app


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def _validation(_: Request, exc: ValidationError) -> JSONResponse:
        return JSONResponse(status_code=HTTP_400_BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(NotFoundError)
    async def _not_found(_: Request, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(IntegrityError)
    async def _conflict(_: Request, exc: IntegrityError) -> JSONResponse:
        # Lost a url_path race against a concurrent save.
        log.warning("automation_conflict", error=str(exc.orig))
        return JSONResponse(
            status_code=HTTP_409_CONFLICT,
            content={"detail": "automation conflicts with a concurrent change, retry"},
        )

    @app.exception_handler(AutomationHubError)
    async def _infrastructure(_: Request, exc: AutomationHubError) -> JSONResponse:
        return JSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)}
        )


# --- Module Notes -----------------------------------------------------------
# `publisher` is injectable so tests (and embedders) can supply their own implementation.
