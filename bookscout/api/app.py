"""FastAPI application factory for the bookscout submission API."""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from bookscout.api import routes
from bookscout.core.config import Settings
from bookscout.enrichment.llm import get_provider
from bookscout.pipeline.jobs import JobPipeline

logger = logging.getLogger(__name__)


def _warn_incomplete_config(settings: Settings) -> None:
    if not settings.delivery.webhook_url:
        logger.warning("Webhook URL is not set; results will not be delivered downstream")
    env_var = get_provider(settings.enrichment.provider).env_var
    if env_var and not os.environ.get(env_var):
        logger.warning("%s is not set; AI enrichment will fall back for every book", env_var)


def create_app(settings: Settings | None = None, pipeline: JobPipeline | None = None) -> FastAPI:
    """Build the app. A prebuilt pipeline may be injected (tests use fakes)."""
    settings = settings if settings is not None else Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if pipeline is None:
            _warn_incomplete_config(settings)
            app.state.pipeline = JobPipeline.from_settings(settings)
        else:
            app.state.pipeline = pipeline
        yield
        await app.state.pipeline.shutdown()

    app = FastAPI(title="bookscout", version="0.1.0", lifespan=lifespan)
    app.include_router(routes.router)

    @app.get("/health")
    async def health() -> dict[str, object]:
        """Liveness plus job counts for container checks."""
        active: JobPipeline = app.state.pipeline
        return {
            "status": "success",
            "message": "Service is healthy",
            "jobs": active.store.count_by_status(),
            "inFlight": active.in_flight,
            "capacity": active.capacity,
        }

    return app
