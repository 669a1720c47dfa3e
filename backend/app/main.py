# backend/app/main.py
from __future__ import annotations

"""
FastAPI application setup.

This module depends on:
- app.config.get_settings for configuration
- app.services.* for the hub, store, pipeline and telemetry, which are
  built once per application and stored on ``app.state``
- app.api.api_router for route registration
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api import api_router
from app.config import Settings, get_settings
from app.exceptions import ClassificationFailure, InvalidInputError
from app.services.memory import AggregateStore
from app.services.pipeline import ErrorPipeline
from app.services.realtime import EventHub
from app.services.statsig_client import StatsigAdapter

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # ---- Lifecycle ----

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("%s starting (%s)", settings.app_name, settings.environment)
        yield
        app.state.hub.close()
        app.state.telemetry.shutdown()

    app = FastAPI(
        title=settings.app_name,
        version="0.1.0",
        lifespan=lifespan,
    )

    hub = EventHub(
        queue_size=settings.subscriber_queue_size,
        overflow=settings.subscriber_overflow,
    )
    store = AggregateStore(
        history_limit=settings.history_limit,
        last_processed_chars=settings.last_processed_chars,
    )
    telemetry = StatsigAdapter.from_settings(settings)

    app.state.settings = settings
    app.state.hub = hub
    app.state.store = store
    app.state.telemetry = telemetry
    app.state.pipeline = ErrorPipeline.from_settings(
        settings, hub=hub, store=store, telemetry=telemetry
    )

    # ---- CORS ----

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(o).rstrip("/") for o in settings.allowed_origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---- Errors ----

    @app.exception_handler(RequestValidationError)
    async def malformed_request_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"success": False, "error": "Invalid input"})

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"success": False, "error": exc.reason})

    @app.exception_handler(ClassificationFailure)
    async def processing_failure_handler(
        request: Request, exc: ClassificationFailure
    ) -> JSONResponse:
        return JSONResponse(
            status_code=500, content={"success": False, "error": "Processing failed"}
        )

    # ---- Routes ----

    app.include_router(api_router, prefix="/api")

    # ---- Healthcheck ----

    @app.get("/health", tags=["health"])
    def health() -> dict:
        return {"status": "ok", "subscribers": hub.subscriber_count}

    return app


app = create_app()
