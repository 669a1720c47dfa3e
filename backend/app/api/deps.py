from __future__ import annotations

"""
FastAPI dependencies.

The hub, store and pipeline are created once per application by
app.main.create_app and hung off ``app.state``; routes reach them through
these helpers rather than through module globals.
"""

from fastapi import Request

from app.config import Settings
from app.services.memory import AggregateStore
from app.services.pipeline import ErrorPipeline
from app.services.realtime import EventHub


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_hub(request: Request) -> EventHub:
    return request.app.state.hub


def get_store(request: Request) -> AggregateStore:
    return request.app.state.store


def get_pipeline(request: Request) -> ErrorPipeline:
    return request.app.state.pipeline
