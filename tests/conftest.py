"""
Shared pytest fixtures for the error worker tests.

Pipelines built here run with zero stage delays so tests stay fast; the
ordering and state-machine behaviour is the same as in production.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.services.memory import AggregateStore
from app.services.pipeline import ErrorPipeline
from app.services.realtime import EventHub


@pytest.fixture
def settings() -> Settings:
    return Settings(
        validation_delay_seconds=0,
        workflow_delay_seconds=0,
        keepalive_interval_seconds=0.05,
        statsig_server_secret=None,
    )


@pytest.fixture
def hub() -> EventHub:
    return EventHub(queue_size=100)


@pytest.fixture
def store() -> AggregateStore:
    return AggregateStore()


@pytest.fixture
def pipeline(hub: EventHub, store: AggregateStore) -> ErrorPipeline:
    return ErrorPipeline(hub=hub, store=store, validation_delay=0, workflow_delay=0)


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    with TestClient(create_app(settings)) as test_client:
        yield test_client
