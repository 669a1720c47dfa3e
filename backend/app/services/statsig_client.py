"""Lightweight Statsig integration for pipeline outcome events."""
from __future__ import annotations

import logging
from typing import Any

from statsig import StatsigEvent, StatsigOptions, StatsigUser
from statsig.statsig_server import StatsigServer

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


class StatsigAdapter:
    def __init__(self, secret_key: str | None, environment: str):
        self._client: StatsigServer | None = None
        if not secret_key:
            return

        try:
            client = StatsigServer()
            client.initialize(secret_key, StatsigOptions(tier=environment))
            self._client = client
        except Exception as exc:  # noqa: BLE001
            logger.warning("Statsig initialization failed: %s", exc)
            self._client = None

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "StatsigAdapter":
        settings = settings or get_settings()
        return cls(settings.statsig_server_secret, settings.environment)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def log_event(
        self,
        event_name: str,
        *,
        user_id: str = "error-worker",
        value: float | int | str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        if not self._client:
            return

        try:
            self._client.log_event(
                StatsigEvent(StatsigUser(user_id), event_name, value=value, metadata=metadata)
            )
        except Exception as exc:  # noqa: BLE001
            logger.debug("Statsig event failed: %s", exc)

    def shutdown(self) -> None:
        if not self._client:
            return

        try:
            self._client.shutdown()
        except Exception as exc:  # noqa: BLE001
            logger.debug("Statsig shutdown failed: %s", exc)
