# backend/app/api/events.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from app.api.deps import get_app_settings, get_hub
from app.config import Settings
from app.services.realtime import EventHub, Keepalive, format_sse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


@router.get("")
async def stream_events(
    request: Request,
    hub: EventHub = Depends(get_hub),
    settings: Settings = Depends(get_app_settings),
) -> StreamingResponse:
    """
    Long-lived server-sent-events stream of pipeline lifecycle events.

    The first frame is a ``connected`` event; after that every event
    published by any pipeline run is forwarded in publish order, with
    keepalive comments while idle. The subscription is released as soon as
    the client goes away.
    """
    subscription = hub.subscribe()

    async def event_source():
        try:
            async for item in subscription.stream(
                keepalive_interval=settings.keepalive_interval_seconds
            ):
                if isinstance(item, Keepalive) and await request.is_disconnected():
                    break
                yield format_sse(item)
        finally:
            hub.unsubscribe(subscription)
            logger.debug("Event stream for subscriber %s closed", subscription.id)

    return StreamingResponse(
        event_source(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
