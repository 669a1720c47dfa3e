"""Small helpers shared by the test modules."""

from __future__ import annotations

from app.models import EventKind, EventStatus, LifecycleEvent
from app.services.realtime import Subscription


def make_event(event_id: str, kind: EventKind = EventKind.WORKFLOW) -> LifecycleEvent:
    return LifecycleEvent(
        id=event_id,
        kind=kind,
        message=f"event {event_id}",
        status=EventStatus.PROCESSING,
    )


async def drain(subscription: Subscription) -> list[LifecycleEvent]:
    """Collect everything currently queued for a subscriber."""
    events: list[LifecycleEvent] = []
    while subscription.pending:
        event = await subscription.get(timeout=1)
        if event is None:
            break
        events.append(event)
    return events
