"""In-memory event hub.

This module fans lifecycle events out to every connected observer within
the same process.

Each subscriber owns a bounded ``asyncio.Queue``. ``publish`` only ever does
``put_nowait`` into those queues, so a slow or stalled observer can never
hold up the producer or any other observer. When a queue is full the hub
either discards that subscriber's oldest queued event (``drop_oldest``) or
drops the subscriber entirely (``disconnect``).

Suitable for single-instance deployments only.
"""

import asyncio
import logging
import threading
from collections.abc import AsyncIterator
from dataclasses import dataclass
from typing import Literal
from uuid import uuid4

from app.exceptions import DeliveryFailure
from app.models import EventKind, EventStatus, LifecycleEvent

logger = logging.getLogger(__name__)

OverflowPolicy = Literal["drop_oldest", "disconnect"]


@dataclass(frozen=True)
class Keepalive:
    """Marker yielded by Subscription.stream when nothing arrived in time."""


KEEPALIVE = Keepalive()

# Queued after the last real event when a subscription is closed.
_CLOSED = object()


class Subscription:
    """
    Handle for one observer's channel.

    Created by EventHub.subscribe(); consumers iterate ``stream()`` until it
    ends, which happens after the hub drops or unsubscribes the handle and
    any already-queued events have been drained.
    """

    def __init__(self, maxsize: int) -> None:
        self.id = uuid4().hex
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=maxsize)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def _offer(self, event: LifecycleEvent, overflow: OverflowPolicy) -> int:
        """Queue an event without waiting. Returns how many events were discarded.

        Raises:
            DeliveryFailure: when the subscriber is closed, or is full and the
                policy is ``disconnect``.
        """
        if self._closed:
            raise DeliveryFailure(self.id, "subscription closed")
        try:
            self._queue.put_nowait(event)
            return 0
        except asyncio.QueueFull:
            if overflow == "disconnect":
                raise DeliveryFailure(self.id, "queue full") from None
        self._queue.get_nowait()
        self._queue.put_nowait(event)
        return 1

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_CLOSED)
        except asyncio.QueueFull:
            self._queue.get_nowait()
            self._queue.put_nowait(_CLOSED)

    async def get(self, timeout: float | None = None) -> LifecycleEvent | None:
        """Wait for the next event. Returns None once the subscription has ended.

        Raises:
            asyncio.TimeoutError: if ``timeout`` elapses first.
        """
        if timeout is None:
            item = await self._queue.get()
        else:
            item = await asyncio.wait_for(self._queue.get(), timeout)
        if item is _CLOSED:
            # keep the marker visible to later readers
            self._queue.put_nowait(_CLOSED)
            return None
        return item  # type: ignore[return-value]

    async def stream(
        self, keepalive_interval: float | None = None
    ) -> AsyncIterator[LifecycleEvent | Keepalive]:
        """Yield events in publish order, plus KEEPALIVE on idle intervals."""
        while True:
            try:
                event = await self.get(timeout=keepalive_interval)
            except asyncio.TimeoutError:
                yield KEEPALIVE
                continue
            if event is None:
                return
            yield event


class EventHub:
    """
    Publish/subscribe broadcaster for lifecycle events.

    Features:
    - Any number of subscribers, each with an independent bounded queue
    - Non-blocking publish; zero subscribers is a no-op
    - Synthetic ``connected`` event delivered to a new subscriber only
    - Failure isolation (one broken channel never affects the others)

    Example:
        >>> hub = EventHub()
        >>> sub = hub.subscribe()
        >>> hub.publish(event)
        >>> async for item in sub.stream(keepalive_interval=15):
        ...     ...

    Thread Safety:
        - subscribe/unsubscribe are thread-safe
        - stats counters are updated under the same lock
        - publish must be called from the event loop that consumers run on
    """

    def __init__(
        self,
        *,
        queue_size: int = 100,
        overflow: OverflowPolicy = "drop_oldest",
    ) -> None:
        if queue_size < 1:
            raise ValueError("queue_size must be at least 1")
        self._queue_size = queue_size
        self._overflow: OverflowPolicy = overflow
        self._subscribers: dict[str, Subscription] = {}
        self._lock = threading.RLock()
        self._stats = {
            "events_published": 0,
            "events_delivered": 0,
            "events_dropped": 0,
            "subscribers_dropped": 0,
        }

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscribers)

    @property
    def stats(self) -> dict[str, int]:
        with self._lock:
            return dict(self._stats)

    def _count(self, key: str, amount: int = 1) -> None:
        with self._lock:
            self._stats[key] += amount

    def subscribe(self, *, send_connected: bool = True) -> Subscription:
        subscription = Subscription(self._queue_size)
        if send_connected:
            subscription._offer(
                LifecycleEvent(
                    id=f"connected_{subscription.id}",
                    kind=EventKind.CONNECTED,
                    message="Connected to event stream",
                    status=EventStatus.COMPLETED,
                ),
                self._overflow,
            )
        with self._lock:
            self._subscribers[subscription.id] = subscription
        logger.debug(
            "Subscriber %s connected (%d total)",
            subscription.id,
            self.subscriber_count,
        )
        return subscription

    def unsubscribe(self, subscription: Subscription) -> bool:
        """Detach a subscriber. Returns False if it was not registered."""
        with self._lock:
            removed = self._subscribers.pop(subscription.id, None)
        subscription._close()
        if removed is not None:
            logger.debug("Subscriber %s disconnected", subscription.id)
        return removed is not None

    def publish(self, event: LifecycleEvent) -> int:
        """Deliver ``event`` to every current subscriber without waiting.

        Returns the number of subscribers the event was queued for.
        """
        with self._lock:
            targets = list(self._subscribers.values())
        self._count("events_published")

        if not targets:
            logger.debug("No subscribers for event %s", event.id)
            return 0

        delivered = 0
        for subscription in targets:
            try:
                dropped = subscription._offer(event, self._overflow)
                if dropped:
                    self._count("events_dropped", dropped)
                delivered += 1
            except DeliveryFailure as exc:
                logger.warning("%s; dropping subscriber", exc)
                self._count("subscribers_dropped")
                self.unsubscribe(subscription)
        self._count("events_delivered", delivered)
        return delivered

    def close(self) -> None:
        """Drop every subscriber, ending their streams."""
        with self._lock:
            targets = list(self._subscribers.values())
            self._subscribers.clear()
        for subscription in targets:
            subscription._close()
        if targets:
            logger.info("Event hub closed %d subscriber(s)", len(targets))
