from __future__ import annotations

"""
Realtime event distribution.

This package provides:
- EventHub: the in-process broadcaster for pipeline lifecycle events
- Subscription: one observer's handle on the hub
- format_sse: render an event or keepalive as a server-sent-events frame
"""

from .hub import KEEPALIVE, EventHub, Keepalive, Subscription  # noqa: F401
from .sse import format_sse  # noqa: F401
