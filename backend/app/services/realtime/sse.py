from __future__ import annotations

"""backend/app/services/realtime/sse.py

Server-sent-events framing for hub output.

Events become ``event: <kind>`` + ``data: <json>`` frames; keepalives become
SSE comment lines, which browsers ignore but which keep proxies from
closing an idle connection.
"""

import json

from app.models import LifecycleEvent
from app.schemas import render_event
from app.services.realtime.hub import Keepalive

KEEPALIVE_FRAME = ": keepalive\n\n"


def format_sse(item: LifecycleEvent | Keepalive) -> str:
    if isinstance(item, Keepalive):
        return KEEPALIVE_FRAME
    data = json.dumps(render_event(item), separators=(",", ":"))
    return f"id: {item.id}\nevent: {item.kind.value}\ndata: {data}\n\n"
