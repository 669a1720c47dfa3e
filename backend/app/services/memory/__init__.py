from __future__ import annotations

"""
Aggregate store package.

Provides AggregateStore, the single shared record of classification
counters and recent workflow history.
"""

from .store import AggregateStore  # noqa: F401
