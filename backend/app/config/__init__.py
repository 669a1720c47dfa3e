# backend/app/config/__init__.py
from __future__ import annotations

"""
Configuration entry points: the Settings model and its cached accessor.
"""

from .settings import Settings, get_settings  # noqa: F401
