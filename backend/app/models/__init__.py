# backend/app/models/__init__.py
from __future__ import annotations

"""
Core domain models for the error worker.

It is used by:
- app.schemas (for type references and from_attributes conversion)
- app.services.diagnostics (classification results)
- app.services.memory (workflow records and store snapshots)
- app.services.realtime / app.services.pipeline (lifecycle events)

Models:
- ClassificationResult: error type, severity and suggestions for one report
- WorkflowRecord: one completed request kept in the store history
- StoreStatistics / StoreSnapshot: read-only view of the aggregate store
- LifecycleEvent: one pipeline progress notification
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Mapping


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ErrorType(str, enum.Enum):
    SYNTAX = "Syntax Error"
    TYPE = "Type Error"
    REFERENCE = "Reference Error"
    NETWORK = "Network Error"
    TIMEOUT = "Timeout Error"
    GENERAL = "General Error"


class Severity(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class EventKind(str, enum.Enum):
    VALIDATION = "validation"
    WORKFLOW = "workflow"
    MEMORY_UPDATE = "memory_update"
    COMPLETED = "completed"
    ERROR = "error"
    CONNECTED = "connected"


class EventStatus(str, enum.Enum):
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True)
class ClassificationResult:
    error_type: ErrorType
    severity: Severity
    suggestions: tuple[str, ...]
    processed_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class WorkflowRecord:
    id: str
    result: ClassificationResult
    timestamp: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class StoreStatistics:
    error_types: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    severity_count: Mapping[str, int] = field(default_factory=lambda: MappingProxyType({}))
    # milliseconds, running mean over successful pipeline runs
    average_processing_time: float = 0.0


@dataclass(frozen=True)
class StoreSnapshot:
    """Point-in-time copy of the aggregate store. Safe to share."""

    total_errors: int = 0
    last_processed: str = ""
    workflows: tuple[WorkflowRecord, ...] = ()
    statistics: StoreStatistics = field(default_factory=StoreStatistics)


@dataclass(frozen=True)
class LifecycleEvent:
    id: str
    kind: EventKind
    message: str
    status: EventStatus
    timestamp: datetime = field(default_factory=utcnow)
    payload: dict[str, Any] | None = None
