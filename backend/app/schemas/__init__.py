# backend/app/schemas/__init__.py
from __future__ import annotations

"""
Pydantic schemas for request/response models.

This module is the API contract layer and depends on:
- app.models (domain dataclasses and enums)

It is used by:
- API routes
- the pipeline, which renders event payloads with the same shapes

Field names are snake_case in Python and camelCase on the wire
(errorType, processedAt, totalErrors, ...), which is what the dashboard
consumes.
"""

from datetime import datetime
from typing import Any, List, Optional
from uuid import uuid4

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.models import (
    ClassificationResult,
    ErrorType,
    EventKind,
    EventStatus,
    LifecycleEvent,
    Severity,
    StoreSnapshot,
)


class _WireModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# ---------- Request Schemas ----------


class ProcessErrorRequest(BaseModel):
    """
    Payload for a single error-processing request.

    ``error`` also accepts ``errorText``. A missing or blank ``eventId`` is
    replaced by a fresh identifier so events can still be correlated;
    numeric ids are kept as their string form. Blank text is
    *not* rejected here: the pipeline owns validation so the failure shows
    up as a lifecycle event.
    """

    error: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("error", "errorText", "error_text"),
    )
    event_id: str = Field(
        default_factory=lambda: uuid4().hex,
        validation_alias=AliasChoices("eventId", "event_id"),
    )

    @field_validator("event_id", mode="before")
    @classmethod
    def normalize_event_id(cls, value: Any) -> Any:
        if value is None:
            return uuid4().hex
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str) and not value.strip():
            return uuid4().hex
        return value


# ---------- Classification Schemas ----------


class ClassificationResultRead(_WireModel):
    error_type: ErrorType
    severity: Severity
    suggestions: List[str]
    processed_at: datetime


class WorkflowRecordRead(_WireModel):
    id: str
    result: ClassificationResultRead
    timestamp: datetime


# ---------- Aggregate Store Schemas ----------


class StoreStatisticsRead(_WireModel):
    error_types: dict[str, int]
    severity_count: dict[str, int]
    average_processing_time: float


class MemorySnapshotRead(_WireModel):
    total_errors: int
    last_processed: str
    workflows: List[WorkflowRecordRead]
    statistics: StoreStatisticsRead


# ---------- Event Schemas ----------


class LifecycleEventRead(_WireModel):
    id: str
    kind: EventKind
    message: str
    timestamp: datetime
    status: EventStatus
    payload: Optional[dict[str, Any]] = None


# ---------- Responses ----------


class ProcessErrorResponse(_WireModel):
    success: bool = True
    workflow: ClassificationResultRead
    memory: MemorySnapshotRead


class ErrorResponse(BaseModel):
    success: bool = False
    error: str


# ---------- Rendering helpers ----------


def render_result(result: ClassificationResult) -> dict[str, Any]:
    return ClassificationResultRead.model_validate(result).model_dump(
        mode="json", by_alias=True
    )


def render_snapshot(snapshot: StoreSnapshot) -> dict[str, Any]:
    return MemorySnapshotRead.model_validate(snapshot).model_dump(
        mode="json", by_alias=True
    )


def render_event(event: LifecycleEvent) -> dict[str, Any]:
    return LifecycleEventRead.model_validate(event).model_dump(mode="json", by_alias=True)
