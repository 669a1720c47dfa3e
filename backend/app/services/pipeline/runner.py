from __future__ import annotations

"""backend/app/services/pipeline/runner.py

Core error-processing pipeline orchestration.

Responsibilities:
- Validate the submitted error text
- Run the classifier
- Fold the result into the AggregateStore
- Publish a lifecycle event through the EventHub at every stage

A run moves through explicit states:

    RECEIVED -> VALIDATING -> (INVALID | VALIDATED) -> PROCESSING
             -> AGGREGATING -> COMPLETED

with FAILED reserved for unexpected errors after validation. Each
transition is a separate method so it can be driven and tested on its own;
``ErrorPipeline.run`` simply chains them.

Stage delays are ``asyncio.sleep`` calls so observers can watch progress in
real time while other requests interleave. There is no await between
classification and the store update, so a caller going away mid-run can
never leave a half-applied update behind.
"""

import asyncio
import enum
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from app.config import Settings
from app.exceptions import ClassificationFailure, InvalidInputError
from app.models import (
    ClassificationResult,
    EventKind,
    EventStatus,
    LifecycleEvent,
    StoreSnapshot,
)
from app.schemas import render_result, render_snapshot
from app.services.diagnostics import classify
from app.services.memory import AggregateStore
from app.services.realtime import EventHub
from app.services.statsig_client import StatsigAdapter

logger = logging.getLogger(__name__)

Classifier = Callable[[str], ClassificationResult]
Sleeper = Callable[[float], Awaitable[None]]


class PipelineState(str, enum.Enum):
    RECEIVED = "RECEIVED"
    VALIDATING = "VALIDATING"
    INVALID = "INVALID"
    VALIDATED = "VALIDATED"
    PROCESSING = "PROCESSING"
    AGGREGATING = "AGGREGATING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


TERMINAL_STATES = frozenset(
    {PipelineState.INVALID, PipelineState.COMPLETED, PipelineState.FAILED}
)


@dataclass
class PipelineRun:
    """Mutable state of one request as it moves through the pipeline."""

    request_id: str
    error_text: str | None
    state: PipelineState = PipelineState.RECEIVED
    started_at: float = field(default_factory=time.monotonic)
    result: ClassificationResult | None = None
    snapshot: StoreSnapshot | None = None
    events: list[LifecycleEvent] = field(default_factory=list)

    @property
    def elapsed_ms(self) -> float:
        return (time.monotonic() - self.started_at) * 1000.0


@dataclass(frozen=True)
class PipelineOutcome:
    request_id: str
    result: ClassificationResult
    snapshot: StoreSnapshot
    duration_ms: float


class ErrorPipeline:
    """
    Orchestrates one error-processing request at a time per call.

    Many ``run`` calls may be in flight concurrently; the only state they
    share is the hub and the store, both of which serialise internally.
    """

    def __init__(
        self,
        *,
        hub: EventHub,
        store: AggregateStore,
        classifier: Classifier = classify,
        validation_delay: float = 0.5,
        workflow_delay: float = 1.0,
        telemetry: StatsigAdapter | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.hub = hub
        self.store = store
        self._classifier = classifier
        self._validation_delay = validation_delay
        self._workflow_delay = workflow_delay
        self._telemetry = telemetry
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        hub: EventHub,
        store: AggregateStore,
        telemetry: StatsigAdapter | None = None,
    ) -> "ErrorPipeline":
        return cls(
            hub=hub,
            store=store,
            validation_delay=settings.validation_delay_seconds,
            workflow_delay=settings.workflow_delay_seconds,
            telemetry=telemetry,
        )

    # ---- Helpers ----

    def _advance(
        self, run: PipelineRun, expected: set[PipelineState], target: PipelineState
    ) -> None:
        if run.state not in expected:
            raise RuntimeError(
                f"Illegal transition {run.state.value} -> {target.value} "
                f"for request {run.request_id}"
            )
        run.state = target

    def _emit(
        self,
        run: PipelineRun,
        *,
        suffix: str | None,
        kind: EventKind,
        message: str,
        status: EventStatus,
        payload: dict | None = None,
    ) -> LifecycleEvent:
        event = LifecycleEvent(
            id=f"{run.request_id}_{suffix}" if suffix else run.request_id,
            kind=kind,
            message=message,
            status=status,
            payload=payload,
        )
        run.events.append(event)
        self.hub.publish(event)
        return event

    def _log_outcome(self, name: str, run: PipelineRun, **metadata: str) -> None:
        if self._telemetry is None:
            return
        self._telemetry.log_event(
            name,
            value=round(run.elapsed_ms, 3),
            metadata={"request_id": run.request_id, **metadata},
        )

    # ---- Transitions ----

    async def begin_validation(self, run: PipelineRun) -> None:
        """RECEIVED -> VALIDATING."""
        self._advance(run, {PipelineState.RECEIVED}, PipelineState.VALIDATING)
        self._emit(
            run,
            suffix="validation",
            kind=EventKind.VALIDATION,
            message="Validating error input...",
            status=EventStatus.PROCESSING,
        )
        await self._sleep(self._validation_delay)

    def validate(self, run: PipelineRun) -> bool:
        """VALIDATING -> VALIDATED, or INVALID for blank input."""
        text = run.error_text
        if not text or not text.strip():
            self._advance(run, {PipelineState.VALIDATING}, PipelineState.INVALID)
            self._emit(
                run,
                suffix="error",
                kind=EventKind.VALIDATION,
                message="Validation failed: Empty error message",
                status=EventStatus.ERROR,
            )
            logger.info("Rejected request %s: empty error text", run.request_id)
            self._log_outcome("error_rejected", run)
            return False
        self._advance(run, {PipelineState.VALIDATING}, PipelineState.VALIDATED)
        return True

    async def process(self, run: PipelineRun) -> ClassificationResult:
        """VALIDATED -> PROCESSING; runs the classifier."""
        self._advance(run, {PipelineState.VALIDATED}, PipelineState.PROCESSING)
        self._emit(
            run,
            suffix="workflow",
            kind=EventKind.WORKFLOW,
            message="Calling error processing workflow...",
            status=EventStatus.PROCESSING,
        )
        await self._sleep(self._workflow_delay)
        run.result = self._classifier(run.error_text or "")
        return run.result

    def aggregate(self, run: PipelineRun) -> StoreSnapshot:
        """PROCESSING -> AGGREGATING; the only step that touches the store."""
        self._advance(run, {PipelineState.PROCESSING}, PipelineState.AGGREGATING)
        if run.result is None:
            raise RuntimeError(f"No classification result for request {run.request_id}")
        run.snapshot = self.store.apply_result(
            run.request_id,
            run.result,
            run.error_text or "",
            processing_time=run.elapsed_ms,
        )
        self._emit(
            run,
            suffix="memory",
            kind=EventKind.MEMORY_UPDATE,
            message="Memory store updated",
            status=EventStatus.COMPLETED,
            payload={"memory": render_snapshot(run.snapshot)},
        )
        return run.snapshot

    def complete(self, run: PipelineRun) -> PipelineOutcome:
        """AGGREGATING -> COMPLETED."""
        if run.result is None or run.snapshot is None:
            raise RuntimeError(f"Request {run.request_id} was not aggregated")
        payload = render_result(run.result)
        self._advance(run, {PipelineState.AGGREGATING}, PipelineState.COMPLETED)
        self._emit(
            run,
            suffix=None,
            kind=EventKind.COMPLETED,
            message=f"Error processed successfully: {run.result.error_type.value}",
            status=EventStatus.COMPLETED,
            payload=payload,
        )
        duration_ms = run.elapsed_ms
        logger.info(
            "Processed request %s as %s/%s in %.1fms",
            run.request_id,
            run.result.error_type.value,
            run.result.severity.value,
            duration_ms,
        )
        self._log_outcome(
            "error_processed",
            run,
            error_type=run.result.error_type.value,
            severity=run.result.severity.value,
        )
        return PipelineOutcome(
            request_id=run.request_id,
            result=run.result,
            snapshot=run.snapshot,
            duration_ms=duration_ms,
        )

    def fail(self, run: PipelineRun, exc: BaseException) -> None:
        """Any non-terminal state after validation -> FAILED."""
        self._advance(
            run,
            {
                PipelineState.VALIDATED,
                PipelineState.PROCESSING,
                PipelineState.AGGREGATING,
            },
            PipelineState.FAILED,
        )
        logger.error(
            "Processing failed for request %s: %s",
            run.request_id,
            exc,
            exc_info=exc,
        )
        self._emit(
            run,
            suffix="error",
            kind=EventKind.ERROR,
            message="Processing failed",
            status=EventStatus.ERROR,
        )
        self._log_outcome("error_failed", run, exception=type(exc).__name__)

    # ---- Entry point ----

    async def run(self, error_text: str | None, request_id: str) -> PipelineOutcome:
        """Drive one request to a terminal state.

        Raises:
            InvalidInputError: blank input; nothing was recorded.
            ClassificationFailure: an unexpected error after validation.
        """
        run = PipelineRun(request_id=request_id, error_text=error_text)
        await self.begin_validation(run)
        if not self.validate(run):
            raise InvalidInputError(request_id)

        try:
            await self.process(run)
            self.aggregate(run)
            return self.complete(run)
        except Exception as exc:  # noqa: BLE001
            self.fail(run, exc)
            raise ClassificationFailure(request_id, exc) from exc
