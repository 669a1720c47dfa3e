from __future__ import annotations

"""backend/app/services/memory/store.py

In-process aggregate store for classification history.

Holds:
- total_errors: count of successfully classified requests
- last_processed: preview of the most recent input text
- workflows: newest-first ring of the most recent WorkflowRecords
- statistics: per error type / per severity counters and the running
  mean of pipeline durations

The store is owned by the application object and handed to the pipeline;
nothing here is module-global. All reads and writes go through one
``threading.Lock`` so that concurrent pipeline runs (event loop or worker
threads) behave as if applied one after another. Nothing is persisted.
"""

import logging
import threading
from collections import Counter
from types import MappingProxyType

from app.exceptions import StoreMutationError
from app.models import (
    ClassificationResult,
    ErrorType,
    Severity,
    StoreSnapshot,
    StoreStatistics,
    WorkflowRecord,
    utcnow,
)

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 10
DEFAULT_LAST_PROCESSED_CHARS = 100


class AggregateStore:
    """
    Mutable aggregate of every classification the worker has produced.

    Example:
        >>> store = AggregateStore()
        >>> snapshot = store.apply_result("req-1", result, "TypeError: boom")
        >>> snapshot.total_errors
        1

    Invariants (hold after every apply_result/reset):
        - total_errors == sum(error_types) == sum(severity_count)
        - len(workflows) <= history_limit
    """

    def __init__(
        self,
        *,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        last_processed_chars: int = DEFAULT_LAST_PROCESSED_CHARS,
    ) -> None:
        if history_limit < 1:
            raise ValueError("history_limit must be at least 1")
        self._history_limit = history_limit
        self._last_processed_chars = last_processed_chars
        self._lock = threading.Lock()
        self._init_state()

    def _init_state(self) -> None:
        self._total_errors = 0
        self._last_processed = ""
        self._workflows: list[WorkflowRecord] = []
        self._error_types: Counter[str] = Counter()
        self._severity_count: Counter[str] = Counter()
        self._timed_runs = 0
        self._average_processing_time = 0.0

    @property
    def history_limit(self) -> int:
        return self._history_limit

    def _snapshot_locked(self) -> StoreSnapshot:
        return StoreSnapshot(
            total_errors=self._total_errors,
            last_processed=self._last_processed,
            workflows=tuple(self._workflows),
            statistics=StoreStatistics(
                error_types=MappingProxyType(dict(self._error_types)),
                severity_count=MappingProxyType(dict(self._severity_count)),
                average_processing_time=self._average_processing_time,
            ),
        )

    @staticmethod
    def _check(request_id: str, result: ClassificationResult, raw_text: str) -> None:
        if not request_id:
            raise StoreMutationError("request_id must not be empty")
        if not isinstance(result, ClassificationResult):
            raise StoreMutationError(f"expected ClassificationResult, got {type(result).__name__}")
        if not isinstance(result.error_type, ErrorType):
            raise StoreMutationError(f"unknown error type {result.error_type!r}")
        if not isinstance(result.severity, Severity):
            raise StoreMutationError(f"unknown severity {result.severity!r}")
        if not isinstance(raw_text, str):
            raise StoreMutationError("raw_text must be a string")

    def apply_result(
        self,
        request_id: str,
        result: ClassificationResult,
        raw_text: str,
        processing_time: float | None = None,
    ) -> StoreSnapshot:
        """Fold one completed classification into the aggregate.

        Args:
            request_id: caller-supplied identifier, stored on the WorkflowRecord
            result: the classification to record
            raw_text: original input; only a prefix is kept
            processing_time: optional pipeline duration in milliseconds

        Returns:
            The snapshot taken immediately after this update.

        Raises:
            StoreMutationError: if the update is malformed. Nothing is
                changed in that case.
        """
        self._check(request_id, result, raw_text)
        if processing_time is not None and processing_time < 0:
            raise StoreMutationError("processing_time must not be negative")

        record = WorkflowRecord(id=request_id, result=result, timestamp=utcnow())

        with self._lock:
            self._total_errors += 1
            self._last_processed = raw_text[: self._last_processed_chars]
            self._workflows.insert(0, record)
            del self._workflows[self._history_limit :]
            self._error_types[result.error_type.value] += 1
            self._severity_count[result.severity.value] += 1
            if processing_time is not None:
                self._timed_runs += 1
                self._average_processing_time += (
                    processing_time - self._average_processing_time
                ) / self._timed_runs
            snapshot = self._snapshot_locked()

        logger.debug(
            "Recorded %s (%s) for request %s; total=%d",
            result.error_type.value,
            result.severity.value,
            request_id,
            snapshot.total_errors,
        )
        return snapshot

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return self._snapshot_locked()

    def reset(self) -> StoreSnapshot:
        """Drop all history and counters. Returns the empty snapshot."""
        with self._lock:
            self._init_state()
            snapshot = self._snapshot_locked()
        logger.info("Aggregate store reset")
        return snapshot
