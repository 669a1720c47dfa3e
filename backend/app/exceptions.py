# backend/app/exceptions.py
from __future__ import annotations

"""
Exception hierarchy for the error worker.

All errors raised by the services derive from ErrorWorkerError so API
handlers can catch the family in one place:

- InvalidInputError: the submitted error text is empty or whitespace only
- ClassificationFailure: something unexpected broke inside the pipeline
- DeliveryFailure: a subscriber channel could not accept an event
- StoreMutationError: the aggregate store refused an update as a whole
"""


class ErrorWorkerError(Exception):
    """Base exception for all error worker failures."""


class InvalidInputError(ErrorWorkerError):
    """Raised when a request carries no usable error text."""

    def __init__(self, request_id: str, reason: str = "Invalid input") -> None:
        self.request_id = request_id
        self.reason = reason
        super().__init__(f"Request {request_id!r} rejected: {reason}")


class ClassificationFailure(ErrorWorkerError):
    """Raised when a pipeline run fails after validation succeeded.

    The original exception is kept as ``__cause__`` and on ``original``.
    """

    def __init__(self, request_id: str, original: BaseException | None = None) -> None:
        self.request_id = request_id
        self.original = original
        detail = f": {original}" if original is not None else ""
        super().__init__(f"Processing failed for request {request_id!r}{detail}")


class DeliveryFailure(ErrorWorkerError):
    """Raised when an event cannot be queued for a subscriber."""

    def __init__(self, subscriber_id: str, reason: str) -> None:
        self.subscriber_id = subscriber_id
        self.reason = reason
        super().__init__(f"Delivery to subscriber {subscriber_id} failed: {reason}")


class StoreMutationError(ErrorWorkerError):
    """Raised when an update is rejected before any field is changed."""
