# backend/app/api/worker.py
from __future__ import annotations

from fastapi import APIRouter, Depends

from app import schemas
from app.api.deps import get_pipeline, get_store
from app.services.memory import AggregateStore
from app.services.pipeline import ErrorPipeline

router = APIRouter(prefix="/worker", tags=["worker"])


@router.post(
    "",
    response_model=schemas.ProcessErrorResponse,
    responses={
        400: {"model": schemas.ErrorResponse},
        500: {"model": schemas.ErrorResponse},
    },
)
async def process_error(
    payload: schemas.ProcessErrorRequest,
    pipeline: ErrorPipeline = Depends(get_pipeline),
) -> schemas.ProcessErrorResponse:
    """
    Run one error report through the pipeline.

    Progress is streamed on ``/api/events`` while this call is in flight.
    Blank input answers 400 and unexpected failures 500; both are rendered
    by the exception handlers registered in app.main.
    """
    outcome = await pipeline.run(payload.error, payload.event_id)
    return schemas.ProcessErrorResponse(
        success=True,
        workflow=schemas.ClassificationResultRead.model_validate(outcome.result),
        memory=schemas.MemorySnapshotRead.model_validate(outcome.snapshot),
    )


@router.get("/memory", response_model=schemas.MemorySnapshotRead)
def read_memory(store: AggregateStore = Depends(get_store)) -> schemas.MemorySnapshotRead:
    return schemas.MemorySnapshotRead.model_validate(store.snapshot())


@router.post("/memory/reset", response_model=schemas.MemorySnapshotRead)
def reset_memory(store: AggregateStore = Depends(get_store)) -> schemas.MemorySnapshotRead:
    """Clear counters and history. Already-delivered events are unaffected."""
    return schemas.MemorySnapshotRead.model_validate(store.reset())
