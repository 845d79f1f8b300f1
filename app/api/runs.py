from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_run_service
from app.schemas.run import (
    SESSION_ID_PATTERN,
    RunDetail,
    RunDetailResponse,
    RunListResponse,
    RunSaveRequest,
    RunSaveResponse,
    RunSummary,
)
from app.services.run_service import RunService

router = APIRouter()

SessionId = Annotated[str, Query(min_length=8, max_length=128, pattern=SESSION_ID_PATTERN)]


@router.post("/runs", response_model=RunSaveResponse)
async def save_run(payload: RunSaveRequest, service: RunService = Depends(get_run_service)) -> RunSaveResponse:
    """Stores a coaching run for a session."""
    try:
        run_id = await service.save_run(payload)
        return RunSaveResponse(run_id=run_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {e}") from e


@router.get("/runs", response_model=RunListResponse)
async def list_runs(session_id: SessionId, service: RunService = Depends(get_run_service)) -> RunListResponse:
    """Lists the newest runs of a session."""
    runs = await service.list_runs(session_id)
    return RunListResponse(runs=[RunSummary.model_validate(run) for run in runs])


@router.get("/runs/{run_id}", response_model=RunDetailResponse)
async def get_run(
    run_id: UUID, session_id: SessionId, service: RunService = Depends(get_run_service)
) -> RunDetailResponse:
    """Returns a single run of a session."""
    run = await service.get_run(session_id, run_id)
    if run is None:
        raise HTTPException(status_code=404, detail="Run not found")
    return RunDetailResponse(run=RunDetail.model_validate(run))
