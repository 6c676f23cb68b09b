"""Sync router: run, inspect and cancel transaction syncs."""

import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Query

from kakeibo.application.commands.sync import CancelSyncCommand
from kakeibo.application.queries.sync import (
    GetSyncRunQuery,
    SyncHistoryQuery,
    SyncStatusQuery,
)
from kakeibo.domain.sync.value_objects import SyncStatus
from kakeibo.presentation.api.dependencies import Container
from kakeibo.presentation.api.schemas.sync import (
    CancelSyncResponse,
    SchedulerMetricsResponse,
    SyncHistoryResponse,
    SyncRunDetailResponse,
    SyncRunRequest,
    SyncRunResponse,
    SyncStatusResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    summary="Run transaction sync",
    responses={
        200: {"description": "Sync finished (check per-institution results)"},
        409: {"description": "Another sync is already running"},
    },
)
async def run_sync(
    container: Container,
    request: Optional[SyncRunRequest] = None,
) -> SyncRunResponse:
    """
    Sync connected institutions and return the summary.

    Institutions are synced in parallel groups. A failing institution does
    not affect the others; its error appears in `results` and `errors`.
    """
    request = request or SyncRunRequest()
    result = await container.batch_sync_command.execute(
        institution_ids=request.institution_ids,
        force_full=request.force_full,
    )
    return SyncRunResponse.from_result(result)


@router.get("/status", summary="Get current sync status")
async def get_sync_status(container: Container) -> SyncStatusResponse:
    query = SyncStatusQuery(container.history_repository, container.orchestrator)
    return SyncStatusResponse.from_result(await query.execute())


@router.get("/history", summary="List sync history")
async def list_sync_history(  # NOQA: PLR0913
    container: Container,
    institution_id: Optional[str] = Query(None, description="Filter by institution"),
    status: Optional[SyncStatus] = Query(None, description="Filter by status"),
    started_from: Optional[datetime] = Query(None, description="Started at or after"),
    started_to: Optional[datetime] = Query(None, description="Started at or before"),
    batches_only: bool = Query(False, description="Only whole-batch runs"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
) -> SyncHistoryResponse:
    query = SyncHistoryQuery(container.history_repository)
    page = await query.execute(
        institution_id=institution_id,
        status=status,
        started_from=started_from,
        started_to=started_to,
        batches_only=batches_only,
        limit=limit,
        offset=offset,
    )
    return SyncHistoryResponse.from_page(page)


@router.get(
    "/history/{run_id}",
    summary="Get one sync run",
    responses={404: {"description": "Sync run not found"}},
)
async def get_sync_run(run_id: UUID, container: Container) -> SyncRunDetailResponse:
    run = await GetSyncRunQuery(container.history_repository).execute(run_id)
    return SyncRunDetailResponse.from_run(run)


@router.post(
    "/{run_id}/cancel",
    summary="Cancel a running sync",
    responses={
        200: {"description": "Cancellation outcome (success may be false)"},
        404: {"description": "Sync run not found"},
    },
)
async def cancel_sync(run_id: UUID, container: Container) -> CancelSyncResponse:
    """
    Cancel a running batch or institution sync.

    Cancellation is cooperative: data already fetched by a connector is
    dropped, and no further institutions are started.
    """
    command = CancelSyncCommand(container.history_repository, container.orchestrator)
    result = await command.execute(run_id)
    return CancelSyncResponse(success=result.success, message=result.message)


@router.get("/scheduler/metrics", summary="Get scheduler metrics")
async def get_scheduler_metrics(container: Container) -> SchedulerMetricsResponse:
    scheduler = container.scheduler
    return SchedulerMetricsResponse(
        **scheduler.metrics.to_dict(),
        schedules=scheduler.current_schedules(),
        timezone=scheduler.timezone,
    )


@router.post("/scheduler/metrics/reset", summary="Reset scheduler metrics")
async def reset_scheduler_metrics(container: Container) -> SchedulerMetricsResponse:
    container.scheduler.reset_metrics()
    return await get_scheduler_metrics(container)
