"""Sync schemas for API request/response models."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from kakeibo.application.dtos.sync import (
    BatchSyncResult,
    LegResult,
    SyncHistoryPage,
    SyncStatusResult,
)
from kakeibo.domain.sync.entities import SyncRun
from kakeibo.domain.sync.value_objects import SyncStatus


class SyncRunRequest(BaseModel):
    """Request schema for starting a batch sync.

    All fields are optional; by default every connected institution is synced
    incrementally.
    """

    institution_ids: Optional[list[str]] = Field(
        default=None,
        description="Sync only these institutions (default: all connected)",
    )
    force_full: bool = Field(
        default=False,
        description="Ignore previous runs and fetch the full 90 day window",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {"summary": "Incremental sync of everything", "value": {}},
                {
                    "summary": "Full resync of one institution",
                    "value": {"institution_ids": ["mufg-001"], "force_full": True},
                },
            ],
        },
    )


class LegResultResponse(BaseModel):
    """Outcome of syncing one institution."""

    institution_id: str
    institution_name: str
    status: SyncStatus
    run_id: Optional[UUID] = None
    total_fetched: int
    new_records: int
    duplicate_records: int
    retry_count: int
    error_message: Optional[str] = None
    duration_ms: Optional[int] = None

    @classmethod
    def from_result(cls, result: LegResult) -> "LegResultResponse":
        return cls(
            institution_id=result.institution_id,
            institution_name=result.institution_name,
            status=result.status,
            run_id=result.run_id,
            total_fetched=result.total_fetched,
            new_records=result.new_records,
            duplicate_records=result.duplicate_records,
            retry_count=result.retry_count,
            error_message=result.error_message,
            duration_ms=result.duration_ms,
        )


class SyncRunResponse(BaseModel):
    """Summary of a finished batch sync."""

    run_id: Optional[UUID] = Field(None, description="Batch run ID (null if nothing to sync)")
    status: SyncStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    duration_ms: int
    total_institutions: int
    success_count: int
    failure_count: int
    cancelled_count: int
    total_fetched: int
    total_new: int
    total_duplicate: int
    results: list[LegResultResponse]
    errors: list[str]

    @classmethod
    def from_result(cls, result: BatchSyncResult) -> "SyncRunResponse":
        return cls(
            run_id=result.run_id,
            status=result.status,
            started_at=result.started_at,
            completed_at=result.completed_at,
            duration_ms=result.duration_ms,
            total_institutions=result.total_institutions,
            success_count=result.success_count,
            failure_count=result.failure_count,
            cancelled_count=result.cancelled_count,
            total_fetched=result.total_fetched,
            total_new=result.total_new,
            total_duplicate=result.total_duplicate,
            results=[LegResultResponse.from_result(r) for r in result.results],
            errors=result.errors,
        )


class SyncProgressResponse(BaseModel):
    total: int
    completed: int
    failed: int
    cancelled: int
    percent: float


class SyncStatusResponse(BaseModel):
    """Whether a batch sync is running right now."""

    is_running: bool
    run_id: Optional[UUID] = None
    started_at: Optional[datetime] = None
    progress: Optional[SyncProgressResponse] = None

    @classmethod
    def from_result(cls, result: SyncStatusResult) -> "SyncStatusResponse":
        progress = None
        if result.progress is not None:
            progress = SyncProgressResponse(**result.progress.to_dict())
        return cls(
            is_running=result.is_running,
            run_id=result.run_id,
            started_at=result.started_at,
            progress=progress,
        )


class SyncRunDetailResponse(BaseModel):
    """One sync history entry."""

    id: UUID
    institution_id: Optional[str] = None
    institution_name: str
    institution_type: str
    status: SyncStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    total_fetched: int
    new_records: int
    duplicate_records: int
    total_institutions: int
    success_count: int
    failure_count: int
    error_message: Optional[str] = None
    retry_count: int
    duration_ms: Optional[int] = None

    @classmethod
    def from_run(cls, run: SyncRun) -> "SyncRunDetailResponse":
        duration = run.duration
        return cls(
            id=run.id,
            institution_id=run.institution_id,
            institution_name=run.institution_name,
            institution_type=run.institution_type,
            status=run.status,
            started_at=run.started_at,
            completed_at=run.completed_at,
            total_fetched=run.total_fetched,
            new_records=run.new_records,
            duplicate_records=run.duplicate_records,
            total_institutions=run.total_institutions,
            success_count=run.success_count,
            failure_count=run.failure_count,
            error_message=run.error_message,
            retry_count=run.retry_count,
            duration_ms=int(duration.total_seconds() * 1000) if duration else None,
        )


class SyncHistoryResponse(BaseModel):
    items: list[SyncRunDetailResponse]
    total: int
    limit: int
    offset: int
    has_more: bool

    @classmethod
    def from_page(cls, page: SyncHistoryPage) -> "SyncHistoryResponse":
        return cls(
            items=[SyncRunDetailResponse.from_run(r) for r in page.items],
            total=page.total,
            limit=page.limit,
            offset=page.offset,
            has_more=page.has_more,
        )


class CancelSyncResponse(BaseModel):
    success: bool
    message: str


class SchedulerMetricsResponse(BaseModel):
    """Counters over scheduled sync executions."""

    total_executions: int
    successful_executions: int
    failed_executions: int
    average_duration_ms: float
    last_execution_at: Optional[datetime] = None
    last_success_at: Optional[datetime] = None
    last_failure_at: Optional[datetime] = None
    schedules: dict[str, str] = Field(
        default_factory=dict,
        description="Live cron expressions keyed by schedule key",
    )
    timezone: str
