"""SQLAlchemy implementation of SyncHistoryRepository."""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from kakeibo.domain.shared.time import ensure_tz_aware
from kakeibo.domain.sync.entities import SyncRun
from kakeibo.domain.sync.exceptions import (
    SyncRunAlreadyFinishedError,
    SyncRunNotFoundError,
)
from kakeibo.domain.sync.repositories import SyncHistoryFilters, SyncHistoryRepository
from kakeibo.domain.sync.value_objects import SyncStatus
from kakeibo.infrastructure.persistence.sqlalchemy.models import SyncRunModel


class SyncHistoryRepositorySQLAlchemy(SyncHistoryRepository):
    """Sync history stored in the ``sync_runs`` table.

    Every operation runs in its own short transaction, so legs running
    concurrently never share a session.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self._session_maker = session_maker

    async def create(self, run: SyncRun) -> None:
        async with self._session_maker() as session, session.begin():
            session.add(self._map_to_model(run))

    async def update(self, run: SyncRun) -> None:
        async with self._session_maker() as session, session.begin():
            stmt = (
                select(SyncRunModel)
                .where(SyncRunModel.id == run.id)
                .with_for_update()
            )
            model = (await session.execute(stmt)).scalar_one_or_none()
            if model is None:
                raise SyncRunNotFoundError(run.id)
            if model.status.is_terminal():
                raise SyncRunAlreadyFinishedError(run.id, model.status.value)
            self._update_model(model, run)

    async def find_by_id(self, run_id: UUID) -> Optional[SyncRun]:
        async with self._session_maker() as session:
            model = await session.get(SyncRunModel, run_id)
            return self._map_to_domain(model) if model else None

    async def find_running(self) -> Optional[SyncRun]:
        stmt = (
            select(SyncRunModel)
            .where(
                SyncRunModel.status == SyncStatus.RUNNING,
                SyncRunModel.institution_id.is_(None),
            )
            .order_by(SyncRunModel.started_at.desc())
            .limit(1)
        )
        return await self._first(stmt)

    async def find_latest_successful(self, institution_id: str) -> Optional[SyncRun]:
        stmt = (
            select(SyncRunModel)
            .where(
                SyncRunModel.institution_id == institution_id,
                SyncRunModel.status == SyncStatus.COMPLETED,
            )
            .order_by(SyncRunModel.completed_at.desc())
            .limit(1)
        )
        return await self._first(stmt)

    async def find_with_filters(
        self,
        filters: SyncHistoryFilters,
        limit: int = 20,
        offset: int = 0,
    ) -> list[SyncRun]:
        stmt = (
            self._apply_filters(select(SyncRunModel), filters)
            .order_by(SyncRunModel.started_at.desc())
            .offset(offset)
            .limit(limit)
        )
        async with self._session_maker() as session:
            result = await session.execute(stmt)
            return [self._map_to_domain(m) for m in result.scalars().all()]

    async def count_with_filters(self, filters: SyncHistoryFilters) -> int:
        stmt = self._apply_filters(
            select(func.count()).select_from(SyncRunModel),
            filters,
        )
        async with self._session_maker() as session:
            result = await session.execute(stmt)
            return result.scalar_one()

    async def _first(self, stmt: Select) -> Optional[SyncRun]:
        async with self._session_maker() as session:
            model = (await session.execute(stmt)).scalar_one_or_none()
            return self._map_to_domain(model) if model else None

    def _apply_filters(self, stmt: Select, filters: SyncHistoryFilters) -> Select:
        if filters.institution_id is not None:
            stmt = stmt.where(SyncRunModel.institution_id == filters.institution_id)
        if filters.batches_only:
            stmt = stmt.where(SyncRunModel.institution_id.is_(None))
        if filters.status is not None:
            stmt = stmt.where(SyncRunModel.status == filters.status)
        if filters.started_from is not None:
            stmt = stmt.where(SyncRunModel.started_at >= filters.started_from)
        if filters.started_to is not None:
            stmt = stmt.where(SyncRunModel.started_at <= filters.started_to)
        return stmt

    def _map_to_model(self, run: SyncRun) -> SyncRunModel:
        model = SyncRunModel(id=run.id, created_at=run.created_at)
        self._update_model(model, run)
        return model

    def _update_model(self, model: SyncRunModel, run: SyncRun) -> None:
        model.institution_id = run.institution_id
        model.institution_name = run.institution_name
        model.institution_type = run.institution_type
        model.status = run.status
        model.started_at = run.started_at
        model.completed_at = run.completed_at
        model.total_fetched = run.total_fetched
        model.new_records = run.new_records
        model.duplicate_records = run.duplicate_records
        model.total_institutions = run.total_institutions
        model.success_count = run.success_count
        model.failure_count = run.failure_count
        model.retry_count = run.retry_count
        model.error_message = run.error_message
        model.updated_at = run.updated_at

    def _map_to_domain(self, model: SyncRunModel) -> SyncRun:
        return SyncRun(
            id=model.id,
            institution_id=model.institution_id,
            institution_name=model.institution_name,
            institution_type=model.institution_type,
            status=model.status,
            started_at=ensure_tz_aware(model.started_at),
            completed_at=(
                ensure_tz_aware(model.completed_at) if model.completed_at else None
            ),
            total_fetched=model.total_fetched,
            new_records=model.new_records,
            duplicate_records=model.duplicate_records,
            total_institutions=model.total_institutions,
            success_count=model.success_count,
            failure_count=model.failure_count,
            retry_count=model.retry_count,
            error_message=model.error_message,
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )
