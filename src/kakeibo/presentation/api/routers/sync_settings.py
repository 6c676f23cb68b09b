"""Sync settings router: global and per-institution schedules."""

from fastapi import APIRouter, HTTPException, status

from kakeibo.application.commands.sync import (
    DeleteInstitutionSyncSettingsCommand,
    UpdateInstitutionSyncSettingsCommand,
    UpdateSyncSettingsCommand,
)
from kakeibo.application.queries.sync import (
    GetInstitutionSyncSettingsQuery,
    GetSyncSettingsQuery,
    ListInstitutionSyncSettingsQuery,
)
from kakeibo.presentation.api.dependencies import Container
from kakeibo.presentation.api.schemas.sync_settings import (
    InstitutionSyncSettingsResponse,
    InstitutionSyncSettingsUpdateRequest,
    SyncSettingsResponse,
    SyncSettingsUpdateRequest,
)

router = APIRouter()


@router.get("", summary="Get global sync settings")
async def get_sync_settings(container: Container) -> SyncSettingsResponse:
    settings = await GetSyncSettingsQuery(container.settings_repository).execute()
    return SyncSettingsResponse.from_domain(settings)


@router.patch(
    "",
    summary="Update global sync settings",
    responses={400: {"description": "Invalid interval or option"}},
)
async def update_sync_settings(
    request: SyncSettingsUpdateRequest,
    container: Container,
) -> SyncSettingsResponse:
    """
    Partially update global settings.

    Changing the default interval reschedules the global trigger and every
    institution that follows the default.
    """
    command = UpdateSyncSettingsCommand(
        container.settings_repository,
        container.scheduler,
    )
    settings = await command.execute(
        default_interval=(
            request.default_interval.to_domain() if request.default_interval else None
        ),
        wifi_only=request.wifi_only,
        battery_saving_mode=request.battery_saving_mode,
        auto_retry=request.auto_retry,
        max_retry_count=request.max_retry_count,
        quiet_hours_enabled=request.quiet_hours_enabled,
        quiet_hours_start=request.quiet_hours_start,
        quiet_hours_end=request.quiet_hours_end,
    )
    return SyncSettingsResponse.from_domain(settings)


@router.get("/institutions", summary="List institution sync settings")
async def list_institution_settings(
    container: Container,
) -> list[InstitutionSyncSettingsResponse]:
    query = ListInstitutionSyncSettingsQuery(container.settings_repository)
    return [InstitutionSyncSettingsResponse.from_domain(s) for s in await query.execute()]


@router.get(
    "/institutions/{institution_id}",
    summary="Get institution sync settings",
    responses={404: {"description": "Institution not found"}},
)
async def get_institution_settings(
    institution_id: str,
    container: Container,
) -> InstitutionSyncSettingsResponse:
    query = GetInstitutionSyncSettingsQuery(
        container.settings_repository,
        container.directory,
    )
    return InstitutionSyncSettingsResponse.from_domain(
        await query.execute(institution_id)
    )


@router.patch(
    "/institutions/{institution_id}",
    summary="Update institution sync settings",
    responses={
        400: {"description": "Invalid interval"},
        404: {"description": "Institution not found"},
    },
)
async def update_institution_settings(
    institution_id: str,
    request: InstitutionSyncSettingsUpdateRequest,
    container: Container,
) -> InstitutionSyncSettingsResponse:
    command = UpdateInstitutionSyncSettingsCommand(
        container.settings_repository,
        container.directory,
        container.scheduler,
    )
    settings = await command.execute(
        institution_id,
        interval=request.interval.to_domain() if request.interval else None,
        enabled=request.enabled,
        use_default_interval=request.use_default_interval,
    )
    return InstitutionSyncSettingsResponse.from_domain(settings)


@router.delete(
    "/institutions/{institution_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete institution sync settings",
    responses={404: {"description": "No settings stored for this institution"}},
)
async def delete_institution_settings(
    institution_id: str,
    container: Container,
) -> None:
    command = DeleteInstitutionSyncSettingsCommand(
        container.settings_repository,
        container.scheduler,
    )
    if not await command.execute(institution_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No sync settings for institution: {institution_id}",
        )
