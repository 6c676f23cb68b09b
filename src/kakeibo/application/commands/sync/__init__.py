"""Sync commands."""

from kakeibo.application.commands.sync.batch_sync_command import BatchSyncCommand
from kakeibo.application.commands.sync.cancel_sync_command import CancelSyncCommand
from kakeibo.application.commands.sync.delete_institution_sync_settings_command import (
    DeleteInstitutionSyncSettingsCommand,
)
from kakeibo.application.commands.sync.update_institution_sync_settings_command import (
    UpdateInstitutionSyncSettingsCommand,
)
from kakeibo.application.commands.sync.update_sync_settings_command import (
    UpdateSyncSettingsCommand,
)

__all__ = [
    "BatchSyncCommand",
    "CancelSyncCommand",
    "DeleteInstitutionSyncSettingsCommand",
    "UpdateInstitutionSyncSettingsCommand",
    "UpdateSyncSettingsCommand",
]
