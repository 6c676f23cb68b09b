"""API routers."""

from kakeibo.presentation.api.routers.sync import router as sync_router
from kakeibo.presentation.api.routers.sync_settings import (
    router as sync_settings_router,
)

__all__ = [
    "sync_router",
    "sync_settings_router",
]
