"""FastAPI application factory.

All API endpoints are versioned under the /api/v1/ prefix. The health check
stays unversioned at /health.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import APIRouter, FastAPI

from kakeibo.logging_config import configure_logging
from kakeibo.presentation.api.container import SyncContainer, build_container
from kakeibo.presentation.api.exception_handlers import setup_exception_handlers
from kakeibo.presentation.api.routers import sync_router, sync_settings_router
from kakeibo_config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
API_V1_PREFIX = "/api/v1"

OPENAPI_TAGS = [
    {
        "name": "Sync",
        "description": """Transaction synchronization across institutions.

**How it works:**
1. Each connected institution is synced in bounded parallel groups
2. Only the window since the last successful sync (minus one day) is fetched
3. Records already in the account book are skipped
4. Every run is recorded in the sync history
""",
    },
    {
        "name": "Sync Settings",
        "description": """Sync schedules.

**Intervals:** `realtime` (5 min), `frequent` (1 h), `standard` (6 h),
`infrequent` (1 day), `manual`, or `custom` (5 minutes to 30 days, or an
explicit cron expression).

Institutions without an own interval follow the global default.
""",
    },
    {
        "name": "Health",
        "description": "Service health monitoring endpoints.",
    },
]


def _make_lifespan(settings: Settings, container: Optional[SyncContainer]):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Application lifespan manager."""
        logger.info("Starting %s sync API v%s...", settings.app_name, API_VERSION)
        app.state.container = container or build_container(settings)
        await app.state.container.start()
        yield

        logger.info("Shutting down %s sync API...", settings.app_name)
        await app.state.container.stop()

    return lifespan


def create_v1_router() -> APIRouter:
    v1_router = APIRouter()
    v1_router.include_router(
        sync_settings_router,
        prefix="/sync/settings",
        tags=["Sync Settings"],
    )
    v1_router.include_router(sync_router, prefix="/sync", tags=["Sync"])
    return v1_router


def create_app(
    settings: Optional[Settings] = None,
    container: Optional[SyncContainer] = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    settings
        Optional settings override for testing.
    container
        Optional pre-built collaborators; built from settings on startup
        when omitted.
    """
    configure_logging()
    settings = settings or get_settings()

    app = FastAPI(
        title=f"{settings.app_name} Sync API",
        description="Scheduled and on-demand transaction synchronization.",
        version=API_VERSION,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        openapi_url="/openapi.json" if settings.debug else None,
        lifespan=_make_lifespan(settings, container),
        openapi_tags=OPENAPI_TAGS,
    )

    setup_exception_handlers(app)
    app.include_router(create_v1_router(), prefix=API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health_check() -> dict:
        """Unversioned health check for load balancers and monitoring."""
        return {
            "status": "healthy",
            "version": API_VERSION,
            "api_versions": ["v1"],
        }

    return app
