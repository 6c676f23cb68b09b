"""Kakeibo sync CLI using Typer.

Utilities to preview sync intervals, prepare the database and run the API.
"""

import asyncio
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import typer
from rich.console import Console
from rich.table import Table

from kakeibo.domain.shared.time import utc_now
from kakeibo.domain.sync.exceptions import InvalidSyncConfigError
from kakeibo.domain.sync.value_objects import SyncInterval, SyncIntervalType, TimeUnit
from kakeibo.logging_config import configure_logging
from kakeibo_config.settings import get_settings

app = typer.Typer(
    name="kakeibo",
    help="Kakeibo - account book sync CLI",
    no_args_is_help=True,
)
console = Console()

interval_app = typer.Typer(
    name="interval",
    help="Sync interval utilities",
    no_args_is_help=True,
)
app.add_typer(interval_app)

db_app = typer.Typer(
    name="db",
    help="Database utilities",
    no_args_is_help=True,
)
app.add_typer(db_app)


@interval_app.command("preview")
def preview_interval(
    interval_type: SyncIntervalType = typer.Argument(..., help="Interval kind"),
    value: Optional[int] = typer.Option(None, help="Custom interval length"),
    unit: Optional[TimeUnit] = typer.Option(None, help="Custom interval unit"),
    schedule: Optional[str] = typer.Option(None, help="Explicit cron expression"),
    last: Optional[datetime] = typer.Option(
        None,
        help="Last sync time (ISO 8601, UTC if no offset)",
    ),
) -> None:
    """Show the cron expression and next run time of an interval."""
    try:
        interval = SyncInterval(
            type=interval_type,
            value=value,
            unit=unit,
            custom_schedule=schedule,
        )
    except InvalidSyncConfigError as e:
        console.print(f"[red]Invalid interval:[/red] {e.message}")
        raise typer.Exit(code=1) from e

    tz = ZoneInfo(get_settings().sync_timezone)
    table = Table(title=f"Sync interval: {interval}")
    table.add_column("Property", style="cyan")
    table.add_column("Value")
    table.add_row("Minutes", str(interval.to_minutes()))
    table.add_row("Cron expression", interval.to_cron_expression() or "-")
    if interval.is_manual:
        table.add_row("Next run", "never (manual)")
    else:
        next_run = interval.next_run_after(last, now=utc_now())
        table.add_row("Next run", next_run.astimezone(tz).isoformat())
    table.add_row("Timezone", str(tz))
    console.print(table)


@db_app.command("init")
def init_database() -> None:
    """Create the sync tables (idempotent)."""
    from kakeibo.infrastructure.persistence.sqlalchemy.database import (
        create_engine,
        create_tables,
    )

    configure_logging()
    settings = get_settings()

    async def _run() -> None:
        engine = create_engine(settings.database_url)
        try:
            await create_tables(engine)
        finally:
            await engine.dispose()

    asyncio.run(_run())
    console.print("[green]Sync tables are up to date[/green]")


@app.command("serve")
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address"),
    port: Optional[int] = typer.Option(None, help="Port"),
) -> None:
    """Run the sync API with its scheduler."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "kakeibo.presentation.api.app:create_app",
        factory=True,
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_config=None,
    )


def cli() -> None:
    """Entry point for the CLI application."""
    app()


if __name__ == "__main__":
    cli()
