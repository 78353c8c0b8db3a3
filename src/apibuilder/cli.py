"""Command-line interface for the API builder.

This module provides the CLI commands for running the server and managing
the database and its content.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import NoReturn

import click

from apibuilder.core.config import get_settings
from apibuilder.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version="0.1.0", prog_name="apibuilder")
def cli() -> None:
    """API Builder - define collections, get REST endpoints.

    Settings are read from APIBUILDER_* environment variables and .env.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    if bind_workers > 1 and settings.database_url.startswith("sqlite"):
        raise click.UsageError("SQLite does not support multiple worker processes; use --workers 1")

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting API builder server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "apibuilder.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def init_db(force: bool) -> None:
    """Initialize the database.

    Creates all database tables. Use this only in development; in production,
    use ``apibuilder migrate`` instead.
    """
    from apibuilder.infrastructure.persistence.database import (
        get_db_manager,
        init_database,
    )

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use migrations instead of init-db.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create all database tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize():
        try:
            await init_database()
            click.echo("Database initialized successfully.")
        finally:
            await get_db_manager().disconnect()

    asyncio.run(initialize())


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default="alembic.ini",
    show_default=True,
    help="Alembic configuration file",
)
@click.option("--revision", default="head", show_default=True, help="Target revision")
def migrate(config_path: str, revision: str) -> None:
    """Apply database migrations with Alembic."""
    from alembic import command
    from alembic.config import Config

    settings = get_settings()
    configure_logging(settings)

    alembic_cfg = Config(config_path)
    command.upgrade(alembic_cfg, revision)
    click.echo(f"Database upgraded to {revision}.")


@cli.command()
@click.argument("output", type=click.Path(dir_okay=False, writable=True))
def export(output: str) -> None:
    """Write all collections and items to a JSON file."""
    from apibuilder.domain.services import SyncService
    from apibuilder.infrastructure.persistence.database import get_db_manager

    configure_logging(get_settings())

    async def run() -> dict:
        db = get_db_manager()
        try:
            async with db.session() as session:
                return await SyncService(session).export_state()
        finally:
            await db.disconnect()

    state = asyncio.run(run())
    Path(output).write_text(json.dumps(state, indent=2), encoding="utf-8")

    item_count = sum(len(items) for items in state["items"].values())
    click.echo(f"Exported {len(state['collections'])} collections and {item_count} items to {output}.")


@cli.command(name="import")
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.option("--force", is_flag=True, help="Skip confirmation prompt")
def import_(source: str, force: bool) -> None:
    """Replace all collections and items with the content of a JSON file."""
    from apibuilder.domain.services import SyncPayloadError, SyncService
    from apibuilder.infrastructure.persistence.database import get_db_manager

    configure_logging(get_settings())

    try:
        document = json.loads(Path(source).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise click.ClickException(f"{source} is not valid JSON: {e}") from e

    if not force:
        click.confirm(
            "This will replace ALL collections and items. Continue?",
            abort=True,
            default=False,
        )

    async def run() -> dict[str, int]:
        db = get_db_manager()
        try:
            async with db.session() as session:
                counts = await SyncService(session).import_state(document)
                await session.commit()
                return counts
        finally:
            await db.disconnect()

    try:
        counts = asyncio.run(run())
    except SyncPayloadError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Imported {counts['collections']} collections and {counts['items']} items.")


@cli.command()
def info() -> None:
    """Display configuration and system information."""
    settings = get_settings()

    click.echo(f"""
{settings.app_name} v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:    {settings.environment}
  Debug:          {settings.debug}
  API Prefix:     {settings.api_prefix}
  Records Prefix: {settings.records_prefix}
  External URL:   {settings.external_url}

Server:
  Host:           {settings.host}
  Port:           {settings.port}
  Workers:        {settings.workers}

Database:
  URL:            {settings.database_url}
  Pool Size:      {settings.db_pool_size}
  Echo:           {settings.db_echo}

Routes:
  API Key Header: {settings.api_key_header}
  Max Populate:   {settings.max_populate_fields}

Logging:
  Level:          {settings.log_level}
  Format:         {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `apibuilder` command is run
    or when using `python -m apibuilder`.
    """
    cli()


if __name__ == "__main__":
    main()
