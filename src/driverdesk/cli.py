"""Command-line interface for DriverDesk.

This module provides the CLI commands for running and maintaining
the DriverDesk service.
"""

import asyncio
import sys
from typing import NoReturn

import click

from driverdesk.core.config import get_settings
from driverdesk.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version="0.1.0", prog_name="DriverDesk")
def cli() -> None:
    """DriverDesk - driver onboarding and deprovisioning service.

    Settings are loaded from environment variables and .env files.
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
    "--reload/--no-reload",
    default=None,
    help="Enable auto-reload (defaults to on in development)",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool | None) -> None:
    """Start the DriverDesk API server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers
    if reload is None:
        reload = settings.is_development

    if bind_workers > 1 and settings.database_url.startswith("sqlite"):
        click.echo(
            "Error: SQLite does not support multiple worker processes. "
            "Use --workers 1 or switch to PostgreSQL.",
            err=True,
        )
        sys.exit(1)

    configure_logging(settings)
    logger = get_logger(__name__)
    logger.info(
        "Starting DriverDesk server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "driverdesk.infrastructure.api.app:app",
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
    use migrations instead.
    """
    from driverdesk.infrastructure.persistence.database import (
        get_db_manager,
        init_database,
    )

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use migrations instead of init_db.",
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
def expire_invitations() -> None:
    """Mark every pending invitation past its expiry as expired."""
    from driverdesk.domain.errors import DriverDeskError
    from driverdesk.domain.services import (
        DriverInputValidator,
        DriverInvitationService,
        InvitationRateLimiter,
        OnboardingGuard,
        SecurityAuditService,
    )
    from driverdesk.infrastructure.auth import IdentityProvider
    from driverdesk.infrastructure.persistence.database import get_db_manager
    from driverdesk.infrastructure.services.email import get_email_service

    settings = get_settings()
    configure_logging(settings)

    async def sweep() -> int:
        db = get_db_manager()
        try:
            async with db.session() as session:
                identity_provider = IdentityProvider(session)
                audit_service = SecurityAuditService(session)
                guard = OnboardingGuard(
                    session=session,
                    identity_provider=identity_provider,
                    rate_limiter=InvitationRateLimiter(session),
                    audit_service=audit_service,
                    validator=DriverInputValidator(settings.disposable_email_domains),
                )
                service = DriverInvitationService(
                    session=session,
                    guard=guard,
                    identity_provider=identity_provider,
                    audit_service=audit_service,
                    email_service=get_email_service(),
                    settings=settings,
                )
                return await service.expire_stale_invitations()
        finally:
            await db.disconnect()

    try:
        count = asyncio.run(sweep())
    except DriverDeskError as e:
        click.echo(f"Error: {e.message}", err=True)
        raise SystemExit(1)
    click.echo(f"Expired {count} invitation(s).")


@cli.command()
def check_email() -> None:
    """Test the connection to the configured email provider."""
    from driverdesk.infrastructure.services.email import get_email_service

    configure_logging(get_settings())
    provider = get_email_service().provider

    ok, error = asyncio.run(provider.test_connection())
    if not ok:
        click.echo(f"Email provider '{provider.name}' unreachable: {error}", err=True)
        sys.exit(1)
    click.echo(f"Email provider '{provider.name}' is reachable.")


@cli.command()
def info() -> None:
    """Display DriverDesk configuration."""
    settings = get_settings()

    click.echo(f"""
DriverDesk v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}
  External URL: {settings.external_url}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}
  Echo:         {settings.db_echo}

Invitations:
  Expiry:       {settings.invitation_expiry_days} days
  Rate Limit:   {settings.invitation_rate_limit_per_hour} per window

Email:
  Provider:     {settings.email_provider}
  From:         {settings.email_from_address}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    Called by the `driverdesk` command and by `python -m driverdesk`.
    """
    cli()


if __name__ == "__main__":
    main()
