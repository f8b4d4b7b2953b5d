"""smsgate command line.

``smsgate serve`` runs the API. The remaining commands are operator tools
that talk to the configured database directly: bootstrap a schema, create
the first admin, mint an invite code without going through HTTP.
"""

import asyncio
from typing import Awaitable, Callable, NoReturn, TypeVar

import click

from smsgate import __version__
from smsgate.core.config import Settings, get_settings
from smsgate.core.logging import configure_logging, get_logger

T = TypeVar("T")

ASGI_APP = "smsgate.infrastructure.api.app:app"
MIN_PASSWORD_LENGTH = 8


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


def _with_database(settings: Settings, work: Callable[..., Awaitable[T]]) -> T:
    """Run ``work(session)`` against a short-lived engine and dispose it afterwards."""
    from smsgate.infrastructure.persistence.database import DatabaseManager

    async def runner() -> T:
        manager = DatabaseManager(settings)
        try:
            async with manager.session() as session:
                return await work(session)
        finally:
            await manager.disconnect()

    return asyncio.run(runner())


@click.group()
@click.version_option(version=__version__, prog_name="smsgate")
def cli() -> None:
    """SMS gateway back-office.

    Configuration comes from SMSGATE_* variables or a .env file.
    """


@cli.command()
@click.option("--host", default=None, help="Bind address. Defaults to SMSGATE_HOST.")
@click.option("--port", type=int, default=None, help="Bind port. Defaults to SMSGATE_PORT.")
@click.option("--workers", type=int, default=None, help="Worker processes. Defaults to SMSGATE_WORKERS.")
@click.option("--reload", is_flag=True, help="Restart on code changes (single worker).")
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Run the HTTP API under uvicorn."""
    import uvicorn

    settings = get_settings()
    workers = workers or settings.workers
    if workers > 1 and settings.database_url.startswith("sqlite"):
        _fail(
            "SQLite does not support multiple worker processes. "
            "Run with --workers 1 or point SMSGATE_DATABASE_URL at PostgreSQL."
        )

    configure_logging(settings)
    get_logger(__name__).info(
        "Launching uvicorn",
        host=host or settings.host,
        port=port or settings.port,
        workers=workers,
        reload=reload,
    )
    uvicorn.run(
        ASGI_APP,
        host=host or settings.host,
        port=port or settings.port,
        workers=1 if reload else workers,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@cli.command("init-db")
@click.option("--force", is_flag=True, help="Do not ask for confirmation.")
def init_db(force: bool) -> None:
    """Create every table from the models.

    Meant for development. Production schemas go through ``alembic upgrade``.
    """
    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        _fail("refusing to create tables in production. Use migrations instead.")
    if not force:
        click.confirm("Create all smsgate tables in the configured database?", abort=True)

    from smsgate.infrastructure.persistence.database import DatabaseManager

    async def create_schema() -> None:
        manager = DatabaseManager(settings)
        try:
            manager.ensure_sqlite_directory()
            await manager.create_tables()
        finally:
            await manager.disconnect()

    asyncio.run(create_schema())
    click.echo("Database initialized successfully.")


@cli.command("create-admin")
@click.option("--email", default=None, help="Prompted for when omitted.")
@click.option("--password", default=None, help="Prompted for (hidden) when omitted.")
@click.option("--name", default="Administrator", show_default=True)
def create_admin(email: str | None, password: str | None, name: str) -> None:
    """Create an admin account, or promote the account that already uses EMAIL."""
    from smsgate.domain.services import ensure_admin_user

    settings = get_settings()
    configure_logging(settings)

    email = email or click.prompt("Admin email")
    local, _, domain = email.partition("@")
    if not local or "." not in domain:
        _fail("Invalid email format")
    password = password or click.prompt("Admin password", hide_input=True, confirmation_prompt=True)
    if len(password) < MIN_PASSWORD_LENGTH:
        _fail(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

    async def ensure(session) -> tuple[str, bool]:
        user, created = await ensure_admin_user(session, email=email, password=password, name=name)
        await session.commit()
        return user.id, created

    user_id, created = _with_database(settings, ensure)
    get_logger(__name__).info("Admin ensured from the command line", user_id=user_id, created=created)
    if created:
        click.echo(f"Admin created successfully.\n  User ID: {user_id}\n  Email:   {email}")
    else:
        click.echo(f"Existing user {email} now has the ADMIN role.")


@cli.command("create-invite")
@click.option("--max-uses", type=click.IntRange(min=1), default=None, help="Registrations the code allows.")
@click.option("--expires-in-days", type=click.IntRange(min=1), default=None, help="Days until the code expires.")
@click.option("--note", default=None, help="Free-text note shown to admins.")
def create_invite(max_uses: int | None, expires_in_days: int | None, note: str | None) -> None:
    """Mint an invite code.

    The bare code goes to stdout so it can be piped; details go to stderr.
    """
    from smsgate.domain.services import InviteService

    settings = get_settings()
    configure_logging(settings)

    async def issue(session):
        invite = await InviteService(session, settings).create(
            issuer_id=None,
            max_uses=max_uses,
            expires_in_days=expires_in_days,
            note=note,
        )
        await session.commit()
        return invite

    invite = _with_database(settings, issue)
    click.echo(invite.code)
    click.echo(f"Max uses: {invite.max_uses}, expires at: {invite.expires_at.isoformat()}", err=True)


@cli.command()
def info() -> None:
    """Print the effective configuration."""
    settings = get_settings()
    sections = {
        "Server": [
            ("Environment", settings.environment),
            ("API Prefix", settings.api_prefix),
            ("Bind", f"{settings.host}:{settings.port}"),
            ("Workers", settings.workers),
        ],
        "Database": [
            ("URL", settings.database_url),
            ("Pool Size", settings.db_pool_size),
        ],
        "Registration": [
            ("Mode", settings.registration_mode),
            ("Turnstile", "enabled" if settings.turnstile_secret_key else "disabled"),
        ],
        "Auth": [
            ("Token TTL", f"{settings.access_token_expire_minutes} minutes"),
            ("Key Header", settings.api_key_header),
        ],
        "Logging": [
            ("Level", settings.log_level),
            ("Format", settings.log_format),
        ],
    }

    click.echo(f"smsgate v{settings.app_version}")
    for title, rows in sections.items():
        click.echo(f"\n{title}:")
        for label, value in rows:
            click.echo(f"  {label + ':':<14}{value}")


def main() -> NoReturn:
    cli()


if __name__ == "__main__":
    main()
