"""Command-line interface for Keygate."""

import logging
import sys
import uuid

import click
import uvicorn
from rich.console import Console
from rich.panel import Panel

console = Console()
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version="0.1.0")
def main():
    """
    Keygate - managed AI Gateway keys.

    Provisions API keys on a user's Vercel team and keeps them encrypted
    until the user revokes consent.
    """
    pass


@main.command("init-db")
def init_db_command():
    """Create database tables if they don't exist."""
    from keygate.config import settings
    from keygate.database import init_db

    init_db()
    console.print(f"[green]✓ Database ready at {settings.SQLALCHEMY_DATABASE_URI}[/green]")


@main.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to")
@click.option("--port", default=8000, help="Port to bind to (default: 8000)")
@click.option("--reload", is_flag=True, help="Enable auto-reload for development")
@click.option("--workers", default=1, help="Number of worker processes")
def start(host: str, port: int, reload: bool, workers: int):
    """Start the Keygate API server."""
    from keygate.config import settings
    from keygate.utils.feature_flags import AI_GATEWAY_MANAGED_KEYS, is_enabled

    url = f"http://{'localhost' if host == '0.0.0.0' else host}:{port}"
    managed_keys = "on" if is_enabled(AI_GATEWAY_MANAGED_KEYS) else "off"
    scopes = " ".join(settings.vercel_oauth_scopes)

    console.print(
        Panel.fit(
            f"""[bold cyan]Keygate - managed AI Gateway keys[/bold cyan]

[dim]Environment:[/dim] {settings.ENVIRONMENT}
[dim]Host:[/dim] {host}
[dim]Port:[/dim] {port}
[dim]Workers:[/dim] {workers}
[dim]Managed keys:[/dim] {managed_keys}
[dim]Auth base URL:[/dim] {settings.base_url}
[dim]OAuth scopes:[/dim] {scopes}

[yellow]API docs at:[/yellow] [link]{url}/docs[/link]
        """,
            title="Server Configuration",
            border_style="cyan",
        )
    )

    uvicorn.run(
        "keygate.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=1 if reload else workers,
    )


@main.command("migrate-user")
@click.argument("from_user_id", type=click.UUID)
@click.argument("to_user_id", type=click.UUID)
def migrate_user(from_user_id: uuid.UUID, to_user_id: uuid.UUID):
    """
    Re-run anonymous-to-real data migration for a pair of users.

    Safe to repeat: only rows still owned by FROM_USER_ID are touched.
    """
    from sqlmodel import Session

    from keygate.auth.linking import IdentityMigrationError, migrate_anonymous_user_data
    from keygate.database import engine

    with Session(engine) as session:
        try:
            report = migrate_anonymous_user_data(
                session, from_user_id=from_user_id, to_user_id=to_user_id
            )
        except IdentityMigrationError as e:
            console.print(f"[red]❌ {e}: {e.__cause__}[/red]")
            sys.exit(1)

    console.print(
        f"[green]✓ Migrated {report.workflows} workflows, "
        f"{report.workflow_executions} executions, "
        f"{report.integrations} integrations[/green]"
    )


@main.command("generate-key")
def generate_key():
    """Print a fresh Fernet key for ENCRYPTION_KEY."""
    from cryptography.fernet import Fernet

    click.echo(Fernet.generate_key().decode())


if __name__ == "__main__":
    main()
