"""Command-line interface for running and administering the API."""

import typer
import uvicorn
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from minimal_api.core.services import DbManageService, DbSessionService, UserManagementService
from minimal_api.runtime.context import get_config

console = Console()

app = typer.Typer(
    name="minimal-api",
    help="Minimal API - run the server and manage the database and accounts",
    rich_markup_mode="rich",
    no_args_is_help=True,
)
users_app = typer.Typer(help="Account administration commands", no_args_is_help=True)
app.add_typer(users_app, name="users")


def get_database_service() -> DbSessionService:
    return DbSessionService()


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Host to bind, defaults to app.host"),
    port: int | None = typer.Option(None, help="Port to bind, defaults to app.port"),
    reload: bool = typer.Option(False, help="Enable auto-reload on code changes"),
) -> None:
    """Start the HTTP server."""
    cfg = get_config().app
    host = host or cfg.host
    port = port or cfg.port
    console.print(
        Panel.fit(
            f"[bold green]Starting Minimal API[/bold green] on http://{host}:{port}",
            border_style="green",
        )
    )
    uvicorn.run(
        "minimal_api.api.http.app:app",
        host=host,
        port=port,
        reload=reload,
        access_log=False,  # Request logging middleware covers this
    )


@app.command(name="init-db")
def init_db(
    reset: bool = typer.Option(False, "--reset", help="Drop every table first"),
) -> None:
    """Create the database tables."""
    manager = DbManageService(get_database_service().engine)
    if reset:
        if not typer.confirm("Drop all tables and their data?"):
            raise typer.Abort()
        manager.drop_all()
    manager.create_all()
    console.print("[green]Database tables are ready[/green]")


@users_app.command(name="list")
def list_users() -> None:
    """Show every account with its lockout state."""
    with get_database_service().session_scope() as session:
        users = UserManagementService(session).list_users()

    if not users:
        console.print("[yellow]No users registered[/yellow]")
        return

    table = Table(title="Users")
    table.add_column("Username", style="cyan")
    table.add_column("Email")
    table.add_column("Failed logins", justify="right")
    table.add_column("Locked out")
    for user in users:
        table.add_row(
            user.username,
            user.email,
            str(user.access_failed_count),
            "[red]yes[/red]" if user.is_locked_out() else "no",
        )
    console.print(table)


@users_app.command(name="unlock")
def unlock_user(username: str = typer.Argument(..., help="Account to unlock")) -> None:
    """Clear the lockout and failed login counter of an account."""
    with get_database_service().session_scope() as session:
        unlocked = UserManagementService(session).unlock_user(username)

    if not unlocked:
        console.print(f"[red]User '{username}' not found[/red]")
        raise typer.Exit(1)
    console.print(f"[green]User '{username}' unlocked[/green]")


if __name__ == "__main__":
    app()
