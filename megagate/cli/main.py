"""megagate CLI - Main commands."""
import asyncio
import logging
from datetime import datetime
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..core.config import GatewayConfig, parse_accounts

app = typer.Typer(
    name="megagate",
    help="Session-authenticated HTTP gateway for remote file storage",
    add_completion=False
)
console = Console()


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def configure_logging(level: str) -> int:
    """Route all logging through rich and return the numeric level."""
    from megagate import setup_logging

    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric,
        format="%(name)s: %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)]
    )
    setup_logging(numeric)
    return numeric


def build_config(
    backend: Optional[str],
    accounts: Optional[List[str]],
    host: Optional[str] = None,
    port: Optional[int] = None,
    static_dir: Optional[str] = None,
) -> GatewayConfig:
    """Environment configuration with command line overrides applied."""
    config = GatewayConfig.from_env()
    if backend:
        config.backend = backend
    if accounts:
        try:
            config.accounts.update(parse_accounts(','.join(accounts)))
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--account")
    if host:
        config.host = host
    if port:
        config.port = port
    if static_dir:
        config.static_dir = static_dir
    return config


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", "-h", help="Interface to bind (default: $HOST or 0.0.0.0)"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port to listen on (default: $PORT or 3000)"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="'memory' or 'package.module:factory'"),
    account: Optional[List[str]] = typer.Option(None, "--account", "-a", help="email:password for the memory backend (repeatable)"),
    static_dir: Optional[str] = typer.Option(None, "--static-dir", help="Directory of static files to serve at /"),
    log_level: Optional[str] = typer.Option(None, "--log-level", "-l", help="Logging level (default: $LOG_LEVEL or INFO)"),
):
    """Start the HTTP gateway."""
    from megagate.app import run

    config = build_config(backend, account, host, port, static_dir)
    config.log_level = configure_logging(log_level or logging.getLevelName(config.log_level))

    console.print(f"[green]Server started: http://{config.host}:{config.port}[/green] (backend: {config.backend})")
    try:
        run(config)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


@app.command()
def check(
    email: str = typer.Option(None, "--email", "-e", help="Account email"),
    password: str = typer.Option(None, "--password", "-p", help="Account password"),
    backend: Optional[str] = typer.Option(None, "--backend", "-b", help="'memory' or 'package.module:factory'"),
    account: Optional[List[str]] = typer.Option(None, "--account", "-a", help="email:password for the memory backend (repeatable)"),
):
    """Verify credentials against the backend and list the root folder."""
    from megagate.core.auth import Credentials
    from megagate.core.exceptions import GatewayError
    from megagate.core.nodes import ListingProjector
    from megagate.core.storage import StorageSessionFactory, load_backend

    if not email:
        email = typer.prompt("Email")
    if not password:
        password = typer.prompt("Password", hide_input=True)

    config = build_config(backend, account)

    async def do_check():
        try:
            sessions = StorageSessionFactory(load_backend(config.backend, config), config.timeouts)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)

        try:
            async with sessions.session(Credentials(email, password)) as session:
                root = await session.root()
                listing = await ListingProjector().project(session, root)
        except GatewayError as e:
            console.print(f"[red]Login failed: {e.message}[/red]")
            raise typer.Exit(1)

        console.print(f"[green]Credentials accepted for {email}[/green]")

        table = Table()
        table.add_column("Type", style="cyan")
        table.add_column("Size", justify="right")
        table.add_column("Name")
        table.add_column("Created")
        table.add_column("Id", style="dim")

        for entry in listing.folders + listing.files:
            type_str = "D" if entry.type == 'folder' else "F"
            size_str = "-" if entry.size is None else f"{entry.size:,}"
            created = datetime.fromtimestamp(entry.created).strftime("%Y-%m-%d %H:%M") if entry.created else "-"
            table.add_row(type_str, size_str, entry.name, created, entry.id)

        console.print(table)

    run_async(do_check())


@app.command()
def version():
    """Show version."""
    from megagate import __version__
    console.print(f"megagate {__version__}")


def main():
    app()


if __name__ == "__main__":
    main()
