"""
Command-line interface for the lab request notifier.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from labnotify.api.engine import NotificationEngine
from labnotify.config import Settings
from labnotify.errors import PermissionDenied
from labnotify.schema.notification import NotificationRecord

app = typer.Typer(
    name="labnotify",
    help="Lab request notifier - watch reservation requests for status changes",
)
console = Console()

_KIND_COLORS = {
    "success": "green",
    "error": "red",
    "warning": "yellow",
    "info": "blue",
}


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _engine(env_file: Path | None, console_sink: bool = False) -> NotificationEngine:
    settings = Settings.from_env(env_file)
    return NotificationEngine.from_settings(settings, console=console_sink)


def _print_history(records: tuple[NotificationRecord, ...]) -> None:
    if not records:
        console.print("[dim]No notifications[/dim]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("ID")
    table.add_column("Request")
    table.add_column("Message")
    table.add_column("Date")
    table.add_column("Read")

    for record in records:
        color = _KIND_COLORS.get(record.kind.value, "white")
        table.add_row(
            record.id,
            str(record.request_id),
            f"[{color}]{record.message}[/{color}]",
            record.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            "yes" if record.read else "[bold]no[/bold]",
        )

    console.print(table)


@app.command()
def watch(
    user_id: str = typer.Argument(..., help="Owner whose requests are watched"),
    env_file: Path = typer.Option(None, "--env-file", "-e", help="Path to a .env file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Poll for request changes until interrupted."""
    _setup_logging(verbose)

    async def _watch():
        engine = _engine(env_file, console_sink=True)
        await engine.initialize()
        try:
            await engine.start_session(user_id)
            try:
                await engine.request_permission()
            except PermissionDenied as e:
                console.print(f"[yellow]{e}, notifications go to history only[/yellow]")
            await engine.set_visible(True)
            console.print(
                f"[bold]Watching requests of {user_id}[/bold] "
                f"(every {engine.polling.interval_seconds:g}s, Ctrl+C to stop)"
            )
            while True:
                await asyncio.sleep(3600)
        finally:
            await engine.close()

    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        console.print("\n[dim]Stopped[/dim]")


@app.command()
def refresh(
    user_id: str = typer.Argument(..., help="Owner whose requests are fetched"),
    env_file: Path = typer.Option(None, "--env-file", "-e", help="Path to a .env file"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Run one fetch-detect-persist cycle and show the requests."""
    _setup_logging(verbose)

    async def _refresh():
        engine = _engine(env_file)
        await engine.initialize()
        try:
            # A single run is a cold start: it only records the baseline
            await engine.load_persisted_state(user_id)
            ok = await engine.refresh()
            if not ok:
                console.print("[red]Could not fetch requests[/red]")
                raise typer.Exit(1)

            table = Table(show_header=True, header_style="bold magenta")
            table.add_column("ID")
            table.add_column("Title")
            table.add_column("Status")
            for request in engine.requests:
                table.add_row(str(request.id), request.title, request.status)
            console.print(table)
            console.print(f"[bold]{engine.unread_count}[/bold] unread notifications")
        finally:
            await engine.close()

    asyncio.run(_refresh())


@app.command()
def history(
    user_id: str = typer.Argument(..., help="Owner of the notification history"),
    unread: bool = typer.Option(False, "--unread", "-u", help="Only unread notifications"),
    env_file: Path = typer.Option(None, "--env-file", "-e", help="Path to a .env file"),
):
    """Show stored notifications, newest first."""

    async def _history():
        engine = _engine(env_file)
        await engine.initialize()
        try:
            await engine.load_persisted_state(user_id)
            records = engine.notifications
            if unread:
                records = tuple(r for r in records if not r.read)
            _print_history(records)
        finally:
            await engine.close()

    asyncio.run(_history())


@app.command("mark-read")
def mark_read(
    user_id: str = typer.Argument(..., help="Owner of the notification history"),
    notification_id: str = typer.Argument(..., help="Notification to mark as read"),
    env_file: Path = typer.Option(None, "--env-file", "-e", help="Path to a .env file"),
):
    """Mark a notification as read."""

    async def _mark_read():
        engine = _engine(env_file)
        await engine.initialize()
        try:
            await engine.load_persisted_state(user_id)
            await engine.mark_read(notification_id)
            console.print(f"[bold]{engine.unread_count}[/bold] unread notifications")
        finally:
            await engine.close()

    asyncio.run(_mark_read())


@app.command()
def clear(
    user_id: str = typer.Argument(..., help="Owner of the notification history"),
    env_file: Path = typer.Option(None, "--env-file", "-e", help="Path to a .env file"),
):
    """Delete every stored notification."""

    async def _clear():
        engine = _engine(env_file)
        await engine.initialize()
        try:
            await engine.load_persisted_state(user_id)
            await engine.clear_all()
            console.print("[green]Notifications cleared[/green]")
        finally:
            await engine.close()

    asyncio.run(_clear())


@app.command()
def reset(
    user_id: str = typer.Argument(..., help="Owner whose state is reset"),
    reseed: bool = typer.Option(False, "--reseed", help="Fetch and reseed the state table afterwards"),
    env_file: Path = typer.Option(None, "--env-file", "-e", help="Path to a .env file"),
):
    """Clear last-known states and notifications."""

    async def _reset():
        engine = _engine(env_file)
        await engine.initialize()
        try:
            await engine.load_persisted_state(user_id)
            await engine.reset_notification_state(user_id)
            if reseed:
                # First fetch after a reset is a cold start and only seeds
                if not await engine.refresh():
                    console.print("[red]Could not fetch requests, state left empty[/red]")
                    raise typer.Exit(1)
                count = await engine.reseed_from_current_snapshot()
                console.print(f"[green]Reset and reseeded {count} requests[/green]")
            else:
                console.print("[green]Notification state reset[/green]")
        finally:
            await engine.close()

    asyncio.run(_reset())


if __name__ == "__main__":
    app()
