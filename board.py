#!/usr/bin/env python3
"""
New Tab Dashboard - Command Line Interface
Shows the merged calendar schedule, recent AI chat history and weather
"""

import asyncio
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent))

import typer
from rich.console import Console
from rich.live import Live

from newtab.core import Config, Authenticated, CredentialStoreError, DashboardSnapshot
from newtab.core.models import NotConnected
from newtab.dashboard import (
    DashboardFormatter,
    DashboardService,
    RefreshJob,
    RefreshScheduler,
)

# Initialize CLI app and console
app = typer.Typer(help="New Tab Dashboard - your day, your AI chats and the weather at a glance")

console = Console()

# Lazy-loaded service (initialized on first use)
_service: Optional[DashboardService] = None


def get_service() -> DashboardService:
    """Get or initialize the DashboardService instance."""
    global _service
    if _service is None:
        _service = DashboardService.from_config(Config())
    return _service


def get_formatter() -> DashboardFormatter:
    return DashboardFormatter(console, tz=get_service().tz)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def today():
    """
    Show the whole dashboard once

    Displays:
    - Clock and weather
    - Today's and tomorrow's schedule across all calendars
    - Recent ChatGPT, Claude and Gemini conversations
    """
    service = get_service()
    try:
        snapshot = asyncio.run(service.snapshot())
    except CredentialStoreError as e:
        console.print(f"[red]Error loading dashboard: {e}[/red]")
        raise typer.Exit(1)

    get_formatter().render(snapshot, service.services)


@app.command()
def schedule(
    tomorrow: bool = typer.Option(False, "--tomorrow", "-t", help="Show only tomorrow"),
):
    """
    Show the merged calendar schedule

    Examples:
      newtab schedule
      newtab schedule --tomorrow
    """
    try:
        schedules = asyncio.run(get_service().refresh_schedule())
    except CredentialStoreError as e:
        console.print(f"[red]Error loading schedule: {e}[/red]")
        raise typer.Exit(1)

    if tomorrow:
        schedules = {"tomorrow": schedules["tomorrow"]}
    get_formatter().render_schedules(schedules)


@app.command()
def history():
    """Show recent AI chat pages per service"""
    service = get_service()
    result = asyncio.run(service.refresh_history())
    get_formatter().render_history(result, service.services)


@app.command()
def weather():
    """Show the current weather"""
    report = asyncio.run(get_service().refresh_weather())
    console.print(get_formatter().format_weather(report))


@app.command()
def login():
    """
    Connect Google Calendar

    Opens a browser for Google's consent screen the first time.
    """
    state = asyncio.run(get_service().login())
    if isinstance(state, Authenticated):
        console.print("[green]✓[/green] Google Calendar connected")
    else:
        console.print("[red]✗[/red] Google authentication failed. Please try again.")
        raise typer.Exit(1)


@app.command()
def logout():
    """Disconnect Google Calendar and revoke the stored token"""
    asyncio.run(get_service().logout())
    console.print("[green]✓[/green] Google Calendar disconnected")


@app.command()
def watch():
    """
    Keep the dashboard on screen, refreshing each part on its own timer

    Schedule refreshes every 5 minutes while connected, history every
    minute and weather every 30 minutes (see preferences.json).
    Press Ctrl+C to stop.
    """
    service = get_service()
    formatter = get_formatter()
    services = service.services
    snapshot = DashboardSnapshot(generated_at=datetime.now(timezone.utc))

    def connected() -> bool:
        return any(not isinstance(o, NotConnected) for o in snapshot.schedules.values())

    with Live(formatter.format_dashboard(snapshot, services), console=console, screen=False) as live:

        def publisher(attribute: str):
            def publish(result) -> None:
                setattr(snapshot, attribute, result)
                snapshot.generated_at = datetime.now(timezone.utc)
                live.update(formatter.format_dashboard(snapshot, services))
            return publish

        scheduler = RefreshScheduler(jobs=[
            RefreshJob(
                name="schedule",
                interval=service.config.get("calendar_refresh_seconds", "preferences", 300),
                run=service.refresh_schedule,
                publish=publisher("schedules"),
                enabled=connected,
            ),
            RefreshJob(
                name="history",
                interval=service.config.get("history_refresh_seconds", "preferences", 60),
                run=service.refresh_history,
                publish=publisher("history"),
            ),
            RefreshJob(
                name="weather",
                interval=service.config.get("weather_refresh_seconds", "preferences", 1800),
                run=service.refresh_weather,
                publish=publisher("weather"),
            ),
        ])

        try:
            asyncio.run(scheduler.run())
        except KeyboardInterrupt:
            console.print("[dim]Stopped.[/dim]")


if __name__ == "__main__":
    app()
