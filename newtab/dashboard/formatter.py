"""
Rich formatter module for the new-tab dashboard.

Renders the clock, weather, the two-day schedule and the per-service AI
chat history as terminal panels.
"""

from datetime import datetime, timezone, tzinfo
from typing import Dict, List, Optional

from rich.console import Console, Group
from rich.columns import Columns
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from newtab.core.models import (
    DashboardSnapshot,
    NotConnected,
    ScheduleOutcome,
    ServiceDefinition,
    ServiceHistory,
    WeatherReport,
)

SCHEDULE_TITLES = {
    "today": "Today",
    "tomorrow": "Tomorrow",
}

NO_TITLE = "(No title)"


class DashboardFormatter:
    """
    Rich-based formatter for the dashboard.

    Distinguishes "not connected" from "no events" and "could not load"
    from "no history" so each state reads differently on screen.
    """

    def __init__(self, console: Optional[Console] = None, tz: Optional[tzinfo] = None):
        """
        Initialize formatter.

        Args:
            console: Rich Console instance (creates default if not provided)
            tz: Timezone for displayed times (defaults to UTC)
        """
        self.console = console or Console()
        self.tz = tz or timezone.utc

    def format_header(self, now: datetime, weather: Optional[WeatherReport]) -> Panel:
        """Clock plus today's weather."""
        local = now.astimezone(self.tz)
        content = Text()
        content.append(local.strftime("%H:%M"), style="bold")
        content.append(f"  {local.strftime('%A, %B %d')}\n", style="dim")
        content.append_text(self.format_weather(weather))

        return Panel(
            content,
            title="[bold]New Tab[/bold]",
            title_align="center",
            border_style="blue",
            padding=(0, 2),
        )

    def format_weather(self, weather: Optional[WeatherReport]) -> Text:
        if weather is None:
            return Text("--°C  high --°  low --°  rain --%", style="dim")
        rain = (
            f"{weather.precipitation_probability}%"
            if weather.precipitation_probability is not None
            else "--%"
        )
        return Text(
            f"{round(weather.temperature)}°C  "
            f"high {round(weather.temperature_max)}°  "
            f"low {round(weather.temperature_min)}°  "
            f"rain {rain}"
        )

    def format_schedule(self, label: str, outcome: ScheduleOutcome) -> Panel:
        """
        Create timeline panel for one day.

        Args:
            label: "today" or "tomorrow"
            outcome: Aggregated schedule or NotConnected
        """
        title = f"[bold]{SCHEDULE_TITLES.get(label, label)}[/bold]"

        if isinstance(outcome, NotConnected):
            content = Text("Connect Google Calendar (newtab login)", style="yellow", justify="center")
            return Panel(content, title=title, border_style="cyan", padding=(0, 1))

        if not outcome.events:
            content = Text("No events", style="dim", justify="center")
            return Panel(content, title=title, border_style="cyan", padding=(0, 1))

        table = Table(show_header=False, box=None, padding=(0, 1), expand=True)
        table.add_column("Bar", width=1)
        table.add_column("Time", width=7, no_wrap=True)
        table.add_column("Title", ratio=1)

        for event in outcome.events:
            if event.all_day:
                time_str = "[cyan]All day[/cyan]"
            else:
                time_str = f"[cyan]{event.effective_start(self.tz).astimezone(self.tz).strftime('%H:%M')}[/cyan]"
            table.add_row(
                f"[{event.display_color}]┃[/]",
                time_str,
                Text(event.title or NO_TITLE),
            )

        return Panel(table, title=title, border_style="cyan", padding=(0, 1))

    def format_history(self, service: ServiceDefinition, outcome: ServiceHistory) -> Panel:
        """Create history panel for one service."""
        title = f"[bold]{service.name or service.id}[/bold]"

        if not isinstance(outcome, list):
            content = Text("Could not load history", style="red", justify="center")
            return Panel(content, title=title, border_style="red", padding=(0, 1))

        if not outcome:
            content = Text("No history", style="dim", justify="center")
            return Panel(content, title=title, border_style="magenta", padding=(0, 1))

        table = Table(show_header=False, box=None, padding=(0, 1), expand=True)
        table.add_column("Title", ratio=1)
        table.add_column("Date", width=6, justify="right")

        for item in outcome:
            date_str = item.last_visit_time.astimezone(self.tz).strftime("%b %d")
            table.add_row(
                Text(item.display_title, style=f"link {item.canonical_url}"),
                f"[dim]{date_str}[/dim]",
            )

        return Panel(table, title=title, border_style="magenta", padding=(0, 1))

    def format_dashboard(
        self,
        snapshot: DashboardSnapshot,
        services: List[ServiceDefinition],
    ) -> Group:
        schedule_panels = [
            self.format_schedule(label, outcome)
            for label, outcome in snapshot.schedules.items()
        ]
        history_panels = [
            self.format_history(service, snapshot.history[service.id])
            for service in services
            if service.id in snapshot.history
        ]
        return Group(
            self.format_header(snapshot.generated_at, snapshot.weather),
            Columns(schedule_panels, equal=True, expand=True),
            Columns(history_panels, equal=True, expand=True),
        )

    def render(self, snapshot: DashboardSnapshot, services: List[ServiceDefinition]) -> None:
        """Print the whole dashboard."""
        self.console.print(self.format_dashboard(snapshot, services))

    def render_schedules(self, schedules: Dict[str, ScheduleOutcome]) -> None:
        for label, outcome in schedules.items():
            self.console.print(self.format_schedule(label, outcome))

    def render_history(
        self,
        history: Dict[str, ServiceHistory],
        services: List[ServiceDefinition],
    ) -> None:
        for service in services:
            if service.id in history:
                self.console.print(self.format_history(service, history[service.id]))
