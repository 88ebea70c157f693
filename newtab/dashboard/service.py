"""
Dashboard pipeline for the new-tab page.

Wires the credential provider, calendar client, history source and
weather client to the aggregator and classifier. Each refresh method is
one independent cycle: it owns its results and keeps nothing between
calls except the collaborators themselves.
"""

import asyncio
import logging
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional

from newtab.core.config import Config
from newtab.core.errors import HistorySourceUnavailable, WeatherUnavailable
from newtab.core.models import (
    AuthState,
    Authenticated,
    DashboardSnapshot,
    NotConnected,
    ScheduleOutcome,
    ServiceDefinition,
    ServiceHistory,
    WeatherReport,
)
from newtab.dashboard.aggregator import EventAggregator
from newtab.dashboard.history import HistoryClassifier, mark_unavailable
from newtab.integrations.browser_history import ChromeHistorySource
from newtab.integrations.google_auth import GoogleCredentialProvider
from newtab.integrations.google_calendar import GoogleCalendarClient
from newtab.integrations.weather import OpenMeteoClient

logger = logging.getLogger(__name__)

SCHEDULE_DAYS = ("today", "tomorrow")


class DashboardService:
    """
    Central refresh logic for the dashboard.

    Produces the schedule (today and tomorrow), the per-service AI chat
    history and the weather report, each on demand.
    """

    def __init__(
        self,
        config: Config,
        credentials: GoogleCredentialProvider,
        calendar_client: GoogleCalendarClient,
        history_source: ChromeHistorySource,
        weather_client: OpenMeteoClient,
    ):
        self.config = config
        self.credentials = credentials
        self.calendar_client = calendar_client
        self.history_source = history_source
        self.weather_client = weather_client
        self.tz = config.get_timezone()

        self.aggregator = EventAggregator(
            fetcher=calendar_client,
            credentials=credentials,
            tz=self.tz,
            fetch_timeout=float(self._pref("fetch_timeout_seconds", 10)),
            default_color=self._pref("default_calendar_color", "#4285f4"),
        )
        self.classifier = HistoryClassifier(
            excluded_path_markers=self._pref(
                "excluded_path_markers", ["/login", "/auth", "/settings", "/recents"]
            ),
            exclude_root_paths=bool(self._pref("exclude_root_paths", True)),
            title_max_length=int(self._pref("title_max_length", 35)),
            assume_ordered_by_recency=bool(self._pref("assume_ordered_by_recency", True)),
        )

    @classmethod
    def from_config(cls, config: Optional[Config] = None) -> 'DashboardService':
        """Build a service with the production integrations."""
        config = config if config else Config()
        timeout = float(config.get("fetch_timeout_seconds", "preferences", 10))
        return cls(
            config=config,
            credentials=GoogleCredentialProvider(config.get_credentials_dir()),
            calendar_client=GoogleCalendarClient(timeout=timeout),
            history_source=ChromeHistorySource(config.get_history_db_path()),
            weather_client=OpenMeteoClient(
                latitude=config.get("weather_latitude"),
                longitude=config.get("weather_longitude"),
                timezone_name=config.get("timezone", "settings", "Asia/Tokyo"),
            ),
        )

    def _pref(self, key: str, default):
        return self.config.get(key, "preferences", default)

    @property
    def services(self) -> List[ServiceDefinition]:
        return self.config.get_services()

    def _today(self, now: Optional[datetime]) -> date:
        if now is None:
            now = datetime.now(timezone.utc)
        return now.astimezone(self.tz).date()

    async def auth_state(self, interactive: bool = False) -> AuthState:
        """Ask the credential provider for a token without blocking the loop."""
        return await asyncio.to_thread(self.credentials.auth_state, interactive)

    async def refresh_schedule(
        self,
        now: Optional[datetime] = None,
        auth: Optional[AuthState] = None,
    ) -> Dict[str, ScheduleOutcome]:
        """
        Aggregate today's and tomorrow's events across all visible calendars.

        Args:
            now: Current instant (defaults to now)
            auth: Auth state to use; acquired silently when omitted

        Returns:
            {"today": outcome, "tomorrow": outcome}
        """
        today = self._today(now)
        days = [today, today + timedelta(days=1)]

        if auth is None:
            auth = await self.auth_state()
        if not isinstance(auth, Authenticated):
            logger.info("Calendar not connected")
            return {
                label: NotConnected(day=day, reason=auth.reason)
                for label, day in zip(SCHEDULE_DAYS, days)
            }

        calendars = await asyncio.to_thread(self.calendar_client.list_calendars, auth.token)
        visible = [calendar for calendar in calendars if calendar.visible]

        outcomes = await self.aggregator.aggregate_days(auth, visible, days)
        return {label: outcomes[day] for label, day in zip(SCHEDULE_DAYS, days)}

    async def refresh_history(self, now: Optional[datetime] = None) -> Dict[str, ServiceHistory]:
        """
        Read the history log and classify it per service.

        A history log that cannot be read marks every service unavailable.
        """
        if now is None:
            now = datetime.now(timezone.utc)
        since = now - timedelta(days=int(self._pref("history_window_days", 7)))
        services = self.services

        try:
            raw_history = await asyncio.to_thread(
                self.history_source.search,
                "",
                since,
                int(self._pref("history_max_results", 1000)),
            )
        except HistorySourceUnavailable as e:
            logger.error(f"History log unavailable: {e}")
            return mark_unavailable(services)

        return self.classifier.classify(
            raw_history,
            services,
            (since, now),
            int(self._pref("per_service_limit", 30)),
        )

    async def refresh_weather(self) -> Optional[WeatherReport]:
        """Current weather, or None when the forecast could not be loaded."""
        try:
            return await asyncio.to_thread(self.weather_client.fetch)
        except WeatherUnavailable as e:
            logger.warning(f"Weather unavailable: {e}")
            return None

    async def snapshot(self, now: Optional[datetime] = None) -> DashboardSnapshot:
        """Run all three refreshes concurrently."""
        if now is None:
            now = datetime.now(timezone.utc)

        schedules, history, weather = await asyncio.gather(
            self.refresh_schedule(now),
            self.refresh_history(now),
            self.refresh_weather(),
        )
        return DashboardSnapshot(
            generated_at=now,
            schedules=schedules,
            history=history,
            weather=weather,
        )

    async def login(self) -> AuthState:
        """Run the interactive consent flow if needed."""
        return await self.auth_state(interactive=True)

    async def logout(self) -> None:
        await asyncio.to_thread(self.credentials.logout)
