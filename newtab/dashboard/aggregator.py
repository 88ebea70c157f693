"""
Calendar aggregation module for the new-tab dashboard.

Fans out one event request per calendar, waits for every request to
settle, then merges the results into a single schedule ordered by start
time. A calendar that fails, times out or reports an expired token
contributes no events and never holds up the others.
"""

import asyncio
import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Any, Dict, List, Protocol, Sequence, Tuple

from newtab.core.errors import CalendarFetchError, CredentialExpiredError
from newtab.core.models import (
    AggregatedSchedule,
    AuthState,
    Authenticated,
    CalendarEvent,
    CalendarRef,
    DEFAULT_CALENDAR_COLOR,
    NotConnected,
    ScheduleOutcome,
)

logger = logging.getLogger(__name__)


class EventFetcher(Protocol):
    def fetch_events(
        self,
        token: str,
        calendar_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> List[Dict[str, Any]]:
        ...


class TokenInvalidator(Protocol):
    def invalidate(self, token: str) -> None:
        ...


def day_bounds(day: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """Local midnight of `day` and of the following day (exclusive end)."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


class EventAggregator:
    """
    Merges events from many calendars into one AggregatedSchedule.

    Holds no per-call state, so overlapping aggregate() calls are safe.
    """

    def __init__(
        self,
        fetcher: EventFetcher,
        credentials: TokenInvalidator,
        tz: tzinfo,
        fetch_timeout: float = 10.0,
        default_color: str = DEFAULT_CALENDAR_COLOR,
    ):
        """
        Initialize aggregator.

        Args:
            fetcher: Per-calendar event source (blocking; run on a worker thread)
            credentials: Store told to drop a token the API rejected
            tz: Viewer's timezone for day boundaries and all-day ordering
            fetch_timeout: Seconds to wait for any single calendar
            default_color: Color for calendars that define none
        """
        self.fetcher = fetcher
        self.credentials = credentials
        self.tz = tz
        self.fetch_timeout = fetch_timeout
        self.default_color = default_color

    async def aggregate(
        self,
        auth: AuthState,
        calendars: Sequence[CalendarRef],
        day: date,
    ) -> ScheduleOutcome:
        """
        Build the schedule for one day.

        Args:
            auth: Caller-owned authentication state
            calendars: Calendars to query, in display-priority order
            day: Target day in the viewer's timezone

        Returns:
            AggregatedSchedule, or NotConnected when auth is not Authenticated
        """
        if not isinstance(auth, Authenticated):
            return NotConnected(day=day, reason=auth.reason)

        if not calendars:
            return self.merge(day, [])

        range_start, range_end = day_bounds(day, self.tz)
        # One worker per calendar so a stalled request never queues another
        executor = ThreadPoolExecutor(
            max_workers=len(calendars), thread_name_prefix="calendar-fetch"
        )
        try:
            results = await asyncio.gather(*(
                self._fetch_calendar(executor, auth.token, calendar, range_start, range_end)
                for calendar in calendars
            ))
        finally:
            executor.shutdown(wait=False)
        return self.merge(day, results)

    def merge(
        self,
        day: date,
        results: Sequence[Sequence[CalendarEvent]],
    ) -> AggregatedSchedule:
        """
        Concatenate per-calendar results and sort by effective start.

        `results` must be in calendar order; the stable sort keeps that
        order (then each calendar's own order) for events starting together.
        """
        events = [event for batch in results for event in batch]
        events.sort(key=lambda event: event.effective_start(self.tz))
        return AggregatedSchedule(day=day, events=tuple(events))

    async def _fetch_calendar(
        self,
        executor: Executor,
        token: str,
        calendar: CalendarRef,
        range_start: datetime,
        range_end: datetime,
    ) -> List[CalendarEvent]:
        """Fetch one calendar; every failure becomes an empty list."""
        loop = asyncio.get_running_loop()
        try:
            raw_events = await asyncio.wait_for(
                loop.run_in_executor(
                    executor,
                    self.fetcher.fetch_events, token, calendar.id, range_start, range_end,
                ),
                timeout=self.fetch_timeout,
            )
        except CredentialExpiredError:
            logger.warning(f"Token expired while fetching {calendar.id}; invalidating")
            self.credentials.invalidate(token)
            return []
        except CalendarFetchError as e:
            logger.warning(f"Skipping calendar {calendar.id}: {e}")
            return []
        except asyncio.TimeoutError:
            logger.warning(f"Calendar {calendar.id} timed out after {self.fetch_timeout}s")
            return []
        except Exception as e:
            logger.error(f"Unexpected error fetching {calendar.id}: {e}")
            return []

        return self._to_events(raw_events, calendar)

    def _to_events(
        self,
        raw_events: Sequence[Dict[str, Any]],
        calendar: CalendarRef,
    ) -> List[CalendarEvent]:
        color = calendar.display_color or self.default_color
        events = []
        for raw in raw_events:
            try:
                events.append(CalendarEvent.from_api(raw, calendar.id, color))
            except (ValueError, TypeError, KeyError, AttributeError, OverflowError) as e:
                logger.debug(f"Dropping malformed event from {calendar.id}: {e}")
        return events

    async def aggregate_days(
        self,
        auth: AuthState,
        calendars: Sequence[CalendarRef],
        days: Sequence[date],
    ) -> Dict[date, ScheduleOutcome]:
        """Aggregate several days against the same calendar list."""
        outcomes = await asyncio.gather(*(
            self.aggregate(auth, calendars, day) for day in days
        ))
        return dict(zip(days, outcomes))

