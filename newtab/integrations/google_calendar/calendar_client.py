"""
Google Calendar API wrapper for the dashboard.

Resolves the viewer's calendar list and fetches one calendar's events for
a time range, authenticating each request with a caller-supplied bearer
token. Every call builds its own service object, so calls may run on
separate threads at the same time.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List

import httplib2
from google.oauth2.credentials import Credentials
from google_auth_httplib2 import AuthorizedHttp
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from newtab.core.errors import CalendarFetchError, CredentialExpiredError
from newtab.core.models import CalendarRef, PRIMARY_CALENDAR

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0  # seconds
MAX_RESULTS_PER_PAGE = 250


class GoogleCalendarClient:
    """
    Read-only Google Calendar client driven by a bearer token.

    The token is supplied per call; the client holds no credential state.
    """

    def __init__(self, timeout: float = DEFAULT_TIMEOUT):
        """
        Initialize the client.

        Args:
            timeout: Socket timeout for each HTTP request, in seconds
        """
        self.timeout = timeout

    def _build_service(self, token: str):
        """Build a Calendar service bound to one token and a fresh HTTP transport."""
        http = AuthorizedHttp(Credentials(token=token), http=httplib2.Http(timeout=self.timeout))
        return build('calendar', 'v3', http=http, cache_discovery=False)

    def list_calendars(self, token: str) -> List[CalendarRef]:
        """
        List the calendars on the viewer's calendar list.

        Deleted calendars are dropped; calendars unchecked in the Calendar UI
        come back with visible=False. Any failure falls back to the primary
        calendar alone.

        Args:
            token: OAuth bearer token

        Returns:
            CalendarRef list in calendar-list order
        """
        try:
            service = self._build_service(token)
            calendars: List[CalendarRef] = []
            page_token = None
            while True:
                result = service.calendarList().list(pageToken=page_token).execute()
                for item in result.get('items', []):
                    if item.get('deleted') or 'id' not in item:
                        continue
                    calendars.append(CalendarRef.from_api(item))
                page_token = result.get('nextPageToken')
                if not page_token:
                    break

            logger.info(f"Resolved {len(calendars)} calendars")
            return calendars

        except HttpError as e:
            logger.error(f"HTTP error listing calendars, using primary only: {e}")
            return [PRIMARY_CALENDAR]
        except Exception as e:
            logger.error(f"Error listing calendars, using primary only: {e}")
            return [PRIMARY_CALENDAR]

    def fetch_events(
        self,
        token: str,
        calendar_id: str,
        range_start: datetime,
        range_end: datetime,
    ) -> List[Dict[str, Any]]:
        """
        Fetch events of one calendar overlapping [range_start, range_end).

        Recurring events are expanded into single instances and returned in
        start order.

        Args:
            token: OAuth bearer token
            calendar_id: Calendar ID
            range_start: Inclusive lower bound (timezone-aware)
            range_end: Exclusive upper bound (timezone-aware)

        Returns:
            List of raw event dictionaries

        Raises:
            CredentialExpiredError: the API answered 401
            CalendarFetchError: any other HTTP or network failure
        """
        try:
            service = self._build_service(token)
            events: List[Dict[str, Any]] = []
            page_token = None
            while True:
                result = service.events().list(
                    calendarId=calendar_id,
                    timeMin=range_start.isoformat(),
                    timeMax=range_end.isoformat(),
                    singleEvents=True,
                    orderBy='startTime',
                    maxResults=MAX_RESULTS_PER_PAGE,
                    pageToken=page_token,
                ).execute()
                events.extend(result.get('items', []))
                page_token = result.get('nextPageToken')
                if not page_token:
                    break

            logger.debug(f"Retrieved {len(events)} events from {calendar_id}")
            return events

        except HttpError as e:
            if e.resp.status == 401:
                raise CredentialExpiredError(calendar_id, token) from e
            raise CalendarFetchError(calendar_id, f"HTTP error: {e}", status=e.resp.status) from e
        except Exception as e:
            raise CalendarFetchError(calendar_id, str(e)) from e
