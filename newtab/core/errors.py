"""
Exception types for the new-tab dashboard.

Per-source failures are raised by the integrations and caught by the
dashboard layer at the narrowest scope. Only CredentialStoreError is
allowed to escape a refresh cycle.
"""

from typing import Optional


class NewTabError(Exception):
    """Base class for dashboard errors."""
    pass


class CredentialStoreError(NewTabError):
    """The credential store itself could not be read or written."""
    pass


class CalendarFetchError(NewTabError):
    """A single calendar request failed (network or HTTP error)."""

    def __init__(self, calendar_id: str, message: str, status: Optional[int] = None):
        self.calendar_id = calendar_id
        self.status = status
        super().__init__(f"{calendar_id}: {message}")


class CredentialExpiredError(CalendarFetchError):
    """The calendar API rejected the bearer token (HTTP 401)."""

    def __init__(self, calendar_id: str, token: str):
        self.token = token
        super().__init__(calendar_id, "credential expired", status=401)


class HistorySourceUnavailable(NewTabError):
    """The browsing-history log could not be read at all."""
    pass


class WeatherUnavailable(NewTabError):
    """The weather forecast could not be loaded."""
    pass
