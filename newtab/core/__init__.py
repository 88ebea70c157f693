"""
Core module for the new-tab dashboard
Contains configuration, error types and model definitions
"""

from .config import Config
from .errors import (
    NewTabError,
    CredentialStoreError,
    CalendarFetchError,
    CredentialExpiredError,
    HistorySourceUnavailable,
    WeatherUnavailable,
)
from .models import (
    CalendarRef,
    CalendarEvent,
    AggregatedSchedule,
    NotConnected,
    Authenticated,
    Unauthenticated,
    HistoryEntry,
    ServiceDefinition,
    CanonicalHistoryItem,
    HistoryUnavailable,
    HISTORY_UNAVAILABLE,
    WeatherReport,
    DashboardSnapshot,
)

__all__ = [
    'Config',
    'NewTabError', 'CredentialStoreError', 'CalendarFetchError',
    'CredentialExpiredError', 'HistorySourceUnavailable', 'WeatherUnavailable',
    'CalendarRef', 'CalendarEvent', 'AggregatedSchedule', 'NotConnected',
    'Authenticated', 'Unauthenticated', 'HistoryEntry', 'ServiceDefinition',
    'CanonicalHistoryItem', 'HistoryUnavailable', 'HISTORY_UNAVAILABLE',
    'WeatherReport', 'DashboardSnapshot',
]
