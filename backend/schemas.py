"""
Pydantic schemas for API response validation.

These schemas provide:
- Type safety for API outputs
- OpenAPI documentation generation
- Serialization of the dashboard outcome types

Design note: a schedule day carries `connected` and a history service
carries `available`, so the new-tab page can tell "nothing today" apart
from "not connected" and "could not load".
"""

from typing import Dict, List, Optional
from pydantic import BaseModel


# =============================================================================
# Calendar Schemas
# =============================================================================

class EventResponse(BaseModel):
    """Calendar event data returned from API."""
    id: Optional[str] = None
    calendar_id: str
    title: Optional[str] = None
    start: str
    end: Optional[str] = None
    all_day: bool
    color: str
    location: Optional[str] = None
    html_link: Optional[str] = None


class ScheduleDayResponse(BaseModel):
    """One day of the merged schedule."""
    day: Optional[str] = None
    connected: bool
    events: List[EventResponse] = []


class ScheduleResponse(BaseModel):
    """Today's and tomorrow's schedules."""
    today: ScheduleDayResponse
    tomorrow: ScheduleDayResponse


# =============================================================================
# History Schemas
# =============================================================================

class HistoryItemResponse(BaseModel):
    """A deduplicated history entry."""
    url: str
    title: str
    last_visit_time: str


class ServiceHistoryResponse(BaseModel):
    """History list for one service."""
    service_id: str
    name: str
    container_id: str
    available: bool
    items: List[HistoryItemResponse] = []


class HistoryResponse(BaseModel):
    """History for every configured service, in display order."""
    services: List[ServiceHistoryResponse]


# =============================================================================
# Weather Schemas
# =============================================================================

class WeatherResponse(BaseModel):
    """Current weather; `available` is False when it could not be loaded."""
    available: bool
    temperature: Optional[int] = None
    weather_code: Optional[int] = None
    temperature_max: Optional[int] = None
    temperature_min: Optional[int] = None
    precipitation_probability: Optional[int] = None


# =============================================================================
# Dashboard Schemas
# =============================================================================

class DashboardResponse(BaseModel):
    """Complete new-tab dashboard."""
    generated_at: str
    schedule: ScheduleResponse
    history: HistoryResponse
    weather: WeatherResponse


class StatusResponse(BaseModel):
    """Generic status message."""
    status: str
    detail: Optional[Dict[str, str]] = None
