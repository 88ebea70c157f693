"""
Data models for the new-tab dashboard.
Defines calendar, browsing-history and weather structures plus the
outcome values the dashboard pipeline hands to presentation.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, tzinfo
from typing import Any, Dict, List, Optional, Tuple, Union

from dateutil import parser as date_parser


DEFAULT_CALENDAR_COLOR = "#4285f4"


@dataclass(frozen=True)
class CalendarRef:
    """A calendar the viewer can see, as resolved from the calendar list"""
    id: str
    display_color: Optional[str] = None
    visible: bool = True
    summary: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'CalendarRef':
        """Create CalendarRef from a calendarList entry"""
        return cls(
            id=data['id'],
            display_color=data.get('backgroundColor'),
            visible=data.get('selected') is not False,
            summary=data.get('summary'),
        )


PRIMARY_CALENDAR = CalendarRef(id='primary', summary='Primary')


@dataclass(frozen=True)
class CalendarEvent:
    """
    A single event returned by one calendar.

    `start` holds either a date (all-day event) or a datetime, never both.
    """
    source_calendar_id: str
    start: Union[date, datetime]
    all_day: bool
    title: Optional[str] = None
    end: Optional[Union[date, datetime]] = None
    display_color: str = DEFAULT_CALENDAR_COLOR
    id: Optional[str] = None
    location: Optional[str] = None
    html_link: Optional[str] = None

    @classmethod
    def from_api(
        cls,
        data: Dict[str, Any],
        calendar_id: str,
        display_color: Optional[str] = None,
    ) -> 'CalendarEvent':
        """
        Create CalendarEvent from a raw Calendar API event resource.

        Raises:
            ValueError: if the event carries no usable start
        """
        start, all_day = cls._parse_boundary(data.get('start'))
        if start is None:
            raise ValueError(f"Event {data.get('id')!r} has no start")

        end = None
        if data.get('end'):
            end, _ = cls._parse_boundary(data['end'])

        return cls(
            source_calendar_id=calendar_id,
            start=start,
            all_day=all_day,
            title=data.get('summary') or None,
            end=end,
            display_color=display_color or DEFAULT_CALENDAR_COLOR,
            id=data.get('id'),
            location=data.get('location'),
            html_link=data.get('htmlLink'),
        )

    @staticmethod
    def _parse_boundary(boundary: Any) -> Tuple[Optional[Union[date, datetime]], bool]:
        """Parse a {dateTime} or {date} boundary; dateTime wins when both exist"""
        if not isinstance(boundary, dict):
            return None, False
        if boundary.get('dateTime'):
            return date_parser.isoparse(boundary['dateTime']), False
        if boundary.get('date'):
            return date.fromisoformat(boundary['date']), True
        return None, False

    def effective_start(self, tz: tzinfo) -> datetime:
        """Instant used for ordering: the date-time, or 00:00 of the all-day date"""
        if self.all_day:
            return datetime.combine(self.start, time.min, tzinfo=tz)
        if self.start.tzinfo is None:
            return self.start.replace(tzinfo=tz)
        return self.start

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'calendar_id': self.source_calendar_id,
            'title': self.title,
            'start': self.start.isoformat(),
            'end': self.end.isoformat() if self.end else None,
            'all_day': self.all_day,
            'color': self.display_color,
            'location': self.location,
            'html_link': self.html_link,
        }


@dataclass(frozen=True)
class AggregatedSchedule:
    """All events for one day across every calendar, sorted by start"""
    day: date
    events: Tuple[CalendarEvent, ...] = ()

    def __len__(self) -> int:
        return len(self.events)

    def __iter__(self):
        return iter(self.events)


@dataclass(frozen=True)
class NotConnected:
    """Schedule outcome when no usable credential exists"""
    day: Optional[date] = None
    reason: str = "not connected"


ScheduleOutcome = Union[AggregatedSchedule, NotConnected]


@dataclass(frozen=True)
class Authenticated:
    token: str


@dataclass(frozen=True)
class Unauthenticated:
    reason: str = "no credential"


AuthState = Union[Authenticated, Unauthenticated]


@dataclass(frozen=True)
class HistoryEntry:
    """One row of the browser's history log"""
    url: str
    last_visit_time: datetime
    title: Optional[str] = None


@dataclass(frozen=True)
class ServiceDefinition:
    """A web service whose history is shown in its own list"""
    id: str
    match_domains: Tuple[str, ...]
    display_container: str
    name: str = ""
    title_suffix_pattern: Optional[str] = None
    excluded_path_markers: Optional[Tuple[str, ...]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ServiceDefinition':
        """Create ServiceDefinition from a services.json entry"""
        markers = data.get('excluded_path_markers')
        return cls(
            id=data['id'],
            match_domains=tuple(d.lower() for d in data.get('domains', [])),
            display_container=data.get('container_id', f"{data['id']}History"),
            name=data.get('name', data['id']),
            title_suffix_pattern=data.get('title_suffix_pattern'),
            excluded_path_markers=tuple(markers) if markers is not None else None,
        )


@dataclass(frozen=True)
class CanonicalHistoryItem:
    """A deduplicated history entry ready for display"""
    canonical_url: str
    display_title: str
    last_visit_time: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            'url': self.canonical_url,
            'title': self.display_title,
            'last_visit_time': self.last_visit_time.isoformat(),
        }


@dataclass(frozen=True)
class HistoryUnavailable:
    """Marker for a service whose history could not be loaded"""
    reason: str = "history source unavailable"


HISTORY_UNAVAILABLE = HistoryUnavailable()

ServiceHistory = Union[List[CanonicalHistoryItem], HistoryUnavailable]


@dataclass(frozen=True)
class WeatherReport:
    """Current conditions and today's outlook"""
    temperature: float
    weather_code: int
    temperature_max: float
    temperature_min: float
    precipitation_probability: Optional[int] = None
    fetched_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'temperature': round(self.temperature),
            'weather_code': self.weather_code,
            'temperature_max': round(self.temperature_max),
            'temperature_min': round(self.temperature_min),
            'precipitation_probability': self.precipitation_probability,
        }


@dataclass
class DashboardSnapshot:
    """Everything one full refresh produced, keyed the way presentation needs it"""
    generated_at: datetime
    schedules: Dict[str, ScheduleOutcome] = field(default_factory=dict)
    history: Dict[str, ServiceHistory] = field(default_factory=dict)
    weather: Optional[WeatherReport] = None
