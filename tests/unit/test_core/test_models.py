"""
Unit tests for the dashboard data models.
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from newtab.core.models import (
    CalendarEvent,
    CalendarRef,
    CanonicalHistoryItem,
    DEFAULT_CALENDAR_COLOR,
    WeatherReport,
)


TZ = ZoneInfo("Asia/Tokyo")


class TestCalendarRef:
    def test_from_api(self):
        ref = CalendarRef.from_api({
            "id": "team@group.calendar.google.com",
            "summary": "Team",
            "backgroundColor": "#d50000",
            "selected": True,
        })

        assert ref.id == "team@group.calendar.google.com"
        assert ref.display_color == "#d50000"
        assert ref.visible is True

    def test_unselected_calendar_hidden(self):
        assert CalendarRef.from_api({"id": "x", "selected": False}).visible is False

    def test_missing_selected_counts_as_visible(self):
        assert CalendarRef.from_api({"id": "x"}).visible is True


class TestCalendarEvent:
    def test_timed_event(self):
        event = CalendarEvent.from_api(
            {
                "id": "e1",
                "summary": "Standup",
                "start": {"dateTime": "2025-01-15T09:00:00+09:00"},
                "end": {"dateTime": "2025-01-15T09:15:00+09:00"},
                "htmlLink": "https://calendar.google.com/event?eid=e1",
            },
            "primary",
            "#039be5",
        )

        assert event.all_day is False
        assert event.start == datetime(2025, 1, 15, 9, 0, tzinfo=TZ)
        assert event.end - event.start == timedelta(minutes=15)
        assert event.display_color == "#039be5"
        assert event.source_calendar_id == "primary"

    def test_all_day_event(self):
        event = CalendarEvent.from_api(
            {"id": "h", "start": {"date": "2025-01-15"}, "end": {"date": "2025-01-16"}},
            "holidays",
        )

        assert event.all_day is True
        assert event.start == date(2025, 1, 15)
        assert event.display_color == DEFAULT_CALENDAR_COLOR

    def test_date_time_wins_over_date(self):
        event = CalendarEvent.from_api(
            {"start": {"dateTime": "2025-01-15T18:00:00+09:00", "date": "2025-01-15"}},
            "primary",
        )

        assert event.all_day is False

    def test_no_start_rejected(self):
        with pytest.raises(ValueError):
            CalendarEvent.from_api({"id": "bad", "start": {}}, "primary")

    def test_empty_summary_is_untitled(self):
        event = CalendarEvent.from_api({"summary": "", "start": {"date": "2025-01-15"}}, "primary")

        assert event.title is None

    def test_effective_start_for_all_day(self):
        event = CalendarEvent("primary", date(2025, 1, 15), all_day=True)

        assert event.effective_start(TZ) == datetime(2025, 1, 15, 0, 0, tzinfo=TZ)

    def test_effective_start_for_naive_datetime(self):
        event = CalendarEvent("primary", datetime(2025, 1, 15, 9, 0), all_day=False)

        assert event.effective_start(TZ).tzinfo is TZ

    def test_to_dict(self):
        event = CalendarEvent("primary", date(2025, 1, 15), all_day=True, title="Holiday", id="h")

        assert event.to_dict() == {
            "id": "h",
            "calendar_id": "primary",
            "title": "Holiday",
            "start": "2025-01-15",
            "end": None,
            "all_day": True,
            "color": DEFAULT_CALENDAR_COLOR,
            "location": None,
            "html_link": None,
        }


class TestSerialization:
    def test_history_item(self):
        item = CanonicalHistoryItem(
            "https://claude.ai/chat/1", "Review", datetime(2025, 1, 15, 3, 0, tzinfo=timezone.utc)
        )

        assert item.to_dict() == {
            "url": "https://claude.ai/chat/1",
            "title": "Review",
            "last_visit_time": "2025-01-15T03:00:00+00:00",
        }

    def test_weather_rounded(self):
        report = WeatherReport(
            temperature=7.6, weather_code=3, temperature_max=10.2, temperature_min=-0.6,
            precipitation_probability=40,
        )

        assert report.to_dict() == {
            "temperature": 8,
            "weather_code": 3,
            "temperature_max": 10,
            "temperature_min": -1,
            "precipitation_probability": 40,
        }
