"""
Unit tests for the dashboard and auth API routers.
The DashboardService dependency is overridden with a mock.
"""

import pytest
from datetime import date, datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock
from zoneinfo import ZoneInfo

import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent.parent))

from fastapi.testclient import TestClient

from backend.dependencies import get_dashboard_service
from backend.main import app
from newtab.core.errors import CredentialStoreError
from newtab.core.models import (
    AggregatedSchedule,
    Authenticated,
    CalendarEvent,
    CanonicalHistoryItem,
    DashboardSnapshot,
    HISTORY_UNAVAILABLE,
    NotConnected,
    ServiceDefinition,
    Unauthenticated,
    WeatherReport,
)


TZ = ZoneInfo("Asia/Tokyo")
TODAY = date(2025, 1, 15)
TOMORROW = date(2025, 1, 16)

SERVICES = [
    ServiceDefinition("chatgpt", ("chatgpt.com",), "chatgptHistory", name="ChatGPT"),
    ServiceDefinition("claude", ("claude.ai",), "claudeHistory", name="Claude"),
]

SCHEDULES = {
    "today": AggregatedSchedule(day=TODAY, events=(
        CalendarEvent("primary", TODAY, all_day=True, title="Holiday", id="h"),
        CalendarEvent(
            "work", datetime(2025, 1, 15, 9, 0, tzinfo=TZ), all_day=False,
            title="Standup", id="s", display_color="#d50000",
        ),
    )),
    "tomorrow": AggregatedSchedule(day=TOMORROW),
}

HISTORY = {
    "chatgpt": [
        CanonicalHistoryItem("https://chatgpt.com/c/1", "Plan", datetime(2025, 1, 15, 0, 0, tzinfo=timezone.utc)),
    ],
    "claude": HISTORY_UNAVAILABLE,
}

WEATHER = WeatherReport(temperature=8.4, weather_code=2, temperature_max=11.2, temperature_min=1.9)


@pytest.fixture
def service():
    mock = MagicMock()
    mock.services = SERVICES
    mock.refresh_schedule = AsyncMock(return_value=SCHEDULES)
    mock.refresh_history = AsyncMock(return_value=HISTORY)
    mock.refresh_weather = AsyncMock(return_value=WEATHER)
    mock.snapshot = AsyncMock(return_value=DashboardSnapshot(
        generated_at=datetime(2025, 1, 15, 1, 0, tzinfo=timezone.utc),
        schedules=SCHEDULES,
        history=HISTORY,
        weather=None,
    ))
    mock.auth_state = AsyncMock(return_value=Authenticated("t"))
    mock.login = AsyncMock(return_value=Authenticated("t"))
    mock.logout = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def client(service):
    app.dependency_overrides[get_dashboard_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestScheduleEndpoint:
    def test_events_in_order(self, client):
        response = client.get("/dashboard/schedule")

        assert response.status_code == 200
        today = response.json()["today"]
        assert today["connected"] is True
        assert today["day"] == "2025-01-15"
        assert [e["title"] for e in today["events"]] == ["Holiday", "Standup"]
        assert today["events"][0]["all_day"] is True
        assert today["events"][1]["color"] == "#d50000"
        assert response.json()["tomorrow"]["events"] == []

    def test_not_connected(self, client, service):
        service.refresh_schedule.return_value = {
            "today": NotConnected(day=TODAY),
            "tomorrow": NotConnected(day=TOMORROW),
        }

        body = client.get("/dashboard/schedule").json()

        assert body["today"]["connected"] is False
        assert body["tomorrow"]["connected"] is False

    def test_credential_store_error(self, client, service):
        service.refresh_schedule.side_effect = CredentialStoreError("unreadable")

        assert client.get("/dashboard/schedule").status_code == 500


class TestHistoryEndpoint:
    def test_available_and_unavailable(self, client):
        body = client.get("/dashboard/history").json()

        chatgpt, claude = body["services"]
        assert chatgpt["service_id"] == "chatgpt"
        assert chatgpt["container_id"] == "chatgptHistory"
        assert chatgpt["available"] is True
        assert chatgpt["items"] == [{
            "url": "https://chatgpt.com/c/1",
            "title": "Plan",
            "last_visit_time": "2025-01-15T00:00:00+00:00",
        }]
        assert claude["available"] is False
        assert claude["items"] == []


class TestWeatherEndpoint:
    def test_report(self, client):
        body = client.get("/dashboard/weather").json()

        assert body["available"] is True
        assert body["temperature"] == 8
        assert body["temperature_max"] == 11

    def test_unavailable(self, client, service):
        service.refresh_weather.return_value = None

        body = client.get("/dashboard/weather").json()

        assert body == {
            "available": False,
            "temperature": None,
            "weather_code": None,
            "temperature_max": None,
            "temperature_min": None,
            "precipitation_probability": None,
        }


class TestDashboardEndpoint:
    def test_combined(self, client):
        body = client.get("/dashboard/today").json()

        assert body["generated_at"] == "2025-01-15T01:00:00+00:00"
        assert len(body["schedule"]["today"]["events"]) == 2
        assert [s["service_id"] for s in body["history"]["services"]] == ["chatgpt", "claude"]
        assert body["weather"]["available"] is False


class TestAuthEndpoints:
    def test_status_connected(self, client):
        assert client.get("/auth/status").json()["status"] == "connected"

    def test_status_not_connected(self, client, service):
        service.auth_state.return_value = Unauthenticated()

        assert client.get("/auth/status").json()["status"] == "not_connected"

    def test_login_failure(self, client, service):
        service.login.return_value = Unauthenticated("flow failed")

        assert client.post("/auth/login").status_code == 401

    def test_logout(self, client, service):
        response = client.post("/auth/logout")

        assert response.json()["status"] == "not_connected"
        service.logout.assert_awaited_once()
