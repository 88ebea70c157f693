"""
Dashboard API endpoints for the new-tab page.

Each endpoint runs one refresh cycle through the DashboardService, so the
page can poll schedule, history and weather on independent timers.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException

from backend.dependencies import get_dashboard_service
from backend.schemas import (
    DashboardResponse,
    EventResponse,
    HistoryItemResponse,
    HistoryResponse,
    ScheduleDayResponse,
    ScheduleResponse,
    ServiceHistoryResponse,
    WeatherResponse,
)
from newtab.core.errors import CredentialStoreError
from newtab.core.models import (
    AggregatedSchedule,
    ScheduleOutcome,
    ServiceDefinition,
    ServiceHistory,
    WeatherReport,
)
from newtab.dashboard.service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


def _schedule_day(outcome: ScheduleOutcome) -> ScheduleDayResponse:
    day = outcome.day.isoformat() if outcome.day else None
    if not isinstance(outcome, AggregatedSchedule):
        return ScheduleDayResponse(day=day, connected=False)
    return ScheduleDayResponse(
        day=day,
        connected=True,
        events=[EventResponse(**event.to_dict()) for event in outcome.events],
    )


def _schedule_response(schedules: Dict[str, ScheduleOutcome]) -> ScheduleResponse:
    return ScheduleResponse(
        today=_schedule_day(schedules["today"]),
        tomorrow=_schedule_day(schedules["tomorrow"]),
    )


def _history_response(
    history: Dict[str, ServiceHistory],
    services: List[ServiceDefinition],
) -> HistoryResponse:
    entries = []
    for service in services:
        outcome = history.get(service.id)
        available = isinstance(outcome, list)
        entries.append(ServiceHistoryResponse(
            service_id=service.id,
            name=service.name,
            container_id=service.display_container,
            available=available,
            items=[HistoryItemResponse(**item.to_dict()) for item in outcome] if available else [],
        ))
    return HistoryResponse(services=entries)


def _weather_response(weather: Optional[WeatherReport]) -> WeatherResponse:
    if weather is None:
        return WeatherResponse(available=False)
    return WeatherResponse(available=True, **weather.to_dict())


@router.get("/today", response_model=DashboardResponse)
async def get_dashboard(service: DashboardService = Depends(get_dashboard_service)):
    """
    Get the whole dashboard in one call.

    Aggregates:
    - Today's and tomorrow's merged calendar schedule
    - Per-service AI chat history
    - Current weather
    """
    try:
        snapshot = await service.snapshot(datetime.now(timezone.utc))
    except CredentialStoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to load dashboard: {str(e)}")

    return DashboardResponse(
        generated_at=snapshot.generated_at.isoformat(),
        schedule=_schedule_response(snapshot.schedules),
        history=_history_response(snapshot.history, service.services),
        weather=_weather_response(snapshot.weather),
    )


@router.get("/schedule", response_model=ScheduleResponse)
async def get_schedule(service: DashboardService = Depends(get_dashboard_service)):
    """Merged schedule for today and tomorrow across all visible calendars."""
    try:
        schedules = await service.refresh_schedule()
    except CredentialStoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to load schedule: {str(e)}")
    return _schedule_response(schedules)


@router.get("/history", response_model=HistoryResponse)
async def get_history(service: DashboardService = Depends(get_dashboard_service)):
    """Recent AI chat pages per service."""
    history = await service.refresh_history()
    return _history_response(history, service.services)


@router.get("/weather", response_model=WeatherResponse)
async def get_weather(service: DashboardService = Depends(get_dashboard_service)):
    """Current weather and today's outlook."""
    return _weather_response(await service.refresh_weather())
