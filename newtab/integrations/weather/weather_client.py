"""
Open-Meteo forecast client.

Open-Meteo needs no API key; one request returns the current temperature
and weather code plus today's high, low and precipitation chance.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx

from newtab.core.errors import WeatherUnavailable
from newtab.core.models import WeatherReport

logger = logging.getLogger(__name__)

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"


class OpenMeteoClient:
    """Fetches today's weather for one location."""

    def __init__(
        self,
        latitude: float,
        longitude: float,
        timezone_name: str = "Asia/Tokyo",
        http_client: Optional[httpx.Client] = None,
    ):
        self.latitude = latitude
        self.longitude = longitude
        self.timezone_name = timezone_name
        self._http_client = http_client or httpx.Client(timeout=10.0)

    def _params(self) -> Dict[str, Any]:
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "current": "temperature_2m,weather_code",
            "daily": "temperature_2m_max,temperature_2m_min,precipitation_probability_max",
            "timezone": self.timezone_name,
            "forecast_days": 1,
        }

    def fetch(self) -> WeatherReport:
        """
        Fetch the current report.

        Raises:
            WeatherUnavailable: request failed or the payload was incomplete
        """
        try:
            response = self._http_client.get(FORECAST_URL, params=self._params())
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as e:
            raise WeatherUnavailable(f"Weather request failed: {e}") from e
        except ValueError as e:
            raise WeatherUnavailable("Weather API returned invalid JSON") from e

        try:
            current = payload["current"]
            daily = payload["daily"]
            return WeatherReport(
                temperature=float(current["temperature_2m"]),
                weather_code=int(current["weather_code"]),
                temperature_max=float(daily["temperature_2m_max"][0]),
                temperature_min=float(daily["temperature_2m_min"][0]),
                precipitation_probability=daily.get("precipitation_probability_max", [None])[0],
                fetched_at=datetime.now(timezone.utc),
            )
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise WeatherUnavailable(f"Unexpected weather payload: {e}") from e

    def close(self) -> None:
        self._http_client.close()
