"""Weather service combining the live API with the synthetic fallback."""

import logging
import random
from datetime import datetime
from typing import List, Optional

import httpx

from disaster_risk.weather.client import OpenWeatherClient, WeatherPayload
from disaster_risk.weather.models import (
    CurrentConditions, CurrentWeatherPayload, DataSource, ForecastPoint,
    OneCallHourly, OneCallPayload, WeatherSnapshot
)
from disaster_risk.weather.synthetic import (
    generate_atmospheric, generate_current_conditions, generate_forecast
)

logger = logging.getLogger(__name__)

MS_TO_KMH = 3.6
FORECAST_HOURS = 24


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _hourly_precipitation(rain: Optional[dict], snow: Optional[dict] = None) -> float:
    return (rain or {}).get("1h") or (snow or {}).get("1h") or 0.0


def extract_current_conditions(payload: WeatherPayload, rng: random.Random) -> CurrentConditions:
    """Normalise a decoded weather payload into CurrentConditions.

    Wind is converted from m/s to km/h and visibility from metres to km.

    Args:
        payload: One Call or basic current-weather payload
        rng: Random source, used for the UV index the basic API lacks

    Returns:
        CurrentConditions with every field inside its physical range
    """
    if isinstance(payload, OneCallPayload):
        current = payload.current
        return CurrentConditions(
            temperature=round(current.temp, 1),
            humidity=_clamp(current.humidity, 0, 100),
            pressure=current.pressure,
            wind_speed=max(0.0, round(current.wind_speed * MS_TO_KMH, 1)),
            wind_direction=_clamp(current.wind_deg or 0, 0, 360),
            precipitation=_hourly_precipitation(current.rain, current.snow),
            visibility=current.visibility / 1000 if current.visibility else 10.0,
            uv_index=_clamp(current.uvi or 0, 0, 11),
        )

    if isinstance(payload, CurrentWeatherPayload):
        wind = payload.wind
        return CurrentConditions(
            temperature=round(payload.main.temp, 1),
            humidity=_clamp(payload.main.humidity, 0, 100),
            pressure=payload.main.pressure,
            wind_speed=max(0.0, round(wind.speed * MS_TO_KMH, 1)) if wind else 0.0,
            wind_direction=_clamp(wind.deg or 0, 0, 360) if wind else 0,
            precipitation=_hourly_precipitation(payload.rain),
            visibility=payload.visibility / 1000 if payload.visibility else 10.0,
            # The basic API does not report UV
            uv_index=round(rng.random() * 11, 1),
        )

    raise TypeError(f"Unsupported weather payload: {type(payload).__name__}")


def _forecast_point(hour: int, entry: OneCallHourly) -> ForecastPoint:
    return ForecastPoint(
        hour=hour,
        temperature=round(entry.temp, 1),
        humidity=_clamp(entry.humidity, 0, 100),
        pressure=entry.pressure,
        wind_speed=max(0.0, round(entry.wind_speed * MS_TO_KMH, 1)),
        precipitation=_hourly_precipitation(entry.rain, entry.snow),
        clouds=_clamp(entry.clouds, 0, 100) if entry.clouds is not None else None,
        uv_index=_clamp(entry.uvi, 0, 11) if entry.uvi is not None else None,
    )


def extract_forecast(payload: WeatherPayload) -> Optional[List[ForecastPoint]]:
    """Take the first 24 hourly entries of a One Call payload.

    Returns:
        24 forecast points, or None when the payload has fewer hours
    """
    if not isinstance(payload, OneCallPayload) or len(payload.hourly) < FORECAST_HOURS:
        return None
    return [_forecast_point(hour, entry) for hour, entry in enumerate(payload.hourly[:FORECAST_HOURS])]


class WeatherService:
    """Service producing a weather snapshot for a coordinate pair."""

    def __init__(self, client: Optional[OpenWeatherClient] = None, rng: Optional[random.Random] = None):
        """Initialize the weather service.

        Args:
            client: Weather client instance (creates default if None)
            rng: Random source for synthetic data (unseeded if None)
        """
        self.client = client or OpenWeatherClient()
        self.rng = rng or random.Random()

    async def fetch_payload(self, lat: float, lon: float) -> Optional[WeatherPayload]:
        """Fetch the live payload, or None when the API is unavailable."""
        if not self.client.configured:
            logger.warning("No OpenWeatherMap API key configured, using simulated weather")
            return None

        try:
            return await self.client.get_onecall(lat, lon)
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Weather API unavailable for ({lat}, {lon}), using simulated weather: {e}")
            return None

    async def get_snapshot(self, lat: float, lon: float, now: datetime) -> WeatherSnapshot:
        """Get current conditions and a 24 hour forecast.

        Args:
            lat: Latitude in decimal degrees
            lon: Longitude in decimal degrees
            now: Local time at the location, drives the seasonal and diurnal terms

        Returns:
            WeatherSnapshot tagged with its data source
        """
        payload = await self.fetch_payload(lat, lon)

        if payload is None:
            current = generate_current_conditions(lat, lon, now, self.rng)
            forecast = generate_forecast(lat, self.rng)
            source = DataSource.SIMULATED
        else:
            current = extract_current_conditions(payload, self.rng)
            forecast = extract_forecast(payload)
            if forecast is None:
                logger.info("Live payload has no hourly forecast, synthesizing one")
                forecast = generate_forecast(lat, self.rng)
            source = DataSource.LIVE

        return WeatherSnapshot(
            current=current,
            forecast=forecast,
            atmospheric=generate_atmospheric(lat, current, self.rng),
            source=source,
        )

    async def aclose(self):
        """Close the weather client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
