"""Synthetic weather used when the live weather API is unavailable.

The generators model temperature from latitude, season and time of day,
with bounded noise on top. They are not a forecast; they only keep the
dashboard populated with physically plausible numbers.
"""

import math
import random
from datetime import datetime
from typing import List

from disaster_risk.weather.models import AtmosphericIndicators, CurrentConditions, ForecastPoint


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _day_of_year(now: datetime) -> int:
    return now.timetuple().tm_yday


def generate_current_conditions(
    lat: float,
    lon: float,
    now: datetime,
    rng: random.Random
) -> CurrentConditions:
    """Generate plausible current conditions from geographic and seasonal patterns.

    Args:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        now: Local time at the location
        rng: Random source

    Returns:
        Fully populated CurrentConditions
    """
    seasonal_factor = math.sin((_day_of_year(now) / 365) * 2 * math.pi)

    base_temp = 15 + math.cos(math.radians(lat)) * 20 + seasonal_factor * 15
    daily_variation = math.sin((now.hour / 24) * 2 * math.pi) * 8
    temperature = base_temp + daily_variation + (rng.random() - 0.5) * 5

    # Crude coastal proximity: continental interiors sit at large |lon|
    coastal_proximity = 0.3 if abs(lon) > 100 else 0.7
    latitudinal_humidity = 80 - abs(lat) * 0.8
    humidity = _clamp(latitudinal_humidity * coastal_proximity + rng.random() * 20, 20, 95)

    base_pressure = 1013.25 - abs(lat) * 0.1
    pressure = base_pressure + (rng.random() - 0.5) * 20

    if abs(lat) > 30:
        wind_speed = 15 + rng.random() * 25
    else:
        wind_speed = 8 + rng.random() * 15

    uv_index = _clamp((11 - abs(lat) / 8) + rng.random() * 2, 0, 11)

    return CurrentConditions(
        temperature=round(temperature, 1),
        humidity=round(humidity),
        pressure=round(pressure, 1),
        wind_speed=round(wind_speed, 1),
        wind_direction=rng.randrange(360),
        precipitation=round(rng.random() * 5, 1),
        visibility=round(10 + rng.random() * 15, 1),
        uv_index=round(uv_index, 1),
    )


def generate_forecast(lat: float, rng: random.Random) -> List[ForecastPoint]:
    """Generate a 24 hour forecast keyed by hour offset and latitude.

    Args:
        lat: Latitude in decimal degrees
        rng: Random source

    Returns:
        24 ForecastPoint entries ordered by hour
    """
    base_temp = 15 + math.cos(math.radians(lat)) * 20
    peak_uv = _clamp(11 - abs(lat) / 8, 0, 11)

    forecast = []
    for hour in range(24):
        # Daylight bell centred on hour 12
        daylight = max(0.0, math.sin((hour - 6) / 12 * math.pi))
        forecast.append(ForecastPoint(
            hour=hour,
            temperature=round(base_temp + math.sin(hour / 4) * 8 + (rng.random() - 0.5) * 3, 1),
            humidity=_clamp(math.floor(50 + math.sin(hour / 6) * 20 + rng.random() * 10), 0, 100),
            pressure=round(1013 + math.sin(hour / 8) * 5 + (rng.random() - 0.5) * 2, 1),
            wind_speed=round(10 + math.sin(hour / 3) * 8 + rng.random() * 5, 1),
            precipitation=round(rng.random() * 2, 1),
            clouds=rng.randint(0, 100),
            uv_index=round(peak_uv * daylight, 1),
        ))
    return forecast


def generate_atmospheric(
    lat: float,
    current: CurrentConditions,
    rng: random.Random
) -> AtmosphericIndicators:
    """Derive coarse atmospheric indicators from current conditions."""
    return AtmosphericIndicators(
        jet_stream_position=round(lat + rng.random() * 10, 2),
        convective_energy=round(current.temperature * 100 + rng.random() * 1000, 1),
        atmospheric_river=current.humidity > 80,
    )
