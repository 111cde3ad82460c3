"""Heuristic per-hazard risk scoring.

Each hazard is scored by a fixed-weight additive formula over geographic
region membership, current weather, the forecast, a seasonal bonus and the
synthetic historical baseline. Every term is bounded and every result is
clamped to [0, 100]. The scores are heuristics, not calibrated probabilities.
"""

import math
import random
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from disaster_risk.config import SEISMIC_RECENT_DAYS
from disaster_risk.hazards.history import (
    in_atlantic_basin, in_australian_fire_zone, in_pacific_basin,
    in_tectonic_belt, in_tornado_alley, in_western_us_fire_zone
)
from disaster_risk.hazards.models import HazardType, HistoricalSummary, RiskLevel, SeismicEvent
from disaster_risk.weather.models import CurrentConditions, ForecastPoint

BASE_CONFIDENCE = 85
SEASONAL_BONUS = 10.0


def clamp(value: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, value))


def in_season(month: int, lat: float, northern: Iterable[int], southern: Iterable[int]) -> bool:
    """Check a 1-12 month against the hemisphere's season."""
    return month in (northern if lat > 0 else southern)


def tornado_risk(
    current: CurrentConditions,
    forecast: Optional[Sequence[ForecastPoint]],
    lat: float,
    lon: float,
    historical: HistoricalSummary,
    month: int
) -> float:
    """Score tornado risk from instability, wind shear and moisture.

    Args:
        current: Current conditions
        forecast: 24 hour forecast, its temperature range stands in for instability
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        historical: Synthetic tornado history
        month: Local month, 1-12

    Returns:
        Risk score in [0, 100]
    """
    risk = 0.0

    if in_tornado_alley(lat, lon):
        risk += 30

    # Atmospheric instability
    if forecast:
        temperatures = [point.temperature for point in forecast]
        risk += clamp((max(temperatures) - min(temperatures)) * 1.5, 0, 20)

    # Wind shear
    if current.wind_speed > 20:
        risk += clamp((current.wind_speed - 20) * 2, 0, 25)

    risk += clamp((1013 - current.pressure) * 0.8, 0, 15)

    if current.humidity > 60 and current.temperature > 15:
        risk += 10

    if 4 <= month <= 8:
        risk += SEASONAL_BONUS

    risk += historical.risk_score * 0.3
    return clamp(risk)


def flood_risk(
    current: CurrentConditions,
    forecast: Optional[Sequence[ForecastPoint]],
    lat: float,
    lon: float,
    historical: HistoricalSummary,
    month: int
) -> float:
    """Score flood risk from 24 hour precipitation, saturation and terrain proxies.

    Without a forecast the current hourly rate is extrapolated over a day.

    Returns:
        Risk score in [0, 100]
    """
    risk = 0.0

    if forecast:
        total_precipitation = sum(point.precipitation for point in forecast)
    else:
        total_precipitation = current.precipitation * 24
    risk += clamp(total_precipitation * 8, 0, 40)

    # Soil saturation proxy
    if current.humidity > 85:
        risk += 20

    # River basin proxy
    risk += abs(math.sin(lat * 0.1) * math.cos(lon * 0.1)) * 15

    if abs(math.fmod(lon, 10)) < 2 and current.wind_speed > 25:
        risk += 25

    # Urban runoff
    if abs(lat) < 45:
        risk += 5

    if in_season(month, lat, northern=range(3, 7), southern=range(9, 13)):
        risk += SEASONAL_BONUS

    risk += historical.risk_score * 0.4
    return clamp(risk)


def wildfire_risk(
    current: CurrentConditions,
    forecast: Optional[Sequence[ForecastPoint]],
    lat: float,
    lon: float,
    historical: HistoricalSummary,
    month: int
) -> float:
    """Score wildfire risk from heat, dryness, wind and the next 7 hours of rain.

    Returns:
        Risk score in [0, 100]
    """
    risk = 0.0

    if current.temperature > 25 and current.humidity < 30:
        risk += 30
    if current.temperature > 35 and current.humidity < 20:
        risk += 25

    risk += clamp(current.wind_speed * 1.2, 0, 20)

    if forecast:
        recent_precipitation = sum(point.precipitation for point in forecast[:7])
    else:
        recent_precipitation = current.precipitation * 7
    if recent_precipitation < 5:
        risk += 20

    if in_western_us_fire_zone(lat, lon) or in_australian_fire_zone(lat, lon):
        risk += 25

    # Vegetation dryness
    if current.uv_index > 7:
        risk += 10

    if in_season(month, lat, northern=(6, 7, 8, 9), southern=(12, 1, 2, 3)):
        risk += SEASONAL_BONUS

    risk += historical.risk_score * 0.3
    return clamp(risk)


def hurricane_risk(
    current: CurrentConditions,
    forecast: Optional[Sequence[ForecastPoint]],
    lat: float,
    lon: float,
    historical: HistoricalSummary,
    month: int
) -> float:
    """Score hurricane risk from basin membership, heat, low pressure and wind."""
    risk = 0.0

    if in_atlantic_basin(lat, lon) or in_pacific_basin(lat, lon):
        risk += 40

    if current.temperature > 26:
        risk += 20
    if current.pressure < 1005:
        risk += 25
    if current.wind_speed > 15:
        risk += 15

    if in_season(month, lat, northern=range(6, 12), southern=(12, 1, 2, 3, 4, 5)):
        risk += SEASONAL_BONUS

    risk += historical.risk_score * 0.3
    return clamp(risk)


def blizzard_risk(
    current: CurrentConditions,
    forecast: Optional[Sequence[ForecastPoint]],
    lat: float,
    lon: float,
    historical: HistoricalSummary,
    month: int
) -> float:
    """Score blizzard risk from cold, wind and latitude.

    Returns:
        Risk score in [0, 100]
    """
    risk = 0.0

    if current.temperature < 0:
        risk += clamp(abs(current.temperature) * 3, 0, 40)
    if current.wind_speed > 20:
        risk += 20
    if abs(lat) > 40:
        risk += 25

    if in_season(month, lat, northern=(12, 1, 2), southern=(6, 7, 8)):
        risk += SEASONAL_BONUS

    risk += historical.risk_score * 0.3
    return clamp(risk)


def recent_earthquakes(
    earthquakes: Iterable[SeismicEvent],
    now: datetime,
    days: int = SEISMIC_RECENT_DAYS
) -> List[SeismicEvent]:
    """Events that occurred no more than `days` before `now`."""
    window = timedelta(days=days)
    return [event for event in earthquakes if now - event.occurred_at <= window]


def earthquake_risk(
    lat: float,
    lon: float,
    historical: HistoricalSummary,
    earthquakes: Iterable[SeismicEvent],
    now: datetime
) -> float:
    """Score earthquake risk from tectonic setting and this week's activity.

    Args:
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        historical: Synthetic earthquake history
        earthquakes: Nearby events from the live feed
        now: Timezone-aware reference time
    """
    risk = historical.risk_score * 0.4

    if in_tectonic_belt(lat, lon):
        risk += 20

    for event in recent_earthquakes(earthquakes, now):
        risk += 10
        if event.magnitude is not None and event.magnitude > 4:
            risk += event.magnitude * 5

    return clamp(risk)


def estimate_risks(
    current: CurrentConditions,
    forecast: Optional[Sequence[ForecastPoint]],
    lat: float,
    lon: float,
    historical: Mapping[HazardType, HistoricalSummary],
    earthquakes: Iterable[SeismicEvent],
    now: datetime
) -> Dict[HazardType, float]:
    """Score all six hazards from one consistent set of inputs.

    Args:
        current: Current conditions
        forecast: 24 hour forecast
        lat: Latitude in decimal degrees
        lon: Longitude in decimal degrees
        historical: Historical summary per hazard
        earthquakes: Nearby seismic events
        now: Timezone-aware local time at the location

    Returns:
        Risk score in [0, 100] for every HazardType
    """
    month = now.month
    weather_args = (current, forecast, lat, lon)

    return {
        HazardType.TORNADO: round(tornado_risk(*weather_args, historical[HazardType.TORNADO], month), 1),
        HazardType.FLOOD: round(flood_risk(*weather_args, historical[HazardType.FLOOD], month), 1),
        HazardType.WILDFIRE: round(wildfire_risk(*weather_args, historical[HazardType.WILDFIRE], month), 1),
        HazardType.HURRICANE: round(hurricane_risk(*weather_args, historical[HazardType.HURRICANE], month), 1),
        HazardType.EARTHQUAKE: round(
            earthquake_risk(lat, lon, historical[HazardType.EARTHQUAKE], earthquakes, now), 1
        ),
        HazardType.BLIZZARD: round(blizzard_risk(*weather_args, historical[HazardType.BLIZZARD], month), 1),
    }


def estimate_confidence(rng: Optional[random.Random] = None) -> Dict[str, int]:
    """Confidence percentages per hazard plus 'overall'.

    Placeholder: a constant baseline with jitter. It does not yet reflect
    whether the inputs were live or simulated.
    """
    rng = rng or random.Random()
    confidence = {hazard.value: BASE_CONFIDENCE + rng.randint(0, 9) for hazard in HazardType}
    confidence["overall"] = sum(confidence.values()) // len(confidence)
    return confidence


def risk_level(score: float) -> RiskLevel:
    """Band a score: low below 25, medium below 50, high below 75, else critical."""
    if score < 25:
        return RiskLevel.LOW
    if score < 50:
        return RiskLevel.MEDIUM
    if score < 75:
        return RiskLevel.HIGH
    return RiskLevel.CRITICAL


def has_critical_risk(risks: Mapping[HazardType, float]) -> bool:
    """True when any hazard is at the critical level."""
    return any(risk_level(score) is RiskLevel.CRITICAL for score in risks.values())
