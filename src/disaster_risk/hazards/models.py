"""Data models for hazard feeds and risk assessments."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from disaster_risk.weather.models import DataSource, Location, WeatherSnapshot


class HazardType(str, Enum):
    """Hazards scored by the risk estimator."""
    TORNADO = "tornado"
    FLOOD = "flood"
    WILDFIRE = "wildfire"
    HURRICANE = "hurricane"
    EARTHQUAKE = "earthquake"
    BLIZZARD = "blizzard"


class RiskLevel(str, Enum):
    """Banded reading of a risk score."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class HistoricalSummary(BaseModel):
    """Synthetic historical statistics for one hazard at one location."""
    historical_count: int = Field(..., ge=0, description="Number of notable past events")
    average_severity: float = Field(..., ge=0, description="Mean magnitude, category or intensity")
    risk_score: float = Field(..., ge=0, le=100, description="Baseline risk from historical patterns")
    last_major_event: Optional[datetime] = Field(None, description="Time of the last major event")
    seasonal_peak: Optional[str] = Field(None, description="Months of peak activity, e.g. 'Jun-Nov'")


class SeismicEvent(BaseModel):
    """One earthquake from the USGS GeoJSON feed."""
    longitude: float
    latitude: float
    depth: Optional[float] = Field(None, description="Depth in km")
    magnitude: Optional[float] = None
    time: int = Field(..., description="Origin time in milliseconds since the epoch")
    place: Optional[str] = None

    @classmethod
    def from_feature(cls, feature: Dict[str, Any]) -> "SeismicEvent":
        """Build an event from a GeoJSON feature.

        Raises:
            KeyError, IndexError, TypeError, ValueError: If the feature is malformed
        """
        coordinates = feature["geometry"]["coordinates"]
        properties = feature["properties"]
        return cls(
            longitude=coordinates[0],
            latitude=coordinates[1],
            depth=coordinates[2] if len(coordinates) > 2 else None,
            magnitude=properties.get("mag"),
            time=properties["time"],
            place=properties.get("place"),
        )

    @property
    def occurred_at(self) -> datetime:
        return datetime.fromtimestamp(self.time / 1000, tz=timezone.utc)


class WeatherAlert(BaseModel):
    """An active alert from the National Weather Service."""
    id: Optional[str] = None
    event: Optional[str] = None
    severity: Optional[str] = None
    urgency: Optional[str] = None
    headline: Optional[str] = None
    area_desc: Optional[str] = None
    effective: Optional[str] = None
    expires: Optional[str] = None

    @classmethod
    def from_feature(cls, feature: Dict[str, Any]) -> "WeatherAlert":
        properties = feature.get("properties") or {}
        return cls(
            id=feature.get("id") or properties.get("id"),
            event=properties.get("event"),
            severity=properties.get("severity"),
            urgency=properties.get("urgency"),
            headline=properties.get("headline"),
            area_desc=properties.get("areaDesc"),
            effective=properties.get("effective"),
            expires=properties.get("expires"),
        )


class RiskAssessment(BaseModel):
    """Fully joined result for one location."""
    location: Location
    timezone: str = Field(..., description="Timezone used for seasonal terms")
    weather: WeatherSnapshot
    historical: Dict[HazardType, HistoricalSummary]
    risks: Dict[HazardType, float] = Field(..., description="Risk score per hazard, 0-100")
    levels: Dict[HazardType, RiskLevel]
    confidence: Dict[str, int] = Field(..., description="Confidence percentage per hazard plus 'overall'")
    critical: bool = Field(..., description="True when any hazard is at critical risk")
    earthquakes: List[SeismicEvent] = Field(default_factory=list)
    alerts: List[WeatherAlert] = Field(default_factory=list)
    data_source: DataSource
    generated_at: datetime
