"""Data models for locations and weather conditions."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Location(BaseModel):
    """A selectable place on the map."""
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Display name, e.g. 'Tokyo, Japan'")
    lat: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")
    country: str = Field("Unknown", description="Country name")
    type: Optional[str] = Field(None, description="Place type reported by the geocoder")
    importance: Optional[float] = Field(None, description="Geocoder relevance score")


class DataSource(str, Enum):
    """Provenance of a weather snapshot."""
    LIVE = "live"
    SIMULATED = "simulated"


class CurrentConditions(BaseModel):
    """Current weather at a location, in metric units."""
    temperature: float = Field(..., description="Air temperature in Celsius")
    humidity: float = Field(..., ge=0, le=100, description="Relative humidity in percent")
    pressure: float = Field(..., description="Sea level pressure in hPa")
    wind_speed: float = Field(..., ge=0, description="Wind speed in km/h")
    wind_direction: float = Field(..., ge=0, le=360, description="Wind direction in degrees")
    precipitation: float = Field(..., ge=0, description="Precipitation over the last hour in mm")
    visibility: float = Field(..., ge=0, description="Visibility in km")
    uv_index: float = Field(..., ge=0, le=11, description="UV index")


class ForecastPoint(BaseModel):
    """One hour of the 24 hour forecast."""
    hour: int = Field(..., ge=0, le=23, description="Hour offset from now")
    temperature: float = Field(..., description="Air temperature in Celsius")
    humidity: float = Field(..., ge=0, le=100, description="Relative humidity in percent")
    pressure: float = Field(..., description="Sea level pressure in hPa")
    wind_speed: float = Field(..., ge=0, description="Wind speed in km/h")
    precipitation: float = Field(0.0, ge=0, description="Precipitation in mm")
    clouds: Optional[float] = Field(None, ge=0, le=100, description="Cloud cover in percent")
    uv_index: Optional[float] = Field(None, ge=0, le=11, description="UV index")


class AtmosphericIndicators(BaseModel):
    """Coarse synthetic upper-air indicators shown alongside the forecast."""
    jet_stream_position: float = Field(..., description="Approximate jet stream latitude")
    convective_energy: float = Field(..., description="Convective energy proxy in J/kg")
    atmospheric_river: bool = Field(..., description="Whether moisture suggests an atmospheric river")


class WeatherSnapshot(BaseModel):
    """Current conditions plus forecast for one location."""
    current: CurrentConditions
    forecast: List[ForecastPoint] = Field(..., min_length=24, max_length=24)
    atmospheric: AtmosphericIndicators
    source: DataSource = Field(..., description="Whether current conditions came from the live API")


# Raw OpenWeatherMap payloads

class OneCallCurrent(BaseModel):
    """`current` block of a One Call 3.0 response."""
    temp: float
    humidity: float
    pressure: float
    wind_speed: float = 0.0
    wind_deg: Optional[float] = None
    rain: Optional[Dict[str, float]] = None
    snow: Optional[Dict[str, float]] = None
    visibility: Optional[float] = None
    uvi: Optional[float] = None


class OneCallHourly(BaseModel):
    """Entry of the `hourly` list of a One Call 3.0 response."""
    temp: float
    humidity: float
    pressure: float
    wind_speed: float = 0.0
    rain: Optional[Dict[str, float]] = None
    snow: Optional[Dict[str, float]] = None
    clouds: Optional[float] = None
    uvi: Optional[float] = None


class OneCallPayload(BaseModel):
    """Raw response from the One Call 3.0 endpoint."""
    current: OneCallCurrent
    hourly: List[OneCallHourly] = Field(default_factory=list)


class CurrentWeatherMain(BaseModel):
    temp: float
    humidity: float
    pressure: float


class CurrentWeatherWind(BaseModel):
    speed: float = 0.0
    deg: Optional[float] = None


class CurrentWeatherPayload(BaseModel):
    """Raw response in the basic current-weather (2.5) shape."""
    main: CurrentWeatherMain
    wind: Optional[CurrentWeatherWind] = None
    rain: Optional[Dict[str, float]] = None
    visibility: Optional[float] = None


class ErrorResponse(BaseModel):
    """Error response model."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Additional error details")
