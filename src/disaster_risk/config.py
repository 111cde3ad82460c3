"""Configuration settings for the disaster risk service."""

import os
from typing import Final, Optional
from dotenv import load_dotenv

load_dotenv()

# Upstream APIs
OPENWEATHER_API_URL: Final[str] = "https://api.openweathermap.org/data/3.0/onecall"
OPENWEATHER_API_KEY: str = os.getenv("OPENWEATHER_API_KEY", "")
USGS_EARTHQUAKE_URL: Final[str] = "https://earthquake.usgs.gov/earthquakes/feed/v1.0/summary/all_day.geojson"
NOAA_ALERTS_URL: Final[str] = "https://api.weather.gov/alerts"
USER_AGENT: str = os.getenv("USER_AGENT", "DisasterRiskService/0.1 (user@example.com)")
GEOCODING_USER_AGENT: str = os.getenv("GEOCODING_USER_AGENT", USER_AGENT)
REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "30"))

# Default location (New York)
DEFAULT_LAT: Final[float] = 40.7128
DEFAULT_LON: Final[float] = -74.0060
DEFAULT_CITY: Final[str] = "New York, NY"
DEFAULT_COUNTRY: Final[str] = "USA"

# Search
MIN_SEARCH_LENGTH: Final[int] = 3
SEARCH_RESULT_LIMIT: Final[int] = 5

# Hazard feeds
SEISMIC_RADIUS_DEGREES: float = float(os.getenv("SEISMIC_RADIUS_DEGREES", "5.0"))  # ~500km
SEISMIC_RECENT_DAYS: int = int(os.getenv("SEISMIC_RECENT_DAYS", "7"))

# Dashboard
REFRESH_INTERVAL_SECONDS: int = int(os.getenv("REFRESH_INTERVAL_SECONDS", "600"))
_seed = os.getenv("RANDOM_SEED")
RANDOM_SEED: Optional[int] = int(_seed) if _seed else None

# Server configuration
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

# Redis cache configuration
REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379")
CACHE_EXPIRE_SECONDS: int = int(os.getenv("CACHE_EXPIRE_SECONDS", "60"))
CACHE_PREFIX: str = os.getenv("CACHE_PREFIX", "disaster-risk")

# Rate limiting configuration
RATE_LIMIT_REQUESTS_PER_SECOND: int = int(os.getenv("RATE_LIMIT_REQUESTS_PER_SECOND", "20"))
RATE_LIMIT_REDIS_KEY_PREFIX: str = os.getenv("RATE_LIMIT_REDIS_KEY_PREFIX", "rate_limit")
RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
