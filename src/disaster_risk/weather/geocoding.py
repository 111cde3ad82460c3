"""Location search and timezone lookup."""

import logging
from typing import Any, Dict, List, Optional

from geopy.exc import GeocoderServiceError
from geopy.geocoders import Nominatim
from timezonefinder import TimezoneFinder

from disaster_risk.config import (
    GEOCODING_USER_AGENT, MIN_SEARCH_LENGTH, SEARCH_RESULT_LIMIT, REQUEST_TIMEOUT_SECONDS
)
from disaster_risk.weather.models import Location

logger = logging.getLogger(__name__)


FALLBACK_LOCATIONS: List[Location] = [
    Location(name="New York, NY", lat=40.7128, lon=-74.0060, country="USA"),
    Location(name="Los Angeles, CA", lat=34.0522, lon=-118.2437, country="USA"),
    Location(name="Chicago, IL", lat=41.8781, lon=-87.6298, country="USA"),
    Location(name="Miami, FL", lat=25.7617, lon=-80.1918, country="USA"),
    Location(name="Houston, TX", lat=29.7604, lon=-95.3698, country="USA"),
    Location(name="Phoenix, AZ", lat=33.4484, lon=-112.0740, country="USA"),
    Location(name="Denver, CO", lat=39.7392, lon=-104.9903, country="USA"),
    Location(name="Seattle, WA", lat=47.6062, lon=-122.3321, country="USA"),
    Location(name="Tokyo, Japan", lat=35.6762, lon=139.6503, country="Japan"),
    Location(name="London, UK", lat=51.5074, lon=-0.1278, country="UK"),
    Location(name="Sydney, Australia", lat=-33.8688, lon=151.2093, country="Australia"),
    Location(name="San Francisco, CA", lat=37.7749, lon=-122.4194, country="USA"),
]


class GeocodingError(Exception):
    """Raised when a place name cannot be resolved."""
    pass


def fallback_locations(query: str, limit: int = SEARCH_RESULT_LIMIT) -> List[Location]:
    """Filter the built-in city list by case-insensitive substring match.

    Args:
        query: Free-text search
        limit: Maximum number of results

    Returns:
        Matching locations in list order
    """
    needle = query.lower()
    return [loc for loc in FALLBACK_LOCATIONS if needle in loc.name.lower()][:limit]


def location_from_nominatim(raw: Dict[str, Any]) -> Location:
    """Map one raw Nominatim search result to a Location.

    The display name is shortened to its first two comma-separated parts.
    """
    name = ",".join(raw["display_name"].split(",")[:2])
    address = raw.get("address") or {}
    importance = raw.get("importance")

    return Location(
        name=name,
        lat=float(raw["lat"]),
        lon=float(raw["lon"]),
        country=address.get("country") or "Unknown",
        type=raw.get("type"),
        importance=float(importance) if importance is not None else None,
    )


class GeocodingService:
    """Service for location search and timezone detection."""

    def __init__(self, geolocator: Optional[Any] = None, timezone_finder: Optional[TimezoneFinder] = None):
        """Initialize the geocoding service.

        Args:
            geolocator: geopy geocoder (creates Nominatim if None)
            timezone_finder: TimezoneFinder instance (creates one if None)
        """
        self.geolocator = geolocator or Nominatim(
            user_agent=GEOCODING_USER_AGENT,
            timeout=REQUEST_TIMEOUT_SECONDS
        )
        # Reuse instance; loading the polygons blocks
        self.tf = timezone_finder or TimezoneFinder(in_memory=True)
        logger.info("GeocodingService initialized with timezonefinder and Nominatim")

    def search(self, query: str) -> List[Location]:
        """Search for locations matching a free-text query.

        Args:
            query: Place name or address

        Returns:
            Up to five ranked locations. Empty when the query is too short.
            Never raises; falls back to the built-in city list when the
            geocoder is unavailable.
        """
        query = query.strip()
        if len(query) < MIN_SEARCH_LENGTH:
            return []

        try:
            logger.info(f"Searching locations for '{query}'")
            results = self.geolocator.geocode(
                query,
                exactly_one=False,
                limit=SEARCH_RESULT_LIMIT,
                addressdetails=True
            )
            locations = [location_from_nominatim(result.raw) for result in results or []]
            logger.info(f"Found {len(locations)} locations for '{query}'")
            return locations[:SEARCH_RESULT_LIMIT]

        except GeocoderServiceError as e:
            logger.warning(f"Geocoding service unavailable for '{query}': {e}")
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Unexpected geocoding response for '{query}': {e}")

        return fallback_locations(query)

    def resolve_city(self, city: str) -> Location:
        """Resolve a city name to its best matching location.

        Raises:
            GeocodingError: If nothing matches
        """
        results = self.search(city)
        if not results:
            raise GeocodingError(f"City '{city}' not found")
        return results[0]

    def get_timezone(self, lat: float, lon: float) -> str:
        """Get timezone for coordinates.

        Returns:
            Timezone string (e.g., "Asia/Tokyo") or "UTC" if not found
        """
        try:
            timezone = self.tf.timezone_at(lng=lon, lat=lat)
            if timezone:
                return timezone
            logger.warning(f"No timezone found for ({lat}, {lon}), defaulting to UTC")
            return "UTC"

        except ValueError as e:
            logger.error(f"Error getting timezone for ({lat}, {lon}): {e}")
            return "UTC"
