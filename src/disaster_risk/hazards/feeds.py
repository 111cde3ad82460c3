"""Clients for the USGS earthquake feed and NWS weather alerts.

Both feeds are best effort: any failure is logged and reported as an
empty list so one missing source never blocks an assessment.
"""

import logging
import math
from typing import Any, Dict, List, Optional

import httpx

from disaster_risk.config import (
    NOAA_ALERTS_URL, REQUEST_TIMEOUT_SECONDS, SEISMIC_RADIUS_DEGREES,
    USER_AGENT, USGS_EARTHQUAKE_URL
)
from disaster_risk.hazards.models import SeismicEvent, WeatherAlert

logger = logging.getLogger(__name__)


def coordinate_distance(lat: float, lon: float, other_lat: float, other_lon: float) -> float:
    """Euclidean distance in degrees, a rough stand-in for great-circle distance."""
    return math.sqrt((lat - other_lat) ** 2 + (lon - other_lon) ** 2)


def filter_nearby(
    events: List[SeismicEvent],
    lat: float,
    lon: float,
    radius: float = SEISMIC_RADIUS_DEGREES
) -> List[SeismicEvent]:
    """Keep events strictly closer than `radius` degrees to the point."""
    return [
        event for event in events
        if coordinate_distance(lat, lon, event.latitude, event.longitude) < radius
    ]


class HazardFeedClient:
    """Async client for the public seismic and alert feeds."""

    def __init__(
        self,
        earthquake_url: str = USGS_EARTHQUAKE_URL,
        alerts_url: str = NOAA_ALERTS_URL,
        http_client: Optional[httpx.AsyncClient] = None
    ):
        """Initialize the feed client.

        Args:
            earthquake_url: USGS GeoJSON summary feed
            alerts_url: NWS alerts endpoint
            http_client: Preconfigured httpx client (creates default if None)
        """
        self.earthquake_url = earthquake_url
        self.alerts_url = alerts_url
        # api.weather.gov rejects requests without a User-Agent
        self.client = http_client or httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT, "Accept": "application/geo+json"},
            timeout=REQUEST_TIMEOUT_SECONDS
        )

    async def _get_features(self, url: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        response = await self.client.get(url, params=params)
        response.raise_for_status()
        features = response.json().get("features") or []
        if not isinstance(features, list):
            raise ValueError(f"Expected a feature list, got {type(features).__name__}")
        return features

    async def get_nearby_earthquakes(self, lat: float, lon: float) -> List[SeismicEvent]:
        """Fetch today's earthquakes within the configured radius of a point.

        Returns:
            Nearby events, or an empty list when the feed is unavailable
        """
        try:
            features = await self._get_features(self.earthquake_url)
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"USGS earthquake feed unavailable: {e}")
            return []

        events = []
        for feature in features:
            try:
                events.append(SeismicEvent.from_feature(feature))
            except (KeyError, IndexError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed earthquake feature: {e}")
                continue

        nearby = filter_nearby(events, lat, lon)
        logger.info(f"Found {len(nearby)} nearby earthquakes out of {len(events)}")
        return nearby

    async def get_active_alerts(self, lat: float, lon: float) -> List[WeatherAlert]:
        """Fetch active weather alerts covering a point.

        Returns:
            Alerts, or an empty list when the service is unavailable
        """
        params = {"point": f"{round(lat, 4)},{round(lon, 4)}"}
        try:
            features = await self._get_features(self.alerts_url, params=params)
            alerts = [WeatherAlert.from_feature(feature) for feature in features if isinstance(feature, dict)]
        except (httpx.HTTPError, ValueError, AttributeError) as e:
            logger.error(f"NWS alerts unavailable for ({lat}, {lon}): {e}")
            return []

        logger.info(f"Found {len(alerts)} weather alerts")
        return alerts

    async def aclose(self):
        """Close the async HTTP client."""
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
