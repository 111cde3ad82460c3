"""Risk service joining every data source into one assessment."""

import asyncio
import logging
import random
import zoneinfo
from datetime import datetime
from typing import Dict, Optional, Tuple

from disaster_risk.config import RANDOM_SEED
from disaster_risk.hazards.feeds import HazardFeedClient
from disaster_risk.hazards.history import synthesize_history
from disaster_risk.hazards.models import HazardType, HistoricalSummary, RiskAssessment
from disaster_risk.hazards.scoring import (
    estimate_confidence, estimate_risks, has_critical_risk, risk_level
)
from disaster_risk.weather.geocoding import GeocodingService
from disaster_risk.weather.models import Location
from disaster_risk.weather.service import WeatherService

logger = logging.getLogger(__name__)


class RiskService:
    """Service computing disaster risk assessments for a location."""

    def __init__(
        self,
        weather_service: Optional[WeatherService] = None,
        feed_client: Optional[HazardFeedClient] = None,
        geocoding_service: Optional[GeocodingService] = None,
        rng: Optional[random.Random] = None
    ):
        """Initialize the risk service.

        Args:
            weather_service: Weather service instance (creates default if None)
            feed_client: Seismic and alert feed client (creates default if None)
            geocoding_service: Geocoding service instance (creates default if None)
            rng: Random source shared by all synthetic data (seeded from RANDOM_SEED if None)
        """
        self.rng = rng or random.Random(RANDOM_SEED)
        self.weather_service = weather_service or WeatherService(rng=self.rng)
        self.feed_client = feed_client or HazardFeedClient()
        self.geocoding_service = geocoding_service or GeocodingService()

    def local_time(self, location: Location) -> Tuple[str, datetime]:
        """Current time in the location's timezone.

        Returns:
            Tuple of (timezone name, aware datetime)
        """
        timezone_name = self.geocoding_service.get_timezone(location.lat, location.lon)
        try:
            tz = zoneinfo.ZoneInfo(timezone_name)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError) as e:
            logger.warning(f"Unknown timezone '{timezone_name}', using UTC: {e}")
            timezone_name, tz = "UTC", zoneinfo.ZoneInfo("UTC")
        return timezone_name, datetime.now(tz)

    async def _historical(self, location: Location, now: datetime) -> Dict[HazardType, HistoricalSummary]:
        return synthesize_history(location.lat, location.lon, rng=self.rng, now=now)

    async def assess(self, location: Location) -> RiskAssessment:
        """Fetch every source for a location and score all hazards.

        Weather, historical synthesis, earthquakes and alerts run
        concurrently; the assessment is built only once all have finished.

        Args:
            location: Selected location

        Returns:
            Complete RiskAssessment
        """
        timezone_name, now = self.local_time(location)
        lat, lon = location.lat, location.lon

        logger.info(f"Assessing risk for {location.name} ({lat}, {lon}), timezone={timezone_name}")

        weather, historical, earthquakes, alerts = await asyncio.gather(
            self.weather_service.get_snapshot(lat, lon, now),
            self._historical(location, now),
            self.feed_client.get_nearby_earthquakes(lat, lon),
            self.feed_client.get_active_alerts(lat, lon),
        )

        risks = estimate_risks(
            weather.current, weather.forecast, lat, lon, historical, earthquakes, now
        )
        confidence = estimate_confidence(self.rng)

        assessment = RiskAssessment(
            location=location,
            timezone=timezone_name,
            weather=weather,
            historical=historical,
            risks=risks,
            levels={hazard: risk_level(score) for hazard, score in risks.items()},
            confidence=confidence,
            critical=has_critical_risk(risks),
            earthquakes=earthquakes,
            alerts=alerts,
            data_source=weather.source,
            generated_at=now,
        )

        logger.info(
            f"Assessment for {location.name} from {weather.source.value} data: "
            + ", ".join(f"{hazard.value}={score}" for hazard, score in risks.items())
        )
        return assessment

    async def aclose(self):
        """Close the underlying HTTP clients."""
        for closeable in (self.weather_service, self.feed_client):
            try:
                await closeable.aclose()
            except Exception as e:
                logger.error(f"Error closing {type(closeable).__name__}: {e}")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()
