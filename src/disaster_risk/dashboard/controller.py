"""Dashboard controller driving the fetch cycle and location search."""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

from disaster_risk.config import REFRESH_INTERVAL_SECONDS
from disaster_risk.dashboard.state import (
    Action, DashboardState, FetchFailed, FetchStarted, FetchSucceeded,
    LocationSelected, SearchChanged, SearchCleared, SearchResolved,
    search_triggers_lookup, update
)
from disaster_risk.hazards.service import RiskService
from disaster_risk.weather.geocoding import GeocodingService
from disaster_risk.weather.models import Location

logger = logging.getLogger(__name__)


class DashboardController:
    """Owns the dashboard state and performs the side effects behind it."""

    def __init__(
        self,
        risk_service: Optional[RiskService] = None,
        state: Optional[DashboardState] = None
    ):
        self.risk_service = risk_service or RiskService()
        self.state = state or DashboardState()

    @property
    def geocoding_service(self) -> GeocodingService:
        return self.risk_service.geocoding_service

    def dispatch(self, action: Action) -> DashboardState:
        """Apply an action to the current state and keep the result."""
        self.state = update(self.state, action)
        return self.state

    async def load(self) -> DashboardState:
        """Run one fetch cycle for the current location.

        Returns:
            State after the fetch settles. A fetch overtaken by a newer one
            leaves the newer fetch's state in place.
        """
        self.dispatch(FetchStarted())
        request_id = self.state.request_id
        location = self.state.location

        try:
            assessment = await self.risk_service.assess(location)
        except Exception as e:
            logger.error(f"Error loading data for {location.name}: {e}")
            return self.dispatch(FetchFailed(request_id=request_id, error=str(e)))

        return self.dispatch(FetchSucceeded(
            request_id=request_id,
            assessment=assessment,
            received_at=datetime.now(timezone.utc),
        ))

    async def select_location(self, location: Location) -> DashboardState:
        """Commit a new location and refetch everything for it."""
        logger.info(f"Selected location {location.name} ({location.lat}, {location.lon})")
        self.dispatch(LocationSelected(location=location))
        return await self.load()

    async def search(self, query: str) -> DashboardState:
        """Update the search box and look up matching locations.

        Queries shorter than three characters hide the results without
        calling the geocoder.
        """
        self.dispatch(SearchChanged(query=query))
        if not search_triggers_lookup(query):
            return self.state

        request_id = self.state.search_request_id
        # geopy is synchronous
        results = await asyncio.to_thread(self.geocoding_service.search, query)
        return self.dispatch(SearchResolved(request_id=request_id, results=tuple(results)))

    def clear_search(self) -> DashboardState:
        return self.dispatch(SearchCleared())

    async def run_periodic_refresh(self, interval: float = REFRESH_INTERVAL_SECONDS, load_first: bool = False):
        """Reload the current location every `interval` seconds until cancelled.

        Args:
            interval: Seconds between reloads
            load_first: Load once immediately before the first wait
        """
        if load_first:
            await self.load()
        while True:
            await asyncio.sleep(interval)
            logger.info(f"Refreshing {self.state.location.name}")
            await self.load()
