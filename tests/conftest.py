import random
from types import SimpleNamespace

import httpx
import pytest
from geopy.exc import GeocoderUnavailable

from disaster_risk.hazards.feeds import HazardFeedClient
from disaster_risk.hazards.service import RiskService
from disaster_risk.weather.client import OpenWeatherClient
from disaster_risk.weather.geocoding import GeocodingService
from disaster_risk.weather.models import Location
from disaster_risk.weather.service import WeatherService

TOKYO = Location(name="Tokyo, Japan", lat=35.6762, lon=139.6503, country="Japan")
LONDON = Location(name="London, UK", lat=51.5074, lon=-0.1278, country="UK")


class FakeGeolocator:
    """Stands in for geopy's Nominatim and records every lookup."""

    def __init__(self, results=None, error=None):
        self.results = results
        self.error = error
        self.calls = []

    def geocode(self, query, **kwargs):
        self.calls.append((query, kwargs))
        if self.error:
            raise self.error
        if self.results is None:
            return None
        return [SimpleNamespace(raw=raw) for raw in self.results]


class FakeTimezoneFinder:
    def __init__(self, timezone="UTC"):
        self.timezone = timezone

    def timezone_at(self, lng, lat):
        return self.timezone


def unreachable_transport(calls=None):
    def handler(request):
        if calls is not None:
            calls.append(request)
        raise httpx.ConnectError("network unreachable", request=request)
    return httpx.MockTransport(handler)


def json_transport(payload, status_code=200, calls=None):
    def handler(request):
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code, json=payload)
    return httpx.MockTransport(handler)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def offline_geocoding():
    return GeocodingService(
        geolocator=FakeGeolocator(error=GeocoderUnavailable("offline")),
        timezone_finder=FakeTimezoneFinder("Asia/Tokyo"),
    )


@pytest.fixture
def offline_risk_service(rng, offline_geocoding):
    """Risk service whose every upstream API is unreachable."""
    http_client = httpx.AsyncClient(transport=unreachable_transport())
    weather = WeatherService(OpenWeatherClient(api_key="test-key", http_client=http_client), rng=rng)
    feeds = HazardFeedClient(http_client=http_client)
    return RiskService(
        weather_service=weather,
        feed_client=feeds,
        geocoding_service=offline_geocoding,
        rng=rng,
    )
