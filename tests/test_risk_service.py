import random
import time

import httpx
import pytest

from disaster_risk.hazards.feeds import HazardFeedClient
from disaster_risk.hazards.models import HazardType
from disaster_risk.hazards.service import RiskService
from disaster_risk.weather.client import OpenWeatherClient
from disaster_risk.weather.models import DataSource
from disaster_risk.weather.service import WeatherService

from conftest import TOKYO


@pytest.mark.asyncio
async def test_tokyo_with_every_service_unreachable(offline_risk_service):
    assessment = await offline_risk_service.assess(TOKYO)

    assert set(assessment.risks) == set(HazardType)
    assert all(0 <= score <= 100 for score in assessment.risks.values())
    assert len(assessment.weather.forecast) == 24
    assert assessment.data_source is DataSource.SIMULATED
    assert assessment.earthquakes == []
    assert assessment.alerts == []
    assert set(assessment.historical) == set(HazardType)
    assert assessment.timezone == "Asia/Tokyo"
    assert assessment.generated_at.utcoffset().total_seconds() == 9 * 3600
    assert all(0 <= value <= 100 for value in assessment.confidence.values())
    assert set(assessment.levels) == set(HazardType)


@pytest.mark.asyncio
async def test_assessment_serializes_hazard_keys(offline_risk_service):
    body = (await offline_risk_service.assess(TOKYO)).model_dump(mode="json")

    assert set(body["risks"]) == {"tornado", "flood", "wildfire", "hurricane", "earthquake", "blizzard"}
    assert body["data_source"] == "simulated"


@pytest.mark.asyncio
async def test_live_sources_are_joined(offline_geocoding):
    now_ms = int(time.time() * 1000)

    def handler(request):
        if request.url.host == "api.openweathermap.org":
            return httpx.Response(200, json={
                "current": {"temp": 31.0, "humidity": 80, "pressure": 998, "wind_speed": 12.0, "uvi": 9},
                "hourly": [{"temp": 30.0, "humidity": 80, "pressure": 998, "wind_speed": 10.0}] * 48,
            })
        if request.url.host == "earthquake.usgs.gov":
            return httpx.Response(200, json={"features": [{
                "geometry": {"coordinates": [139.8, 35.5, 30.0]},
                "properties": {"mag": 5.2, "time": now_ms, "place": "near Tokyo"},
            }]})
        if request.url.host == "api.weather.gov":
            return httpx.Response(404, json={"title": "Not Found"})
        raise AssertionError(f"unexpected request {request.url}")

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    rng = random.Random(9)
    service = RiskService(
        weather_service=WeatherService(OpenWeatherClient(api_key="key", http_client=http_client), rng=rng),
        feed_client=HazardFeedClient(http_client=http_client),
        geocoding_service=offline_geocoding,
        rng=rng,
    )

    async with service:
        assessment = await service.assess(TOKYO)

    assert assessment.data_source is DataSource.LIVE
    assert assessment.weather.current.wind_speed == 43.2
    assert len(assessment.earthquakes) == 1
    assert assessment.alerts == []
    # Pacific ring + recent M5.2 guarantees a high earthquake score
    assert assessment.risks[HazardType.EARTHQUAKE] >= 34 + 20 + 10 + 26
