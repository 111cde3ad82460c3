import time

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from fastapi_cache import FastAPICache
from fastapi_cache.backends.inmemory import InMemoryBackend

from disaster_risk import main
from disaster_risk.api.endpoints import get_dashboard_controller, get_risk_service
from disaster_risk.dashboard.controller import DashboardController
from disaster_risk.main import create_app
from disaster_risk.middleware.rate_limit import RateLimitMiddleware


@pytest.fixture
def controller(offline_risk_service):
    return DashboardController(risk_service=offline_risk_service)


@pytest.fixture
def client(offline_risk_service, controller):
    app = create_app(rate_limit_enabled=False)
    app.dependency_overrides[get_risk_service] = lambda: offline_risk_service
    app.dependency_overrides[get_dashboard_controller] = lambda: controller
    FastAPICache.init(InMemoryBackend(), prefix="test")
    # Not entered as a context manager so the Redis lifespan never runs
    return TestClient(app)


class TestRiskEndpoint:

    def test_assessment_for_coordinates(self, client):
        response = client.get("/risk/", params={"lat": 35.6762, "lon": 139.6503, "name": "Tokyo"})

        assert response.status_code == 200
        body = response.json()
        assert body["location"]["name"] == "Tokyo"
        assert set(body["risks"]) == {"tornado", "flood", "wildfire", "hurricane", "earthquake", "blizzard"}
        assert len(body["weather"]["forecast"]) == 24
        assert body["data_source"] == "simulated"
        assert body["timezone"] == "Asia/Tokyo"

    def test_default_location(self, client):
        response = client.get("/risk/")

        assert response.status_code == 200
        assert response.json()["location"]["name"] == "New York, NY"

    def test_city_resolved_through_fallback(self, client):
        response = client.get("/risk/", params={"city": "London"})

        assert response.status_code == 200
        assert response.json()["location"]["name"] == "London, UK"

    def test_single_coordinate_is_rejected(self, client):
        response = client.get("/risk/", params={"lat": 35.0})

        assert response.status_code == 400
        assert "latitude and longitude" in response.json()["detail"]

    def test_city_and_coordinates_are_rejected(self, client):
        response = client.get("/risk/", params={"lat": 35.0, "lon": 139.0, "city": "Tokyo"})
        assert response.status_code == 400

    def test_out_of_range_latitude(self, client):
        response = client.get("/risk/", params={"lat": 95.0, "lon": 0})
        assert response.status_code == 422

    def test_unknown_city(self, client):
        response = client.get("/risk/", params={"city": "Atlantis"})

        assert response.status_code == 404
        assert "Atlantis" in response.json()["detail"]


class TestSearchEndpoint:

    def test_search_falls_back_to_builtin_cities(self, client):
        response = client.get("/risk/search", params={"q": "tok"})

        assert response.status_code == 200
        assert [loc["name"] for loc in response.json()] == ["Tokyo, Japan"]

    def test_short_query_returns_nothing(self, client):
        response = client.get("/risk/search", params={"q": "to"})

        assert response.status_code == 200
        assert response.json() == []


class TestDashboardEndpoints:

    def test_initial_state(self, client):
        body = client.get("/risk/dashboard").json()

        assert body["phase"] == "idle"
        assert body["location"]["name"] == "New York, NY"
        assert body["assessment"] is None

    def test_select_location_fetches_assessment(self, client):
        tokyo = {"name": "Tokyo, Japan", "lat": 35.6762, "lon": 139.6503, "country": "Japan"}
        response = client.post("/risk/dashboard/location", json=tokyo)

        assert response.status_code == 200
        body = response.json()
        assert body["phase"] == "displaying"
        assert body["data_source"] == "simulated"
        assert body["assessment"]["location"]["name"] == "Tokyo, Japan"
        assert client.get("/risk/dashboard").json()["request_id"] == body["request_id"]

    def test_refresh_reloads_current_location(self, client):
        first = client.post("/risk/dashboard/refresh").json()
        second = client.post("/risk/dashboard/refresh").json()

        assert second["request_id"] == first["request_id"] + 1
        assert second["phase"] == "displaying"

    def test_search_shows_and_clears_results(self, client):
        body = client.get("/risk/dashboard/search", params={"q": "tok"}).json()
        assert body["search_visible"]
        assert [loc["name"] for loc in body["search_results"]] == ["Tokyo, Japan"]

        body = client.get("/risk/dashboard/search", params={"q": ""}).json()
        assert not body["search_visible"]
        assert body["search_results"] == []


def test_lifespan_runs_background_refresh(monkeypatch, offline_risk_service, controller):
    monkeypatch.setattr(main, "get_dashboard_controller", lambda: controller)
    monkeypatch.setattr(main, "get_risk_service", lambda: offline_risk_service)
    app = create_app(rate_limit_enabled=False)
    app.dependency_overrides[get_dashboard_controller] = lambda: controller

    with TestClient(app) as client:
        deadline = time.monotonic() + 10
        body = client.get("/risk/dashboard").json()
        while body["phase"] != "displaying" and time.monotonic() < deadline:
            time.sleep(0.05)
            body = client.get("/risk/dashboard").json()

    assert body["phase"] == "displaying"
    assert body["assessment"]["location"]["name"] == "New York, NY"


def test_health(client):
    response = client.get("/risk/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "disaster-risk"}


def test_info_lists_hazards(client):
    body = client.get("/risk/info").json()
    assert len(body["hazards"]) == 6


class FakeLimiter:
    max_requests = 1
    window_size = 1.0

    def __init__(self, allowed):
        self.allowed = allowed

    async def is_allowed(self):
        return self.allowed, 1


def limited_app(allowed):
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, calls=1, enabled=True, rate_limiter=FakeLimiter(allowed))

    @app.get("/risk/")
    async def risk():
        return {"ok": True}

    @app.get("/risk/health")
    async def health():
        return {"status": "healthy"}

    return TestClient(app)


def test_rate_limited_requests_get_429():
    client = limited_app(allowed=False)
    response = client.get("/risk/")

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "1"


def test_health_bypasses_rate_limit():
    assert limited_app(allowed=False).get("/risk/health").status_code == 200


def test_allowed_requests_pass_through():
    response = limited_app(allowed=True).get("/risk/")

    assert response.status_code == 200
    assert response.headers["X-RateLimit-Limit"] == "1"
    assert response.headers["X-RateLimit-Window"] == "1"
