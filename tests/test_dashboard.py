import asyncio

import pytest

from disaster_risk.dashboard.controller import DashboardController
from disaster_risk.dashboard.state import (
    DashboardState, DataSourceState, FetchFailed, FetchPhase, FetchStarted,
    SearchChanged, SearchResolved, update
)
from disaster_risk.hazards.models import HazardType
from disaster_risk.weather.geocoding import GeocodingService

from conftest import LONDON, TOKYO, FakeGeolocator, FakeTimezoneFinder


class GatedRiskService:
    """Delegates to a real service, holding chosen locations until released."""

    def __init__(self, inner):
        self.inner = inner
        self.gates = {}

    @property
    def geocoding_service(self):
        return self.inner.geocoding_service

    async def assess(self, location):
        gate = self.gates.get(location.name)
        if gate is not None:
            await gate.wait()
        return await self.inner.assess(location)


class BrokenRiskService:
    geocoding_service = None

    async def assess(self, location):
        raise RuntimeError("aggregation failed")


def test_initial_state_is_idle():
    state = DashboardState()
    assert state.phase is FetchPhase.IDLE
    assert state.location.name == "New York, NY"
    assert not state.search_visible


@pytest.mark.asyncio
async def test_select_location_with_services_offline(offline_risk_service):
    controller = DashboardController(risk_service=offline_risk_service)
    state = await controller.select_location(TOKYO)

    assert state.phase is FetchPhase.DISPLAYING
    assert state.location == TOKYO
    assert state.data_source is DataSourceState.SIMULATED
    assert set(state.assessment.risks) == set(HazardType)
    assert len(state.assessment.weather.forecast) == 24
    assert state.last_update is not None


@pytest.mark.asyncio
async def test_failed_aggregation_enters_error_state():
    controller = DashboardController(risk_service=BrokenRiskService())
    state = await controller.load()

    assert state.phase is FetchPhase.ERROR
    assert state.data_source is DataSourceState.ERROR
    assert state.error == "aggregation failed"


@pytest.mark.asyncio
async def test_slow_fetch_cannot_overwrite_newer_selection(offline_risk_service):
    service = GatedRiskService(offline_risk_service)
    gate = asyncio.Event()
    service.gates[TOKYO.name] = gate
    controller = DashboardController(risk_service=service)

    slow = asyncio.create_task(controller.select_location(TOKYO))
    await asyncio.sleep(0)
    await controller.select_location(LONDON)
    gate.set()
    await slow

    assert controller.state.location == LONDON
    assert controller.state.assessment.location == LONDON
    assert controller.state.phase is FetchPhase.DISPLAYING


def test_stale_fetch_failure_is_ignored():
    state = update(DashboardState(), FetchStarted())
    stale_id = state.request_id
    state = update(state, FetchStarted())

    assert update(state, FetchFailed(request_id=stale_id, error="timeout")) == state


@pytest.mark.asyncio
async def test_short_query_hides_results_without_lookup(offline_risk_service):
    geolocator = FakeGeolocator(results=[])
    offline_risk_service.geocoding_service = GeocodingService(geolocator=geolocator, timezone_finder=FakeTimezoneFinder())
    controller = DashboardController(risk_service=offline_risk_service)

    state = await controller.search("to")

    assert geolocator.calls == []
    assert not state.search_visible
    assert state.search_results == ()


@pytest.mark.asyncio
async def test_search_shows_fallback_results(offline_risk_service):
    controller = DashboardController(risk_service=offline_risk_service)
    state = await controller.search("Tokyo")

    assert state.search_visible
    assert [loc.name for loc in state.search_results] == ["Tokyo, Japan"]

    state = await controller.select_location(state.search_results[0])
    assert not state.search_visible
    assert state.search_query == ""


def test_stale_search_results_are_dropped():
    state = update(DashboardState(), SearchChanged(query="Lon"))
    stale_id = state.search_request_id
    state = update(state, SearchChanged(query="Lond"))

    assert update(state, SearchResolved(request_id=stale_id, results=(TOKYO,))) == state

    state = update(state, SearchResolved(request_id=state.search_request_id, results=(LONDON,)))
    assert state.search_results == (LONDON,)
    assert state.search_visible


def test_shortening_query_hides_results():
    state = update(DashboardState(), SearchChanged(query="Lon"))
    state = update(state, SearchResolved(request_id=state.search_request_id, results=(LONDON,)))
    state = update(state, SearchChanged(query="Lo"))

    assert not state.search_visible
    assert state.search_results == ()


def test_clear_search(offline_risk_service):
    controller = DashboardController(risk_service=offline_risk_service)
    controller.dispatch(SearchChanged(query="Lon"))
    state = controller.clear_search()

    assert state.search_query == ""
    assert not state.search_visible


@pytest.mark.asyncio
async def test_periodic_refresh_reloads_until_cancelled(offline_risk_service):
    controller = DashboardController(risk_service=offline_risk_service)
    task = asyncio.create_task(controller.run_periodic_refresh(interval=0.01))

    for _ in range(200):
        if controller.state.request_id >= 2:
            break
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert controller.state.request_id >= 2


@pytest.mark.asyncio
async def test_periodic_refresh_can_load_before_waiting(offline_risk_service):
    controller = DashboardController(risk_service=offline_risk_service)
    task = asyncio.create_task(controller.run_periodic_refresh(interval=3600, load_first=True))

    for _ in range(200):
        if controller.state.phase is FetchPhase.DISPLAYING:
            break
        await asyncio.sleep(0.01)
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert controller.state.phase is FetchPhase.DISPLAYING
    assert controller.state.request_id == 1
