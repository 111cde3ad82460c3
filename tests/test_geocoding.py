import pytest
from geopy.exc import GeocoderServiceError, GeocoderTimedOut

from disaster_risk.weather.geocoding import (
    GeocodingError, GeocodingService, fallback_locations, location_from_nominatim
)

from conftest import FakeGeolocator, FakeTimezoneFinder

PARIS = {
    "display_name": "Paris, Ile-de-France, Metropolitan France, France",
    "lat": "48.8588897",
    "lon": "2.3200410",
    "type": "city",
    "importance": 0.88,
    "address": {"city": "Paris", "country": "France"},
}


def service(geolocator):
    return GeocodingService(geolocator=geolocator, timezone_finder=FakeTimezoneFinder("Europe/Paris"))


def test_short_query_makes_no_request():
    geolocator = FakeGeolocator(results=[PARIS])
    geocoding = service(geolocator)

    assert geocoding.search("pa") == []
    assert geocoding.search("  p  ") == []
    assert geolocator.calls == []


def test_search_maps_nominatim_results():
    geolocator = FakeGeolocator(results=[PARIS])
    results = service(geolocator).search("Paris")

    assert len(results) == 1
    paris = results[0]
    assert paris.name == "Paris, Ile-de-France"
    assert paris.lat == pytest.approx(48.8588897)
    assert paris.lon == pytest.approx(2.320041)
    assert paris.country == "France"
    assert paris.type == "city"
    assert paris.importance == 0.88

    query, kwargs = geolocator.calls[0]
    assert query == "Paris"
    assert kwargs == {"exactly_one": False, "limit": 5, "addressdetails": True}


def test_missing_country_is_unknown():
    raw = dict(PARIS, address={})
    assert location_from_nominatim(raw).country == "Unknown"


def test_no_matches_returns_empty_list():
    assert service(FakeGeolocator(results=None)).search("Atlantis") == []


@pytest.mark.parametrize("error", [GeocoderTimedOut("slow"), GeocoderServiceError("HTTP 503")])
def test_service_errors_fall_back_to_builtin_cities(error):
    results = service(FakeGeolocator(error=error)).search("tokyo")

    assert [loc.name for loc in results] == ["Tokyo, Japan"]
    assert results[0].lat == 35.6762


def test_malformed_result_falls_back_to_builtin_cities():
    results = service(FakeGeolocator(results=[{"name": "no coordinates"}])).search("San Fran")
    assert [loc.name for loc in results] == ["San Francisco, CA"]


def test_fallback_is_case_insensitive_and_capped():
    assert [loc.name for loc in fallback_locations("LONDON")] == ["London, UK"]
    assert len(fallback_locations("a")) == 5


def test_resolve_city_raises_when_nothing_matches():
    geocoding = service(FakeGeolocator(error=GeocoderTimedOut("slow")))
    with pytest.raises(GeocodingError):
        geocoding.resolve_city("Nowhereville")


def test_timezone_lookup():
    assert service(FakeGeolocator()).get_timezone(48.85, 2.35) == "Europe/Paris"


def test_timezone_defaults_to_utc():
    geocoding = GeocodingService(geolocator=FakeGeolocator(), timezone_finder=FakeTimezoneFinder(None))
    assert geocoding.get_timezone(0, -30) == "UTC"


def test_timezone_finder_is_built_with_the_service(monkeypatch):
    built = []

    class RecordingTimezoneFinder(FakeTimezoneFinder):
        def __init__(self, **kwargs):
            super().__init__("Europe/Paris")
            built.append(kwargs)

    monkeypatch.setattr("disaster_risk.weather.geocoding.TimezoneFinder", RecordingTimezoneFinder)
    geocoding = GeocodingService(geolocator=FakeGeolocator())

    assert built == [{"in_memory": True}]
    assert geocoding.get_timezone(48.85, 2.35) == "Europe/Paris"
