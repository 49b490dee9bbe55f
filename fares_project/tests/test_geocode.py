import pytest
import requests
from django.conf import settings
from django.core.cache import cache

from fares.exceptions import GeocodingError
from fares.services import geocode as geocode_module
from fares.services.geocode import GeocodingService, haversine_km
from fares.services.service_area import Location


class FakeResponse:
    def __init__(self, data, status_code=200):
        self._data = data
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._data


FEATURES = {
    "type": "FeatureCollection",
    "query": ["chennai"],
    "features": [
        {
            "id": "place.123",
            "type": "Feature",
            "place_type": ["place"],
            "relevance": 1,
            "properties": {},
            "text": "Chennai",
            "place_name": "Chennai, Tamil Nadu, India",
            "center": [80.2707, 13.0827],
            "geometry": {"type": "Point", "coordinates": [80.2707, 13.0827]},
            "context": [
                {"id": "district.1", "text": "Chennai District"},
                {"id": "region.2", "text": "Tamil Nadu", "short_code": "IN-TN"},
                {"id": "country.3", "text": "India", "short_code": "in"},
            ],
        },
        {
            "id": "place.456",
            "type": "Feature",
            "place_type": ["place"],
            "relevance": 0.5,
            "properties": {},
            "text": "Chennai",
            "place_name": "Chennai, Somewhere Else",
            "center": [10.0, 10.0],
            "geometry": {"type": "Point", "coordinates": [10.0, 10.0]},
            "context": [{"id": "country.9", "text": "Elsewhere", "short_code": "xx"}],
        },
    ],
}


@pytest.fixture(autouse=True)
def geocode_settings(monkeypatch):
    cache.clear()
    monkeypatch.setattr(settings, 'MAPBOX_TOKEN', 'fake-token', raising=False)
    monkeypatch.setattr(settings, 'GEOCODE_MIN_INTERVAL_MS', 0, raising=False)


def test_geocode_parsing(monkeypatch):
    called = {}

    def fake_get(url, params=None, headers=None, timeout=None):
        called['url'] = url
        called['params'] = params
        return FakeResponse(FEATURES)

    monkeypatch.setattr(requests, 'get', fake_get)

    results = GeocodingService.geocode('Chennai')
    assert len(results) == 1
    chennai = results[0]
    assert chennai.display_name == 'Chennai, Tamil Nadu, India'
    assert chennai.lat == pytest.approx(13.0827)
    assert chennai.lon == pytest.approx(80.2707)
    assert chennai.state == 'Tamil Nadu'
    assert chennai.address['district'] == 'Chennai District'
    assert chennai.address['country_code'] == 'in'
    assert chennai.address['place_type'] == 'place'
    assert chennai.place_id == 'place.123'

    assert called['url'].endswith('Chennai.json')
    assert called['params']['access_token'] == 'fake-token'
    assert called['params']['country'] == 'in'


def test_geocode_caching_by_normalized_query(monkeypatch):
    call_count = {'n': 0}

    def fake_get(url, params=None, headers=None, timeout=None):
        call_count['n'] += 1
        return FakeResponse(FEATURES)

    monkeypatch.setattr(requests, 'get', fake_get)

    first = GeocodingService.geocode('Chennai')
    second = GeocodingService.geocode('  chennai ')

    # requests.get should be called only once due to caching
    assert call_count['n'] == 1
    assert first == second


def test_geocode_short_query_skips_request(monkeypatch):
    def fake_get(*args, **kwargs):
        raise AssertionError('should not be called')

    monkeypatch.setattr(requests, 'get', fake_get)
    assert GeocodingService.geocode(' c ') == []
    assert GeocodingService.geocode('') == []


def test_geocode_requires_token(monkeypatch):
    monkeypatch.setattr(settings, 'MAPBOX_TOKEN', '')
    with pytest.raises(GeocodingError):
        GeocodingService.geocode('Chennai')


def test_geocode_upstream_error(monkeypatch):
    monkeypatch.setattr(requests, 'get', lambda url, params=None, headers=None, timeout=None: FakeResponse({}, status_code=401))
    with pytest.raises(GeocodingError):
        GeocodingService.geocode('Madurai')


def test_geocode_rate_limit_waits(monkeypatch):
    monkeypatch.setattr(settings, 'GEOCODE_MIN_INTERVAL_MS', 100)
    monkeypatch.setattr(requests, 'get', lambda url, params=None, headers=None, timeout=None: FakeResponse({"features": []}))

    clock = {'now': 1000.0}
    sleeps = []

    def fake_sleep(seconds):
        sleeps.append(seconds)
        clock['now'] += seconds

    monkeypatch.setattr(geocode_module.time, 'monotonic', lambda: clock['now'])
    monkeypatch.setattr(geocode_module.time, 'sleep', fake_sleep)
    monkeypatch.setattr(GeocodingService, '_last_request_ts', 0.0)

    GeocodingService.geocode('Madurai')
    clock['now'] += 0.03
    GeocodingService.geocode('Coimbatore')

    assert sleeps == [pytest.approx(0.07)]


def test_haversine():
    chennai = Location(display_name='Chennai', lat=13.0827, lon=80.2707)
    bengaluru = Location(display_name='Bengaluru', lat=12.9716, lon=77.5946)
    assert haversine_km(chennai, bengaluru) == pytest.approx(290.2, abs=1.0)
    assert haversine_km(chennai, chennai) == 0
