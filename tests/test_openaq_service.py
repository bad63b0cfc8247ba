from unittest.mock import MagicMock

import requests

from app.services.openaq_service import (
    build_city_snapshot,
    fetch_city_snapshot,
    fetch_city_snapshots,
    fetch_measurements,
)
from app.services.snapshot_cache import SnapshotCache
from config.city_catalog import CITY_CATALOG_BY_ID

DELHI = CITY_CATALOG_BY_ID["delhi"]

MEASUREMENTS = [
    {"parameter": "pm25", "value": 60.0, "unit": "µg/m³", "date": {"utc": "2025-10-10T07:50:00Z"}},
    {"parameter": "no2", "value": 40.0, "unit": "µg/m³", "date": {"utc": "2025-10-10T07:40:00Z"}},
]


def _session(results=None, error=None):
    response = MagicMock()
    response.json.return_value = {"results": results if results is not None else MEASUREMENTS}
    if error:
        response.raise_for_status.side_effect = error
    session = MagicMock()
    session.get.return_value = response
    return session


class TestFetchMeasurements:

    def test_request_shape(self):
        session = _session()

        results = fetch_measurements(28.6, 77.2, session=session, radius=5000, limit=10)

        assert results == MEASUREMENTS
        args, kwargs = session.get.call_args
        assert args[0].endswith("/measurements")
        assert kwargs["params"]["coordinates"] == "28.6,77.2"
        assert kwargs["params"]["radius"] == 5000
        assert kwargs["params"]["limit"] == 10
        assert kwargs["timeout"] == 30


class TestCitySnapshot:

    def test_snapshot_fields(self):
        snapshot = build_city_snapshot(DELHI, MEASUREMENTS)

        assert snapshot["id"] == "delhi"
        # pm25 60 -> 153, no2 40 -> 21
        assert snapshot["aqi"] == 153
        assert snapshot["dominant_pollutant"] == "PM2.5"
        assert snapshot["pollutants"]["PM2.5"] == "60.0 µg/m³"
        assert snapshot["updated_at"] == "2025-10-10T07:50:00Z"
        assert snapshot["metadata"]["source"] == "openaq"
        assert snapshot["metadata"]["measurements_count"] == 2

    def test_fetch_stores_in_cache_and_reuses(self, fake_clock):
        cache = SnapshotCache(ttl_seconds=60, clock=fake_clock)
        session = _session()

        first = fetch_city_snapshot(DELHI, session=session, cache=cache)
        second = fetch_city_snapshot(DELHI, session=session, cache=cache)

        assert first is second
        assert session.get.call_count == 1

        fake_clock.advance(61)
        fetch_city_snapshot(DELHI, session=session, cache=cache)
        assert session.get.call_count == 2

    def test_http_error_returns_none(self):
        session = _session(error=requests.HTTPError("503 Service Unavailable"))
        assert fetch_city_snapshot(DELHI, session=session) is None

    def test_connection_error_returns_none(self):
        session = MagicMock()
        session.get.side_effect = requests.ConnectionError("unreachable")
        assert fetch_city_snapshot(DELHI, session=session) is None

    def test_no_results_returns_none(self):
        assert fetch_city_snapshot(DELHI, session=_session(results=[])) is None

    def test_city_without_coordinates_is_skipped(self):
        session = _session()
        assert fetch_city_snapshot({"id": "x", "lat": None, "lng": 1.0}, session=session) is None
        assert fetch_city_snapshot(None, session=session) is None
        session.get.assert_not_called()

    def test_many_drops_failures(self):
        session = _session()
        cities = [DELHI, {"id": "nowhere"}, CITY_CATALOG_BY_ID["pune"]]
        snapshots = fetch_city_snapshots(cities, session=session)
        assert [s["id"] for s in snapshots] == ["delhi", "pune"]
        assert fetch_city_snapshots([], session=session) == []
