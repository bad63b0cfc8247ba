import math
from datetime import datetime, timezone

import requests

from app.services.aqi_calculator import (
    aggregate_measurements,
    compute_aqi_from_aggregates,
    format_pollutants,
    most_recent_timestamp,
)
from config.constants import POLLUTANT_KEYS, POLLUTANT_LABELS, SOURCE_OPENAQ
from config.logging import logger
from config.settings import settings


def _has_coordinates(city) -> bool:
    try:
        return math.isfinite(float(city.get("lat"))) and math.isfinite(float(city.get("lng")))
    except (TypeError, ValueError):
        return False


def _headers():
    headers = {"Accept": "application/json"}
    if settings.OPENAQ_API_KEY:
        headers["X-API-Key"] = settings.OPENAQ_API_KEY
    return headers


# =====================================================
# FETCH MEASUREMENTS AROUND A POINT
# =====================================================
def fetch_measurements(lat, lng, session=None, radius=None, limit=None):
    """Latest measurements near (lat, lng). Raises requests errors."""
    http = session or requests

    params = {
        "coordinates": f"{lat},{lng}",
        "radius": radius or settings.OPENAQ_RADIUS_METERS,
        "limit": limit or settings.OPENAQ_LIMIT,
        "sort": "desc",
        "order_by": "datetime",
        "page": 1,
        "parameters[]": POLLUTANT_KEYS,
    }

    response = http.get(
        f"{settings.OPENAQ_BASE_URL}/measurements",
        params=params,
        headers=_headers(),
        timeout=30
    )
    response.raise_for_status()

    payload = response.json() or {}
    return payload.get("results") or []


# =====================================================
# CITY SNAPSHOT
# =====================================================
def build_city_snapshot(city: dict, measurements: list) -> dict:
    aggregates = aggregate_measurements(measurements)
    result = compute_aqi_from_aggregates(aggregates)
    dominant_key = result["dominant_key"]
    now = datetime.now(timezone.utc).isoformat()

    if dominant_key:
        dominant = POLLUTANT_LABELS.get(dominant_key, dominant_key.upper())
    else:
        dominant = city.get("dominant_pollutant")

    return {
        **city,
        "aqi": result["aqi"],
        "dominant_pollutant": dominant,
        "pollutants": {**(city.get("pollutants") or {}), **format_pollutants(aggregates)},
        "updated_at": most_recent_timestamp(aggregates) or now,
        "metadata": {
            **(city.get("metadata") or {}),
            "source": SOURCE_OPENAQ,
            "last_fetched_at": now,
            "dominant_key": dominant_key,
            "measurements_count": len(measurements),
        },
    }


def fetch_city_snapshot(city, session=None, cache=None):
    """
    Live snapshot for one catalog city, served from `cache` while
    valid. Returns None when the city cannot be located or the
    measurement service fails / has nothing.
    """
    if not city or not city.get("id") or not _has_coordinates(city):
        return None

    if cache is not None:
        cached = cache.get([city["id"]])
        if cached:
            return cached[0]

    try:
        logger.info(f"Fetching live measurements | city={city['id']}")
        measurements = fetch_measurements(city["lat"], city["lng"], session=session)

    except requests.RequestException as e:
        logger.error(f"Measurement request failed | city={city['id']} | {e}")
        return None

    if not measurements:
        logger.warning(f"No measurements returned | city={city['id']}")
        return None

    snapshot = build_city_snapshot(city, measurements)

    if cache is not None:
        cache.store([snapshot])

    return snapshot


def fetch_city_snapshots(cities, session=None, cache=None):
    if not cities:
        return []

    snapshots = [fetch_city_snapshot(city, session=session, cache=cache) for city in cities]
    return [s for s in snapshots if s]
