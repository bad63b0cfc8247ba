# =========================================================
# LOCAL ANALYTICS BUILDERS
# ---------------------------------------------------------
# Deterministic synthetic analytics used when the remote
# backend has no answer. Every facet draws from its own
# seeded generator "{city_id}-{window}-{facet}", so a
# snapshot is reproducible per (city, window) and only the
# timestamps / generated_at move with the clock.
# =========================================================

import math
from datetime import datetime, timedelta, timezone

from app.services.aqi_utils import get_aqi_level
from app.services.seeded_random import make_generator
from app.services.utils import clamp, mean, round_half_up, round_to
from config.city_catalog import CITY_CATALOG_BY_ID, default_cohort_ids, resolve_city
from config.constants import (
    ADVISORY_AQI,
    ANALYSIS_WINDOWS,
    BREAKDOWN_POLLUTANTS,
    CRITICAL_AQI,
    DAY_SECONDS,
    DEFAULT_WINDOW,
    LEADERBOARD_SIZE,
    RANGE_CONFIG,
    ROLLING_MAX_AQI,
    SERIES_MAX_AQI,
    SERIES_MIN_AQI,
    WEATHER_METRICS,
)

DEFAULT_BASELINE_AQI = 120
WEEKDAYS = ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]


def normalize_analysis_window(value) -> str:
    return value if value in ANALYSIS_WINDOWS else DEFAULT_WINDOW


def _now(now=None) -> datetime:
    return now or datetime.now(timezone.utc)


def _iso(dt: datetime) -> str:
    return dt.isoformat().replace("+00:00", "Z")


def _series_aqi(value) -> int:
    return clamp(round_half_up(value), SERIES_MIN_AQI, SERIES_MAX_AQI)


def _baseline(city, default=DEFAULT_BASELINE_AQI):
    aqi = city.get("aqi")
    return default if aqi is None else aqi


# =========================================================
# TREND + FORECAST
# =========================================================
def generate_trend_series(city: dict, window_key: str, now=None) -> list:
    window_key = normalize_analysis_window(window_key)
    config = RANGE_CONFIG[window_key]
    random = make_generator(f"{city['id']}-{window_key}-trend")
    now = _now(now)
    base = _baseline(city)
    points = config["points"]
    step = timedelta(seconds=config["step_seconds"])

    series = []
    for index in range(points):
        seasonal = math.sin((index / points) * math.pi * 2) * 18
        aqi = _series_aqi(base + seasonal + random.spread(40))
        rolling = clamp(
            round_half_up((aqi + base) / 2 + random.spread(10)),
            SERIES_MIN_AQI,
            ROLLING_MAX_AQI,
        )
        series.append({
            "timestamp": _iso(now - (points - index) * step),
            "aqi": aqi,
            "rolling_average": rolling,
        })

    return series


def generate_forecast_series(city: dict, window_key: str, latest_aqi=None, now=None) -> dict:
    window_key = normalize_analysis_window(window_key)
    random = make_generator(f"{city['id']}-{window_key}-forecast")
    step_seconds = RANGE_CONFIG[window_key]["step_seconds"]
    now = _now(now)
    base = latest_aqi if latest_aqi is not None else _baseline(city)

    # short-term runs at sub-step granularity
    divisor = 6 if window_key == "24h" else 3
    short_term = []
    for index in range(6):
        delta = random.spread(24) - index * 1.5
        short_term.append({
            "timestamp": _iso(now + timedelta(seconds=(index + 1) * step_seconds / divisor)),
            "projected_aqi": _series_aqi(base + delta),
        })

    long_term = []
    for index in range(5):
        seasonal = math.cos((index / 5) * math.pi) * 20
        drift = random.spread(35) - index * 2
        long_term.append({
            "timestamp": _iso(now + timedelta(seconds=(index + 1) * DAY_SECONDS)),
            "projected_aqi": _series_aqi(base + seasonal + drift),
        })

    return {"short_term": short_term, "long_term": long_term}


# =========================================================
# POLLUTANTS, ADVISORIES, SOURCES, WEATHER
# =========================================================
def generate_pollutant_breakdown(city: dict, window_key: str) -> list:
    random = make_generator(f"{city['id']}-{window_key}-pollutants")
    baseline = clamp(_baseline(city, 110), 40, 380)

    distribution = []
    for index, pollutant in enumerate(BREAKDOWN_POLLUTANTS):
        weight = (random() + index * 0.12) * (baseline / (index + 2))
        distribution.append({
            "pollutant": pollutant,
            "value": round_to(clamp(weight, 6, 180), 1),
            "unit": "µg/m³",
        })

    distribution.sort(key=lambda entry: entry["value"], reverse=True)

    for index, entry in enumerate(distribution):
        entry["dominance"] = "primary" if index == 0 else "secondary" if index == 1 else "minor"

    return distribution


HEALTH_ADVISORIES = {
    "good": [
        {
            "severity": "low",
            "headline": "Air quality is healthy",
            "description": "Outdoor activities are encouraged. Share clean air alerts with the community.",
            "actions": ["Continue routine monitoring", "Log baseline sensor readings"],
        },
    ],
    "moderate": [
        {
            "severity": "moderate",
            "headline": "Sensible precautions advised",
            "description": "Sensitive groups may experience mild symptoms. Keep hydration points ready.",
            "actions": ["Notify hospitals of moderate AQI", "Advise masks for vulnerable groups"],
        },
    ],
    "unhealthy": [
        {
            "severity": "high",
            "headline": "Unhealthy conditions detected",
            "description": "AQI exceeds safe thresholds. Trigger outdoor activity advisories.",
            "actions": ["Activate public alerts", "Deploy mobile air quality sensors",
                        "Coordinate with traffic control"],
        },
        {
            "severity": "medium",
            "headline": "Track respirable pollutant spikes",
            "description": "Respirable particles are elevated. Prepare support for respiratory clinics.",
            "actions": ["Distribute N95 masks to schools", "Extend clinic hours for respiratory cases"],
        },
    ],
    "very-unhealthy": [
        {
            "severity": "very-high",
            "headline": "Severe air quality emergency",
            "description": "AQI levels require immediate mitigation. Initiate emergency playbooks.",
            "actions": ["Enforce traffic restrictions", "Activate emergency operations center",
                        "Broadcast stay-indoors guidance"],
        },
        {
            "severity": "high",
            "headline": "Coordinate inter-agency response",
            "description": "Sustained high AQI requires multi-agency coordination for rapid response.",
            "actions": ["Schedule hourly command briefings", "Deploy mobile filtration units"],
        },
    ],
    "hazardous": [
        {
            "severity": "critical",
            "headline": "Hazardous conditions persisting",
            "description": "Population exposure is critical. Initiate shelter-in-place advisories.",
            "actions": ["Issue emergency broadcast alerts", "Deploy rapid response teams",
                        "Monitor hospital intake capacity"],
        },
        {
            "severity": "very-high",
            "headline": "Emergency relief activation",
            "description": "Coordinate relief logistics and ensure vulnerable populations receive support.",
            "actions": ["Distribute air purifiers to relief centers", "Authorize emergency funding releases"],
        },
    ],
}


def generate_health_advisories(level) -> list:
    key = (level or {}).get("key", "moderate")
    advisories = HEALTH_ADVISORIES.get(key, HEALTH_ADVISORIES["moderate"])
    return [dict(a, actions=list(a["actions"])) for a in advisories]


SOURCE_CATEGORIES = [
    {"source": "Vehicular Emissions", "impact": "transportation corridors"},
    {"source": "Industrial Output", "impact": "adjacent industrial estates"},
    {"source": "Construction Dust", "impact": "urban development zones"},
    {"source": "Agricultural Burning", "impact": "regional crop residue burning"},
    {"source": "Household Fuel", "impact": "domestic solid fuel usage"},
]


def generate_source_attribution(city: dict, window_key: str) -> list:
    random = make_generator(f"{city['id']}-{window_key}-sources")
    scored = [
        dict(entry, confidence=round(random.uniform(0.4, 0.9), 2))
        for entry in SOURCE_CATEGORIES
    ]
    scored.sort(key=lambda entry: entry["confidence"], reverse=True)
    return scored[:4]


def _correlation(random) -> float:
    return round(random.uniform(-0.8, 0.8), 2)


def generate_weather_correlation(city: dict, window_key: str) -> list:
    random = make_generator(f"{city['id']}-{window_key}-correlation")
    return [{"metric": metric, "correlation": _correlation(random)} for metric in WEATHER_METRICS]


# =========================================================
# PERIOD COMPARISON + EXPOSURE
# =========================================================
def generate_comparisons(trend_series: list, window_key: str) -> dict:
    if not trend_series:
        return {
            "current_average": 0,
            "previous_average": 0,
            "delta": 0,
            "direction": "flat",
            "critical_hours": 0,
            "advisory_triggers": 0,
        }

    total = len(trend_series)
    recent_size = 6 if window_key == "24h" else max(3, round_half_up(total / 4))
    previous_size = max(0, min(total - recent_size, recent_size * 2))

    current_slice = trend_series[-recent_size:]
    previous_slice = trend_series[-(recent_size + previous_size):-recent_size] if previous_size else []

    current_average = round_half_up(mean(p["aqi"] for p in current_slice))
    previous_average = round_half_up(mean(p["aqi"] for p in previous_slice))
    delta = current_average - previous_average

    return {
        "current_average": current_average,
        "previous_average": previous_average,
        "delta": delta,
        "direction": "flat" if delta == 0 else "rising" if delta > 0 else "improving",
        "critical_hours": sum(1 for p in current_slice if p["aqi"] >= CRITICAL_AQI),
        "advisory_triggers": sum(1 for p in current_slice if p["aqi"] >= ADVISORY_AQI),
    }


def generate_exposure_metrics(city: dict, trend_series: list) -> dict:
    if not trend_series:
        return {"estimated_population": 0, "aqi_load_index": 0, "exposure_hours": 0}

    # daily windows count each elevated day as 4 hour-equivalents
    scale = 1 if len(trend_series) >= 24 else 4

    return {
        "estimated_population": round_half_up(150000 + (city.get("population") or 0) * 0.15),
        "aqi_load_index": round_half_up(mean(p["aqi"] for p in trend_series)),
        "exposure_hours": sum(1 for p in trend_series if p["aqi"] >= ADVISORY_AQI) * scale,
    }


# =========================================================
# SINGLE CITY SNAPSHOT
# =========================================================
def build_city_analysis_fallback(city_id, window_key, now=None) -> dict:
    window_key = normalize_analysis_window(window_key)
    city = resolve_city(city_id)
    now = _now(now)

    trend_series = generate_trend_series(city, window_key, now=now)
    latest = trend_series[-1] if trend_series else None
    latest_aqi = latest["aqi"] if latest else None
    level = get_aqi_level(latest_aqi if latest_aqi is not None else city.get("aqi"))

    return {
        "city": {
            "id": city["id"],
            "name": city["name"],
            "state": city.get("state"),
            "country": city.get("country"),
            "coordinates": {"lat": city.get("lat"), "lng": city.get("lng")},
        },
        "trend_series": trend_series,
        "forecast": generate_forecast_series(city, window_key, latest_aqi, now=now),
        "pollutant_breakdown": generate_pollutant_breakdown(city, window_key),
        "health_advisories": generate_health_advisories(level),
        "source_attribution": generate_source_attribution(city, window_key),
        "weather_correlations": generate_weather_correlation(city, window_key),
        "comparisons": generate_comparisons(trend_series, window_key),
        "exposure": generate_exposure_metrics(city, trend_series),
        "meta": {
            "window": window_key,
            "generated_at": _iso(now),
            "level": level,
        },
    }


# =========================================================
# MULTI CITY OVERVIEW
# =========================================================
def _resolve_cohort(city_ids) -> list:
    requested = list(city_ids) if city_ids else default_cohort_ids()
    cities = [CITY_CATALOG_BY_ID[cid] for cid in requested if cid in CITY_CATALOG_BY_ID]
    return cities or [CITY_CATALOG_BY_ID[cid] for cid in default_cohort_ids()]


def _city_matrix_entry(city: dict, window_key: str) -> dict:
    random = make_generator(f"{city['id']}-{window_key}-matrix")
    change = round_half_up(random.spread(40))
    current_aqi = _series_aqi(_baseline(city) + change)
    breakdown = generate_pollutant_breakdown(city, window_key)

    return {
        "city_id": city["id"],
        "city_name": city["name"],
        "aqi": current_aqi,
        "change": change,
        "level": get_aqi_level(current_aqi),
        "dominant_pollutant": breakdown[0]["pollutant"] if breakdown else "PM2.5",
        "pollutant_breakdown": breakdown,
        "population": city.get("population") or 0,
        "hours_since_update": round_half_up(random() * 6),
        "risk_score": round(random() * 9 + 1, 1),
    }


def _leader(entry: dict) -> dict:
    return {
        "city_id": entry["city_id"],
        "city_name": entry["city_name"],
        "delta": entry["change"],
        "current_aqi": entry["aqi"],
        "level": entry["level"],
    }


def build_multi_city_fallback(city_ids, window_key, now=None) -> dict:
    window_key = normalize_analysis_window(window_key)
    cities = _resolve_cohort(city_ids)
    matrix = [_city_matrix_entry(city, window_key) for city in cities]

    improving = sorted(matrix, key=lambda e: e["change"])[:LEADERBOARD_SIZE]
    deteriorating = sorted(matrix, key=lambda e: e["change"], reverse=True)[:LEADERBOARD_SIZE]

    pollutant_matrix = [
        {
            "city_id": entry["city_id"],
            "city_name": entry["city_name"],
            "pollutants": [
                {"pollutant": p["pollutant"], "value": p["value"]}
                for p in entry["pollutant_breakdown"]
            ],
        }
        for entry in matrix
    ]

    correlation_insights = []
    for entry in matrix:
        random = make_generator(f"{entry['city_id']}-{window_key}-corr-matrix")
        correlation_insights.append({
            "city_id": entry["city_id"],
            "city_name": entry["city_name"],
            "correlations": {metric: _correlation(random) for metric in WEATHER_METRICS[:4]},
        })

    average_aqi = round_half_up(mean(entry["aqi"] for entry in matrix))
    hazardous_count = sum(1 for entry in matrix if entry["aqi"] >= CRITICAL_AQI)

    random = make_generator(f"temporal-{window_key}-{len(matrix)}")
    hourly = [
        {
            "hour": hour,
            "average_aqi": _series_aqi(
                average_aqi + math.sin((hour / 24) * math.pi * 2) * 18 + random.spread(20)
            ),
        }
        for hour in range(24)
    ]
    weekly = [
        {
            "day": day,
            "average_aqi": _series_aqi(
                average_aqi + math.cos((index / 7) * math.pi * 2) * 22 + random.spread(18)
            ),
        }
        for index, day in enumerate(WEEKDAYS)
    ]

    cumulative_impact = {
        "average_aqi": average_aqi,
        "hazardous_hours": hazardous_count * 6,
        "alerts_issued": hazardous_count * 2 + round_half_up((len(matrix) - hazardous_count) * 0.6),
        "population_exposed": round_half_up(
            sum(entry["population"] * (entry["aqi"] / 500) for entry in matrix)
        ),
    }

    return {
        "matrix": matrix,
        "pollutant_matrix": pollutant_matrix,
        "trend_leaders": {
            "improving": [_leader(e) for e in improving],
            "deteriorating": [_leader(e) for e in deteriorating],
        },
        "correlation_insights": correlation_insights,
        "temporal_patterns": {"hourly": hourly, "weekly": weekly},
        "cumulative_impact": cumulative_impact,
        "meta": {
            "window": window_key,
            "generated_at": _iso(_now(now)),
            "city_count": len(matrix),
        },
    }
