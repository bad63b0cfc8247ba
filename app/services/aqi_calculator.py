# =========================================================
# BREAKPOINT AQI CALCULATOR
# ---------------------------------------------------------
# Sub-index per pollutant via piecewise-linear interpolation
# over (c_low, c_high, i_low, i_high) breakpoint tuples.
# Overall AQI = max sub-index; its pollutant is dominant.
# =========================================================

import math

from app.services.utils import round_half_up
from config.constants import (
    AQI_MAX,
    AQI_MIN,
    POLLUTANT_LABELS,
    POLLUTANT_UNITS,
)

# =========================================================
# BREAKPOINT TABLES (US EPA, contiguous, ascending)
# =========================================================
AQI_BREAKPOINTS = {
    "pm25": [(0.0, 12.0, 0, 50), (12.1, 35.4, 51, 100), (35.5, 55.4, 101, 150),
             (55.5, 150.4, 151, 200), (150.5, 250.4, 201, 300), (250.5, 350.4, 301, 400),
             (350.5, 500.4, 401, 500)],
    "pm10": [(0, 54, 0, 50), (55, 154, 51, 100), (155, 254, 101, 150),
             (255, 354, 151, 200), (355, 424, 201, 300), (425, 504, 301, 400),
             (505, 604, 401, 500)],
}

# pollutants without a full table: fixed linear scale, capped
LINEAR_SCALE_FACTORS = {
    "no2": 0.53,
    "so2": 0.43,
    "o3": 0.66,
    "co": 50,
}
UNTABLED_SCALE_FACTOR = 1.2
LINEAR_MAX_INDEX = 400

_KEY_ALIASES = {
    "pm2.5": "pm25",
    "pm2_5": "pm25",
    "pm25": "pm25",
    "pm10": "pm10",
    "no2": "no2",
    "no₂": "no2",
    "so2": "so2",
    "so₂": "so2",
    "o3": "o3",
    "o₃": "o3",
    "co": "co",
}


def normalize_pollutant_key(name):
    if name is None:
        return None
    key = str(name).strip().lower()
    return _KEY_ALIASES.get(key, key) or None


def as_concentration(value):
    """Finite, non-negative float or None."""
    if isinstance(value, bool):
        return None
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


# =========================================================
# SUB-INDEX
# =========================================================
def breakpoint_aqi(conc: float, breakpoints) -> int:
    """
    Interpolate within the range containing conc. Values in the
    gap between two ranges use the upper one; values above the
    table are clamped to its last upper bound.
    """
    if not breakpoints:
        return 0

    c_low, c_high, i_low, i_high = breakpoints[-1]
    conc = min(conc, c_high)

    for bp in breakpoints:
        if conc <= bp[1]:
            c_low, c_high, i_low, i_high = bp
            break

    conc = max(conc, c_low)
    return round_half_up(((i_high - i_low) / (c_high - c_low)) * (conc - c_low) + i_low)


def calculate_sub_index(pollutant, conc):
    """Integer sub-index in [0, 500], or None for unusable input."""
    key = normalize_pollutant_key(pollutant)
    conc = as_concentration(conc)
    if key is None or conc is None:
        return None

    if key in AQI_BREAKPOINTS:
        index = breakpoint_aqi(conc, AQI_BREAKPOINTS[key])
    else:
        factor = LINEAR_SCALE_FACTORS.get(key, UNTABLED_SCALE_FACTOR)
        index = round_half_up(min(LINEAR_MAX_INDEX, conc * factor))

    return min(AQI_MAX, max(AQI_MIN, index))


# =========================================================
# OVERALL AQI + DOMINANT POLLUTANT
# =========================================================
def _reading_pairs(readings):
    if isinstance(readings, dict):
        return list(readings.items())
    return [
        (r.get("pollutant") or r.get("parameter"), r.get("value"))
        for r in readings
        if isinstance(r, dict)
    ]


def compute_aqi(readings) -> dict:
    """
    readings: mapping of pollutant -> concentration, or a list of
    {pollutant, value, ...} records, evaluated in order. Ties keep
    the first pollutant evaluated.
    Returns {"aqi": int, "dominant_key": str | None}.
    """
    final_aqi = 0
    dominant_key = None

    for pollutant, conc in _reading_pairs(readings or {}):
        index = calculate_sub_index(pollutant, conc)
        if index is None:
            continue

        if dominant_key is None or index > final_aqi:
            final_aqi = index
            dominant_key = normalize_pollutant_key(pollutant)

    return {"aqi": final_aqi, "dominant_key": dominant_key}


# =========================================================
# MEASUREMENT AGGREGATION
# =========================================================
def aggregate_measurements(measurements) -> dict:
    """
    Group measurement records ({parameter, value, unit, date: {utc}})
    by pollutant key into {average, unit, last_updated}.
    """
    totals = {}

    for m in measurements or []:
        if not isinstance(m, dict):
            continue

        key = normalize_pollutant_key(m.get("parameter"))
        value = as_concentration(m.get("value"))
        if not key or value is None:
            continue

        observed = (m.get("date") or {}).get("utc")

        if key not in totals:
            totals[key] = {
                "sum": 0.0,
                "count": 0,
                "unit": m.get("unit") or POLLUTANT_UNITS.get(key, ""),
                "last_updated": observed,
            }

        entry = totals[key]
        entry["sum"] += value
        entry["count"] += 1

        if observed and (not entry["last_updated"] or observed > entry["last_updated"]):
            entry["last_updated"] = observed

    return {
        key: {
            "average": entry["sum"] / entry["count"] if entry["count"] else None,
            "unit": entry["unit"],
            "last_updated": entry["last_updated"],
        }
        for key, entry in totals.items()
    }


def compute_aqi_from_aggregates(aggregates) -> dict:
    averages = {key: (value or {}).get("average") for key, value in (aggregates or {}).items()}
    return compute_aqi(averages)


def format_pollutants(aggregates) -> dict:
    formatted = {}
    for key, value in (aggregates or {}).items():
        label = POLLUTANT_LABELS.get(key, key.upper())
        unit = (value or {}).get("unit") or POLLUTANT_UNITS.get(key, "")
        average = as_concentration((value or {}).get("average"))
        formatted[label] = f"{round(average, 1)} {unit}".strip() if average is not None else "No data"
    return formatted


def most_recent_timestamp(aggregates):
    stamps = [v.get("last_updated") for v in (aggregates or {}).values() if v and v.get("last_updated")]
    return max(stamps) if stamps else None
