import math

from config.constants import AQI_THRESHOLDS

# =====================================================
# AQI LEVELS (ordered, upper bound inclusive)
# =====================================================

AQI_LEVELS = [
    {"key": "good", "label": "Good", "color": "#31d17c", "threshold": AQI_THRESHOLDS["good"]},
    {"key": "moderate", "label": "Moderate", "color": "#ffce54", "threshold": AQI_THRESHOLDS["moderate"]},
    {"key": "unhealthy", "label": "Unhealthy", "color": "#ff8a5b", "threshold": AQI_THRESHOLDS["unhealthy"]},
    {"key": "very-unhealthy", "label": "Very Unhealthy", "color": "#d9534f",
     "threshold": AQI_THRESHOLDS["very-unhealthy"]},
    {"key": "hazardous", "label": "Hazardous", "color": "#6f1a07", "threshold": math.inf},
]

UNKNOWN_COLOR = "#95a5a6"


def _as_finite(value):
    try:
        value = float(value)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


# =====================================================
# AQI VALUE → LEVEL
# =====================================================
def get_aqi_level(value) -> dict:
    """
    Severity level for an AQI value as {key, label, color}.
    Non-numeric input maps to the first (good) level.
    """
    aqi = _as_finite(value)
    level = AQI_LEVELS[0]

    if aqi is not None:
        level = next(lvl for lvl in AQI_LEVELS if aqi <= lvl["threshold"])

    return {"key": level["key"], "label": level["label"], "color": level["color"]}


# =====================================================
# AQI VALUE → CATEGORY
# =====================================================
def aqi_category(aqi) -> str:
    if _as_finite(aqi) is None:
        return "Unknown"
    return get_aqi_level(aqi)["label"]


# =====================================================
# AQI VALUE → COLOR
# =====================================================
def aqi_color_from_value(aqi) -> str:
    if _as_finite(aqi) is None:
        return UNKNOWN_COLOR
    return get_aqi_level(aqi)["color"]
