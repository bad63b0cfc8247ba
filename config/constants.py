# =========================
# AQI SEVERITY THRESHOLDS
# =========================

AQI_THRESHOLDS = {
    "good": 50,
    "moderate": 100,
    "unhealthy": 200,
    "very-unhealthy": 300,
}

AQI_MIN = 0
AQI_MAX = 500

CRITICAL_AQI = 200
ADVISORY_AQI = 150

# =========================
# ANALYSIS WINDOWS
# =========================

ANALYSIS_WINDOWS = ["24h", "7d", "30d"]
DEFAULT_WINDOW = "7d"

HOUR_SECONDS = 60 * 60
DAY_SECONDS = 24 * HOUR_SECONDS

RANGE_CONFIG = {
    "24h": {"points": 24, "step_seconds": HOUR_SECONDS},
    "7d": {"points": 7, "step_seconds": DAY_SECONDS},
    "30d": {"points": 30, "step_seconds": DAY_SECONDS},
}

# synthetic series bounds
SERIES_MIN_AQI = 20
SERIES_MAX_AQI = 420
ROLLING_MAX_AQI = 400

DEFAULT_COHORT_SIZE = 6
LEADERBOARD_SIZE = 4

# =========================
# POLLUTANTS
# =========================

POLLUTANT_KEYS = ["pm25", "pm10", "no2", "so2", "o3", "co"]

POLLUTANT_LABELS = {
    "pm25": "PM2.5",
    "pm10": "PM10",
    "no2": "NO₂",
    "so2": "SO₂",
    "o3": "O₃",
    "co": "CO",
}

POLLUTANT_UNITS = {
    "pm25": "µg/m³",
    "pm10": "µg/m³",
    "no2": "µg/m³",
    "so2": "µg/m³",
    "o3": "µg/m³",
    "co": "ppm",
}

# order used by the synthetic breakdown
BREAKDOWN_POLLUTANTS = ["PM2.5", "PM10", "NO₂", "SO₂", "CO", "O₃"]

WEATHER_METRICS = [
    "temperature",
    "humidity",
    "wind_speed",
    "precipitation",
    "surface_pressure",
]

# =========================
# REMOTE BACKEND
# =========================

RPC_CITY_ANALYSIS = "get_city_analysis"
RPC_MULTI_CITY_OVERVIEW = "get_multi_city_overview"
RPC_CITY_FORECAST = "get_city_forecast"

CITY_ANALYSIS_COLLECTION = "city_analysis"
MULTI_CITY_OVERVIEW_COLLECTION = "multi_city_overview"
CITY_FORECAST_COLLECTION = "city_forecast"
CITY_METRICS_COLLECTION = "city_aqi_metrics"
MEASUREMENTS_COLLECTION = "aq_measurements"
INGESTION_AUDIT_COLLECTION = "aq_ingestion_audit"

SOURCE_REMOTE = "remote"
SOURCE_FALLBACK = "fallback"
SOURCE_OPENAQ = "openaq"

# =========================
# OFF-THREAD WORKER
# =========================

WORKER_MESSAGE_TYPE = "buildCityAnalysis"
WORKER_STATUS_SUCCESS = "success"
WORKER_STATUS_ERROR = "error"
