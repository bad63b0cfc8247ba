from config.city_catalog import DEFAULT_TRACKED_CITY_IDS
from config.constants import ANALYSIS_WINDOWS, DEFAULT_WINDOW

APP_CONFIG = {
    "title": "Air Quality Analytics",
    "icon": "🌫️",
    "layout": "wide",
    "initial_sidebar_state": "expanded",
}

DASHBOARD_CONFIG = {
    "tracked_city_ids": DEFAULT_TRACKED_CITY_IDS,
    "windows": ANALYSIS_WINDOWS,
    "default_window": DEFAULT_WINDOW,
}
