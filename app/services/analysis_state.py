import time

from app.services.aqi_utils import get_aqi_level
from app.services.analysis_fallback import normalize_analysis_window
from config.city_catalog import CITY_CATALOG, CITY_CATALOG_BY_ID, default_cohort_ids
from config.constants import DEFAULT_WINDOW, SOURCE_FALLBACK, SOURCE_REMOTE


class _RefreshableState:
    """
    Holds the last result of a query and refetches only when the
    effective request key changes (or on force=True).
    """

    def __init__(self, service, clock=time.time):
        self.service = service
        self._clock = clock
        self._last_key = None
        self.status = "idle"
        self.error = None
        self.source = SOURCE_FALLBACK
        self.last_fetched = None

    def _request_key(self):
        raise NotImplementedError

    def _fetch(self):
        raise NotImplementedError

    def _store(self, data):
        raise NotImplementedError

    def _apply(self, params):
        raise NotImplementedError

    def _validate(self):
        return None

    @property
    def is_loading(self) -> bool:
        return self.status == "loading"

    @property
    def error_message(self):
        """Displayable text for `error`, which may be a dict or an exception."""
        if self.error is None:
            return None
        if isinstance(self.error, dict):
            return self.error.get("message") or str(self.error)
        return str(self.error)

    def refresh(self, params=None, force: bool = False) -> bool:
        """Returns True when a fetch was issued."""
        if params:
            self._apply(params)

        message = self._validate()
        if message:
            self._store(None)
            self.error = {"message": message}
            self.status = "error"
            self._last_key = None
            return False

        key = self._request_key()
        if not force and key == self._last_key:
            return False

        self.status = "loading"
        result = self._fetch()

        if not result.get("data"):
            self._store(None)
            self.error = result.get("error") or {"message": "Unable to load analysis data."}
            self.source = SOURCE_FALLBACK
            self.status = "error"
            self._last_key = None
            return True

        self._store(result["data"])
        self.source = result.get("source") or SOURCE_FALLBACK
        self.error = result.get("error") if self.source == SOURCE_REMOTE else None
        self.status = "success"
        self.last_fetched = self._clock()
        self._last_key = key
        return True


# =====================================================
# SINGLE CITY
# =====================================================
class CityAnalysisState(_RefreshableState):

    def __init__(self, service, city_id=None, window=DEFAULT_WINDOW, clock=time.time):
        super().__init__(service, clock=clock)
        self.city_id = city_id
        self.window = normalize_analysis_window(window)
        self.analysis = None

    def _apply(self, params):
        if "city_id" in params:
            self.city_id = params["city_id"]
        if "window" in params:
            self.window = normalize_analysis_window(params["window"])

    def _validate(self):
        if not self.city_id:
            return "City identifier is required for analysis."
        return None

    def _request_key(self):
        return (self.city_id, self.window)

    def _fetch(self):
        return self.service.fetch_city_analysis(self.city_id, self.window)

    def _store(self, data):
        self.analysis = data

    @property
    def city(self):
        return CITY_CATALOG_BY_ID.get(self.city_id)

    @property
    def latest_point(self):
        series = (self.analysis or {}).get("trend_series") or []
        return series[-1] if series else None

    @property
    def dominant_pollutant(self):
        breakdown = (self.analysis or {}).get("pollutant_breakdown") or []
        return breakdown[0] if breakdown else None

    @property
    def risk_level(self):
        if self.latest_point and self.latest_point.get("aqi"):
            return get_aqi_level(self.latest_point["aqi"])
        if self.city and self.city.get("aqi"):
            return get_aqi_level(self.city["aqi"])
        return get_aqi_level(0)

    @property
    def highlight_metrics(self):
        comparisons = (self.analysis or {}).get("comparisons") or {}
        current = self.latest_point["aqi"] if self.latest_point else (self.city or {}).get("aqi")
        return {
            "current_aqi": current,
            "trend_direction": comparisons.get("direction", "flat"),
            "avg_comparison_delta": comparisons.get("delta", 0),
            "critical_hours": comparisons.get("critical_hours", 0),
            "advisory_triggers": comparisons.get("advisory_triggers", 0),
        }


# =====================================================
# MULTI CITY
# =====================================================
class MultiCityAnalysisState(_RefreshableState):

    def __init__(self, service, city_ids=None, window=DEFAULT_WINDOW, clock=time.time):
        super().__init__(service, clock=clock)
        self.window = normalize_analysis_window(window)
        self.selected_city_ids = list(city_ids) if city_ids else default_cohort_ids()
        self.overview = None

    def _apply(self, params):
        if "city_ids" in params:
            self.set_cities(params["city_ids"])
        if "window" in params:
            self.window = normalize_analysis_window(params["window"])

    def _validate(self):
        if not self.selected_city_ids:
            return "Select at least one city to build analysis."
        return None

    def _request_key(self):
        return (tuple(self.selected_city_ids), self.window)

    def _fetch(self):
        return self.service.fetch_multi_city_overview(self.selected_city_ids, self.window)

    def _store(self, data):
        self.overview = data

    def set_cities(self, city_ids):
        unique = list(dict.fromkeys(cid for cid in city_ids or [] if cid in CITY_CATALOG_BY_ID))
        self.selected_city_ids = unique or default_cohort_ids()

    def toggle_city(self, city_id):
        if city_id in self.selected_city_ids:
            remaining = [cid for cid in self.selected_city_ids if cid != city_id]
            if remaining:
                self.selected_city_ids = remaining
        else:
            self.selected_city_ids = self.selected_city_ids + [city_id]

    @property
    def matrix(self):
        matrix = (self.overview or {}).get("matrix")
        return matrix if isinstance(matrix, list) else []

    @property
    def hotspots(self):
        return sorted(self.matrix, key=lambda e: e["aqi"], reverse=True)[:5]

    @property
    def healthiest(self):
        return sorted(self.matrix, key=lambda e: e["aqi"])[:5]

    @property
    def dominant_pollutants(self):
        return [
            {
                "city_id": e["city_id"],
                "city_name": e["city_name"],
                "pollutant": e.get("dominant_pollutant"),
                "level": get_aqi_level(e["aqi"]),
            }
            for e in self.matrix
        ]

    @property
    def available_cities(self):
        selected = set(self.selected_city_ids)
        return [c for c in CITY_CATALOG if c["id"] not in selected]
