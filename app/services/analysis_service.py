from app.services.analysis_fallback import (
    build_multi_city_fallback,
    normalize_analysis_window,
)
from app.services.analysis_worker import CityAnalysisDispatcher
from app.services.mongo_service import MongoService
from config.constants import (
    ANALYSIS_WINDOWS,
    DEFAULT_WINDOW,
    RPC_CITY_ANALYSIS,
    RPC_CITY_FORECAST,
    RPC_MULTI_CITY_OVERVIEW,
    SOURCE_FALLBACK,
    SOURCE_REMOTE,
)
from config.logging import logger
from config.settings import settings

__all__ = ["ANALYSIS_WINDOWS", "AnalysisService", "normalize_analysis_window"]


class AnalysisService:
    """
    Public analytics queries. Each asks the remote backend first and
    substitutes local synthesis when the call raises, reports an error
    or returns nothing. Results are {"data", "error", "source"}.
    """

    def __init__(self, client=MongoService, dispatcher=None, has_remote_credentials=None):
        self.client = client
        self.dispatcher = dispatcher or CityAnalysisDispatcher()
        self.has_remote_credentials = (
            settings.has_remote_credentials if has_remote_credentials is None else has_remote_credentials
        )

    def _with_remote_fallback(self, rpc_name, params, fallback_builder):
        if not self.has_remote_credentials:
            return {"data": fallback_builder(), "error": None, "source": SOURCE_FALLBACK}

        try:
            response = self.client.rpc(rpc_name, params) or {}
            data, error = response.get("data"), response.get("error")
        except Exception as e:
            logger.warning(f"Remote call {rpc_name} failed: {e}. Using local fallback.")
            return {"data": fallback_builder(), "error": e, "source": SOURCE_FALLBACK}

        if error or not data:
            logger.warning(f"Remote call {rpc_name} returned {'an error' if error else 'no data'}. "
                           f"Using local fallback.")
            return {"data": fallback_builder(), "error": error, "source": SOURCE_FALLBACK}

        return {"data": data, "error": None, "source": SOURCE_REMOTE}

    # =================================================
    # SINGLE CITY
    # =================================================
    def fetch_city_analysis(self, city_id, window=DEFAULT_WINDOW):
        window_key = normalize_analysis_window(window)
        return self._with_remote_fallback(
            RPC_CITY_ANALYSIS,
            {"city_id": city_id, "range_window": window_key},
            lambda: self.dispatcher.build_city_analysis_offthread(city_id, window_key),
        )

    # =================================================
    # MULTI CITY
    # =================================================
    def fetch_multi_city_overview(self, city_ids=None, window=DEFAULT_WINDOW):
        window_key = normalize_analysis_window(window)
        return self._with_remote_fallback(
            RPC_MULTI_CITY_OVERVIEW,
            {"city_ids": list(city_ids) if city_ids else None, "range_window": window_key},
            lambda: build_multi_city_fallback(city_ids, window_key),
        )

    # =================================================
    # FORECAST SUMMARY
    # =================================================
    def fetch_city_forecast_summary(self, city_id, window=DEFAULT_WINDOW):
        window_key = normalize_analysis_window(window)

        def build_summary():
            analysis = self.dispatcher.build_city_analysis_offthread(city_id, window_key)
            return {
                "city": analysis["city"],
                "trend_series": analysis["trend_series"],
                "forecast": analysis["forecast"],
                "meta": analysis["meta"],
            }

        return self._with_remote_fallback(
            RPC_CITY_FORECAST,
            {"city_id": city_id, "range_window": window_key},
            build_summary,
        )
