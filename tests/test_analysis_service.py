from unittest.mock import MagicMock

import pytest

from app.services.analysis_service import AnalysisService
from app.services.analysis_worker import CityAnalysisDispatcher


REMOTE_PAYLOAD = {"city": {"id": "delhi"}, "trend_series": [{"aqi": 180}]}


def _service(remote_client, has_remote_credentials=True):
    return AnalysisService(
        client=remote_client,
        dispatcher=CityAnalysisDispatcher(enabled=False),
        has_remote_credentials=has_remote_credentials,
    )


# =====================================================
# SINGLE CITY
# =====================================================
class TestFetchCityAnalysis:

    def test_without_credentials_uses_local_build(self, remote_client):
        result = _service(remote_client, has_remote_credentials=False).fetch_city_analysis("delhi", "7d")

        assert result["source"] == "fallback"
        assert result["error"] is None
        assert result["data"]["city"]["id"] == "delhi"
        assert len(result["data"]["trend_series"]) == 7
        remote_client.rpc.assert_not_called()

    def test_remote_data_is_returned(self, remote_client):
        remote_client.rpc.return_value = {"data": REMOTE_PAYLOAD, "error": None}

        result = _service(remote_client).fetch_city_analysis("delhi", "24h")

        assert result == {"data": REMOTE_PAYLOAD, "error": None, "source": "remote"}
        remote_client.rpc.assert_called_once_with(
            "get_city_analysis", {"city_id": "delhi", "range_window": "24h"}
        )

    def test_remote_exception_falls_back_with_error(self, remote_client):
        failure = ConnectionError("backend down")
        remote_client.rpc.side_effect = failure

        result = _service(remote_client).fetch_city_analysis("mumbai", "30d")

        assert result["source"] == "fallback"
        assert result["error"] is failure
        assert len(result["data"]["trend_series"]) == 30

    def test_remote_error_falls_back_with_error(self, remote_client):
        remote_client.rpc.return_value = {"data": None, "error": {"message": "rpc failed"}}

        result = _service(remote_client).fetch_city_analysis("delhi", "7d")

        assert result["source"] == "fallback"
        assert result["error"] == {"message": "rpc failed"}
        assert result["data"]["city"]["id"] == "delhi"

    def test_empty_remote_data_falls_back_without_error(self, remote_client):
        remote_client.rpc.return_value = {"data": None, "error": None}

        result = _service(remote_client).fetch_city_analysis("delhi", "7d")

        assert result["source"] == "fallback"
        assert result["error"] is None

    def test_invalid_window_is_normalized(self, remote_client):
        result = _service(remote_client, has_remote_credentials=False).fetch_city_analysis("delhi", "1y")
        assert result["data"]["meta"]["window"] == "7d"

    def test_fallback_goes_through_dispatcher(self, remote_client):
        dispatcher = MagicMock()
        dispatcher.build_city_analysis_offthread.return_value = {"city": {"id": "pune"}}
        service = AnalysisService(client=remote_client, dispatcher=dispatcher, has_remote_credentials=False)

        result = service.fetch_city_analysis("pune", "24h")

        dispatcher.build_city_analysis_offthread.assert_called_once_with("pune", "24h")
        assert result["data"] == {"city": {"id": "pune"}}


# =====================================================
# MULTI CITY
# =====================================================
class TestFetchMultiCityOverview:

    def test_params_and_remote_result(self, remote_client):
        remote_client.rpc.return_value = {"data": {"matrix": []}, "error": None}

        result = _service(remote_client).fetch_multi_city_overview(("delhi", "pune"), "24h")

        remote_client.rpc.assert_called_once_with(
            "get_multi_city_overview", {"city_ids": ["delhi", "pune"], "range_window": "24h"}
        )
        assert result["source"] == "remote"

    def test_empty_selection_sends_null(self, remote_client):
        _service(remote_client).fetch_multi_city_overview([], "7d")
        remote_client.rpc.assert_called_once_with(
            "get_multi_city_overview", {"city_ids": None, "range_window": "7d"}
        )

    def test_fallback_overview(self, remote_client):
        result = _service(remote_client, has_remote_credentials=False).fetch_multi_city_overview(
            ["delhi", "kolkata"], "30d"
        )
        assert result["source"] == "fallback"
        assert [e["city_id"] for e in result["data"]["matrix"]] == ["delhi", "kolkata"]
        assert result["data"]["meta"]["window"] == "30d"


# =====================================================
# FORECAST SUMMARY
# =====================================================
class TestFetchCityForecastSummary:

    def test_fallback_summary_subset(self, remote_client):
        result = _service(remote_client, has_remote_credentials=False).fetch_city_forecast_summary("chennai")

        assert set(result["data"]) == {"city", "trend_series", "forecast", "meta"}
        assert result["data"]["city"]["id"] == "chennai"
        assert result["data"]["meta"]["window"] == "7d"

    @pytest.mark.parametrize("window", ["24h", "7d", "30d"])
    def test_remote_call_name(self, remote_client, window):
        remote_client.rpc.return_value = {"data": {"forecast": {}}, "error": None}

        result = _service(remote_client).fetch_city_forecast_summary("delhi", window)

        remote_client.rpc.assert_called_once_with(
            "get_city_forecast", {"city_id": "delhi", "range_window": window}
        )
        assert result["source"] == "remote"
