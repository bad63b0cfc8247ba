import pytest

from app.services.aqi_utils import (
    UNKNOWN_COLOR,
    aqi_category,
    aqi_color_from_value,
    get_aqi_level,
)


class TestAqiLevels:

    @pytest.mark.parametrize("aqi, key", [
        (0, "good"),
        (50, "good"),
        (51, "moderate"),
        (100, "moderate"),
        (101, "unhealthy"),
        (200, "unhealthy"),
        (201, "very-unhealthy"),
        (300, "very-unhealthy"),
        (301, "hazardous"),
        (500, "hazardous"),
    ])
    def test_thresholds_are_inclusive(self, aqi, key):
        assert get_aqi_level(aqi)["key"] == key

    def test_level_shape(self):
        assert get_aqi_level(212) == {
            "key": "very-unhealthy",
            "label": "Very Unhealthy",
            "color": "#d9534f",
        }

    @pytest.mark.parametrize("value", [None, "n/a", float("nan")])
    def test_non_numeric_maps_to_first_level(self, value):
        assert get_aqi_level(value)["key"] == "good"

    def test_category_and_color(self):
        assert aqi_category(75) == "Moderate"
        assert aqi_category(None) == "Unknown"
        assert aqi_color_from_value(350) == "#6f1a07"
        assert aqi_color_from_value("bad") == UNKNOWN_COLOR
