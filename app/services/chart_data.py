import pandas as pd

from app.services.aqi_utils import aqi_category

# =====================================================
# DASHBOARD TABLES
# =====================================================


def trend_frame(analysis) -> pd.DataFrame:
    """Trend series sorted oldest -> newest, with AQI category."""
    df = pd.DataFrame((analysis or {}).get("trend_series") or [],
                      columns=["timestamp", "aqi", "rolling_average"])
    if df.empty:
        return df

    df["timestamp"] = pd.to_datetime(df["timestamp"], errors="coerce", utc=True)
    df = df.dropna(subset=["timestamp"]).sort_values("timestamp").reset_index(drop=True)
    df["category"] = df["aqi"].apply(aqi_category)
    return df


def forecast_frame(analysis) -> pd.DataFrame:
    forecast = (analysis or {}).get("forecast") or {}
    rows = []
    for horizon in ("short_term", "long_term"):
        for point in forecast.get(horizon) or []:
            rows.append({"horizon": horizon, **point})

    df = pd.DataFrame(rows, columns=["horizon", "timestamp", "projected_aqi"])
    if not df.empty:
        df["timestamp"] = pd.to_datetime(df["timestamp"], errors="coerce", utc=True)
    return df


def breakdown_frame(analysis) -> pd.DataFrame:
    return pd.DataFrame((analysis or {}).get("pollutant_breakdown") or [],
                        columns=["pollutant", "value", "unit", "dominance"])


def matrix_frame(overview) -> pd.DataFrame:
    rows = [
        {
            "city": entry.get("city_name"),
            "aqi": entry.get("aqi"),
            "change": entry.get("change"),
            "level": (entry.get("level") or {}).get("label"),
            "dominant_pollutant": entry.get("dominant_pollutant"),
            "risk_score": entry.get("risk_score"),
        }
        for entry in (overview or {}).get("matrix") or []
    ]
    df = pd.DataFrame(rows, columns=["city", "aqi", "change", "level", "dominant_pollutant", "risk_score"])
    return df.sort_values("aqi", ascending=False).reset_index(drop=True)


def temporal_frame(overview, pattern: str = "hourly") -> pd.DataFrame:
    index_col = "hour" if pattern == "hourly" else "day"
    points = ((overview or {}).get("temporal_patterns") or {}).get(pattern) or []
    df = pd.DataFrame(points, columns=[index_col, "average_aqi"])
    return df.set_index(index_col)
