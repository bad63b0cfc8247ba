import streamlit as st
import matplotlib.pyplot as plt

from app.app_config import DASHBOARD_CONFIG
from app.resources import chip, get_analysis_service
from app.services.analysis_state import CityAnalysisState
from app.services.chart_data import breakdown_frame, forecast_frame, trend_frame
from config.city_catalog import CITY_CATALOG, CITY_CATALOG_BY_ID
from config.constants import SOURCE_FALLBACK

# =====================================================
# PAGE CONFIG
# =====================================================
st.set_page_config(
    page_title="City Analysis",
    layout="wide"
)

st.title("📊 City Analysis")

# =====================================================
# CONTROLS
# =====================================================
c1, c2 = st.columns([2, 1])
with c1:
    city_id = st.selectbox(
        "City",
        options=[c["id"] for c in CITY_CATALOG],
        format_func=lambda cid: CITY_CATALOG_BY_ID[cid]["name"],
    )
with c2:
    window = st.radio(
        "Window",
        DASHBOARD_CONFIG["windows"],
        index=DASHBOARD_CONFIG["windows"].index(DASHBOARD_CONFIG["default_window"]),
        horizontal=True,
    )

# =====================================================
# LOAD DATA (refetch only when city/window changed)
# =====================================================
if "city_analysis_state" not in st.session_state:
    st.session_state["city_analysis_state"] = CityAnalysisState(get_analysis_service())

state = st.session_state["city_analysis_state"]
state.refresh({"city_id": city_id, "window": window}, force=st.button("🔄 Refresh"))

if state.status == "error" or not state.analysis:
    st.error(state.error_message or "Unable to load analysis data.")
    st.stop()

analysis = state.analysis

if state.source == SOURCE_FALLBACK:
    st.caption("Showing locally generated analytics (remote backend unavailable).")
if state.error:
    st.warning(f"Remote backend reported: {state.error_message}")

st.divider()

# =====================================================
# HIGHLIGHTS
# =====================================================
metrics = state.highlight_metrics
level = state.risk_level

h1, h2, h3, h4 = st.columns(4)
h1.metric("Current AQI", metrics["current_aqi"], metrics["avg_comparison_delta"])
h2.markdown(chip(level["label"], level["color"]), unsafe_allow_html=True)
h3.metric("Critical points", metrics["critical_hours"])
h4.metric("Advisory triggers", metrics["advisory_triggers"])

# =====================================================
# TREND CHART WITH AQI BANDS
# =====================================================
st.subheader(f"AQI Trend ({window})")

df = trend_frame(analysis)

fig, ax = plt.subplots(figsize=(14, 5))

band_colors = [
    (0, 50, "#31d17c", 0.12),
    (51, 100, "#ffce54", 0.12),
    (101, 200, "#ff8a5b", 0.12),
    (201, 300, "#d9534f", 0.12),
    (301, 500, "#6f1a07", 0.12),
]

for low, high, color, alpha in band_colors:
    ax.axhspan(low, high, color=color, alpha=alpha)

ax.plot(df["timestamp"], df["aqi"], label="AQI", linewidth=2.5, marker="o")
ax.plot(df["timestamp"], df["rolling_average"], label="Rolling average", linestyle="--", linewidth=2)
ax.set_xlabel("Time")
ax.set_ylabel("AQI")
ax.tick_params(axis="x", rotation=45)
ax.grid(alpha=0.35)
ax.legend()

st.pyplot(fig, use_container_width=True)

# =====================================================
# FORECAST + POLLUTANTS
# =====================================================
f1, f2 = st.columns(2)

with f1:
    st.subheader("Forecast")
    fdf = forecast_frame(analysis)
    for horizon, label in (("short_term", "Short term"), ("long_term", "Next 5 days")):
        part = fdf[fdf["horizon"] == horizon].set_index("timestamp")["projected_aqi"]
        st.caption(label)
        st.line_chart(part)

with f2:
    st.subheader("Pollutant Breakdown")
    st.bar_chart(breakdown_frame(analysis).set_index("pollutant")["value"])

# =====================================================
# ADVISORIES, SOURCES, WEATHER
# =====================================================
st.subheader("Health Advisories")
for advisory in analysis.get("health_advisories", []):
    with st.expander(f"[{advisory['severity']}] {advisory['headline']}"):
        st.write(advisory["description"])
        for action in advisory["actions"]:
            st.markdown(f"- {action}")

s1, s2, s3 = st.columns(3)
with s1:
    st.subheader("Likely Sources")
    for source in analysis.get("source_attribution", []):
        st.progress(source["confidence"], text=f"{source['source']} ({source['impact']})")
with s2:
    st.subheader("Weather Correlation")
    for item in analysis.get("weather_correlations", []):
        st.write(f"{item['metric']}: {item['correlation']:+.2f}")
with s3:
    st.subheader("Exposure")
    exposure = analysis.get("exposure", {})
    st.metric("Estimated population", f"{exposure.get('estimated_population', 0):,}")
    st.metric("AQI load index", exposure.get("aqi_load_index", 0))
    st.metric("Exposure hours", exposure.get("exposure_hours", 0))

st.caption(f"Generated: {analysis.get('meta', {}).get('generated_at', 'N/A')}")
