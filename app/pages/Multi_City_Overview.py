import streamlit as st

from app.app_config import DASHBOARD_CONFIG
from app.resources import get_analysis_service
from app.services.analysis_state import MultiCityAnalysisState
from app.services.chart_data import matrix_frame, temporal_frame
from config.city_catalog import CITY_CATALOG, CITY_CATALOG_BY_ID, default_cohort_ids
from config.constants import SOURCE_FALLBACK

# =====================================================
# PAGE CONFIG
# =====================================================
st.set_page_config(
    page_title="Multi-City Overview",
    layout="wide"
)

st.title("🌍 Multi-City Overview")

# =====================================================
# CONTROLS
# =====================================================
city_ids = st.multiselect(
    "Cities",
    options=[c["id"] for c in CITY_CATALOG],
    default=default_cohort_ids(),
    format_func=lambda cid: CITY_CATALOG_BY_ID[cid]["name"],
)
window = st.radio("Window", DASHBOARD_CONFIG["windows"], index=1, horizontal=True)

if "multi_city_state" not in st.session_state:
    st.session_state["multi_city_state"] = MultiCityAnalysisState(get_analysis_service())

state = st.session_state["multi_city_state"]
state.refresh({"city_ids": city_ids, "window": window}, force=st.button("🔄 Refresh"))

if state.status == "error" or not state.overview:
    st.error(state.error_message or "Unable to load multi-city overview.")
    st.stop()

overview = state.overview

if state.source == SOURCE_FALLBACK:
    st.caption("Showing locally generated analytics (remote backend unavailable).")

# =====================================================
# CUMULATIVE IMPACT
# =====================================================
impact = overview.get("cumulative_impact", {})
k1, k2, k3, k4 = st.columns(4)
k1.metric("Average AQI", impact.get("average_aqi"))
k2.metric("Hazardous hours", impact.get("hazardous_hours"))
k3.metric("Alerts issued", impact.get("alerts_issued"))
k4.metric("Population exposed", f"{impact.get('population_exposed', 0):,}")

st.divider()

# =====================================================
# MATRIX + LEADERBOARDS
# =====================================================
st.subheader("Comparison Matrix")
st.dataframe(matrix_frame(overview), use_container_width=True)

l1, l2 = st.columns(2)
leaders = overview.get("trend_leaders", {})
with l1:
    st.subheader("Improving")
    for entry in leaders.get("improving", []):
        st.write(f"{entry['city_name']}: {entry['delta']:+d} (AQI {entry['current_aqi']})")
with l2:
    st.subheader("Deteriorating")
    for entry in leaders.get("deteriorating", []):
        st.write(f"{entry['city_name']}: {entry['delta']:+d} (AQI {entry['current_aqi']})")

# =====================================================
# TEMPORAL PATTERNS
# =====================================================
t1, t2 = st.columns(2)
with t1:
    st.subheader("Hourly pattern")
    st.line_chart(temporal_frame(overview, "hourly"))
with t2:
    st.subheader("Weekly pattern")
    st.bar_chart(temporal_frame(overview, "weekly"))

st.subheader("Hotspots")
for entry in state.hotspots:
    st.write(f"{entry['city_name']}: AQI {entry['aqi']} ({entry['level']['label']})")
