import streamlit as st

from app.app_config import APP_CONFIG, DASHBOARD_CONFIG
from app.resources import chip, get_snapshot_cache
from app.services.aqi_utils import aqi_category, aqi_color_from_value
from app.services.metrics_service import fetch_city_metrics
from config.city_catalog import CITY_CATALOG_BY_ID, search_cities

# =====================================================
# PAGE CONFIG
# =====================================================
st.set_page_config(
    page_title=APP_CONFIG["title"],
    page_icon=APP_CONFIG["icon"],
    layout=APP_CONFIG["layout"],
    initial_sidebar_state=APP_CONFIG["initial_sidebar_state"],
)

# =====================================================
# HEADER
# =====================================================
st.title("🌫️ Live AQI Monitor")
st.caption("Tracked cities, refreshed from live measurements (cached for 30 minutes).")
st.divider()

# =====================================================
# TRACKED CITIES
# =====================================================
if "tracked_city_ids" not in st.session_state:
    st.session_state["tracked_city_ids"] = list(DASHBOARD_CONFIG["tracked_city_ids"])

query = st.text_input("Find a city", placeholder="name, region or country")
options = list(dict.fromkeys(
    st.session_state["tracked_city_ids"] + [c["id"] for c in search_cities(query)]
))

tracked = st.multiselect(
    "Tracked cities",
    options=options,
    default=st.session_state["tracked_city_ids"],
    format_func=lambda cid: CITY_CATALOG_BY_ID[cid]["name"],
)
st.session_state["tracked_city_ids"] = tracked

if not tracked:
    st.info("Add a city to start monitoring.")
    st.stop()

# =====================================================
# LOAD DATA
# =====================================================
cache = get_snapshot_cache()

if st.button("🔄 Refresh live data"):
    for cid in tracked:
        cache.clear(cid)

result = fetch_city_metrics(tracked, cache)

if result["error"]:
    st.warning(f"Live metrics unavailable, showing baseline values. ({result['error']})")

# =====================================================
# CITY CARDS
# =====================================================
cols = st.columns(min(len(result["data"]), 4) or 1)

for i, city in enumerate(result["data"]):
    with cols[i % len(cols)]:
        st.subheader(city["name"])
        st.metric("AQI", city.get("aqi"))
        st.markdown(
            chip(aqi_category(city.get("aqi")), aqi_color_from_value(city.get("aqi"))),
            unsafe_allow_html=True
        )
        st.caption(f"Dominant: {city.get('dominant_pollutant') or 'N/A'}")
        st.caption(f"Updated: {city.get('updated_at') or 'baseline'}")

st.divider()

at_risk = [c for c in result["data"] if (c.get("aqi") or 0) >= 151]
st.caption(f"Cities at risk: {len(at_risk)} of {len(result['data'])} tracked")
