import streamlit as st

from app.services.analysis_service import AnalysisService
from app.services.analysis_worker import CityAnalysisDispatcher
from app.services.snapshot_cache import SnapshotCache


# =====================================================
# SHARED, CONSTRUCTED ONCE PER SERVER PROCESS
# =====================================================
@st.cache_resource
def get_analysis_service() -> AnalysisService:
    return AnalysisService(dispatcher=CityAnalysisDispatcher())


def get_snapshot_cache() -> SnapshotCache:
    """One cache per browser session."""
    if "snapshot_cache" not in st.session_state:
        st.session_state["snapshot_cache"] = SnapshotCache()
    return st.session_state["snapshot_cache"]


def chip(label: str, bg: str):
    """Small colored chip (safe HTML, never breaks)."""
    if not label:
        label = "Unknown"
    if not bg:
        bg = "#95a5a6"
    return f"""
    <span style="
        display:inline-block;
        padding:6px 12px;
        border-radius:999px;
        font-size:14px;
        font-weight:700;
        background:{bg};
        color:white;
    ">
        {label}
    </span>
    """
