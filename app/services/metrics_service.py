from app.services.mongo_service import MongoService
from app.services.openaq_service import fetch_city_snapshots
from config.city_catalog import CITY_CATALOG_BY_ID
from config.logging import logger
from config.settings import settings


def _catalog_cities(city_ids):
    return [CITY_CATALOG_BY_ID[cid] for cid in city_ids if cid in CITY_CATALOG_BY_ID]


def _merge_metrics(catalog_city, remote_row, snapshot):
    remote_row = remote_row or {}
    snapshot = snapshot or {}

    def pick(remote_key, snapshot_key):
        for value in (remote_row.get(remote_key), snapshot.get(snapshot_key), catalog_city.get(snapshot_key)):
            if value is not None:
                return value
        return None

    return {
        **catalog_city,
        **snapshot,
        "aqi": pick("aqi", "aqi"),
        "dominant_pollutant": pick("dominant_pollutant", "dominant_pollutant"),
        "pollutants": pick("pollutants", "pollutants"),
        "updated_at": remote_row.get("updated_at") or snapshot.get("updated_at"),
    }


def fetch_city_metrics(city_ids, cache, client=MongoService, session=None, has_remote_credentials=None):
    """
    Current metrics for tracked cities. Valid cached snapshots are
    reused; only the rest are fetched live. Returns {"data", "error"};
    on failure data falls back to catalog baselines.
    """
    city_ids = list(city_ids or [])
    if has_remote_credentials is None:
        has_remote_credentials = settings.has_remote_credentials

    try:
        if not city_ids:
            return {"data": [], "error": None}

        cache.prune_expired()
        cached = cache.get(city_ids)
        cached_ids = {s["id"] for s in cached}

        missing = [c for c in _catalog_cities(city_ids) if c["id"] not in cached_ids]
        fresh = fetch_city_snapshots(missing, session=session, cache=cache) if missing else []

        if fresh:
            logger.info(f"Live snapshots fetched: {len(fresh)} | served from cache: {len(cached)}")

        snapshots = {s["id"]: s for s in cached + fresh}
        remote_rows = {}

        if has_remote_credentials:
            if fresh:
                client.upsert_measurements(fresh)
            remote_rows = {row.get("city_id"): row for row in client.get_city_metrics(city_ids)}

        return {
            "data": [
                _merge_metrics(CITY_CATALOG_BY_ID[cid], remote_rows.get(cid), snapshots.get(cid))
                for cid in city_ids
                if cid in CITY_CATALOG_BY_ID
            ],
            "error": None,
        }

    except Exception as e:
        logger.warning(f"City metrics unavailable, serving catalog baselines: {e}")
        return {"data": _catalog_cities(city_ids), "error": str(e)}
