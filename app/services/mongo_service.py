from datetime import datetime, timezone

from pymongo import UpdateOne

from config.constants import (
    CITY_ANALYSIS_COLLECTION,
    CITY_FORECAST_COLLECTION,
    CITY_METRICS_COLLECTION,
    INGESTION_AUDIT_COLLECTION,
    MEASUREMENTS_COLLECTION,
    MULTI_CITY_OVERVIEW_COLLECTION,
    RPC_CITY_ANALYSIS,
    RPC_CITY_FORECAST,
    RPC_MULTI_CITY_OVERVIEW,
    SOURCE_OPENAQ,
)
from config.mongo import get_database

RPC_COLLECTIONS = {
    RPC_CITY_ANALYSIS: CITY_ANALYSIS_COLLECTION,
    RPC_MULTI_CITY_OVERVIEW: MULTI_CITY_OVERVIEW_COLLECTION,
    RPC_CITY_FORECAST: CITY_FORECAST_COLLECTION,
}


class MongoService:
    """
    Remote backend client. Analytics payloads are precomputed
    documents {city_id | city_ids, range_window, generated_at, payload};
    the newest matching document answers an RPC call.
    """

    # =================================================
    # DB HANDLE (shared client, see config.mongo)
    # =================================================
    @classmethod
    def get_db(cls):
        return get_database()

    # =================================================
    # RPC-STYLE LOOKUPS
    # =================================================
    @classmethod
    def rpc(cls, name: str, params: dict):
        """
        Returns {"data": payload | None, "error": None}.
        Driver errors propagate to the caller.
        """
        if name not in RPC_COLLECTIONS:
            raise ValueError(f"Unknown remote call: {name}")

        params = params or {}
        query = {"range_window": params.get("range_window")}

        if "city_ids" in params:
            city_ids = params.get("city_ids")
            query["city_ids"] = sorted(city_ids) if city_ids else None
        else:
            query["city_id"] = params.get("city_id")

        db = cls.get_db()
        row = db[RPC_COLLECTIONS[name]].find_one(
            query,
            sort=[("generated_at", -1)],
            projection={"_id": 0, "payload": 1}
        )

        return {"data": (row or {}).get("payload"), "error": None}

    # =================================================
    # LATEST CITY METRICS
    # =================================================
    @classmethod
    def get_city_metrics(cls, city_ids):
        if not city_ids:
            return []

        db = cls.get_db()
        return list(
            db[CITY_METRICS_COLLECTION].find(
                {"city_id": {"$in": list(city_ids)}},
                {"_id": 0, "city_id": 1, "aqi": 1, "dominant_pollutant": 1,
                 "pollutants": 1, "updated_at": 1}
            )
        )

    # =================================================
    # LIVE MEASUREMENT UPSERTS
    # =================================================
    @classmethod
    def upsert_measurements(cls, snapshots) -> int:
        operations = []

        for snapshot in snapshots or []:
            if not isinstance(snapshot, dict) or not snapshot.get("id"):
                continue

            metadata = dict(snapshot.get("metadata") or {})
            metadata.setdefault("source", SOURCE_OPENAQ)

            rec = {
                "city_id": snapshot["id"],
                "aqi": snapshot.get("aqi"),
                "dominant_pollutant": snapshot.get("dominant_pollutant"),
                "pollutants": snapshot.get("pollutants"),
                "recorded_at": snapshot.get("updated_at") or datetime.now(timezone.utc).isoformat(),
                "metadata": metadata,
            }

            operations.append(
                UpdateOne({"city_id": rec["city_id"]}, {"$set": rec}, upsert=True)
            )

        if not operations:
            return 0

        db = cls.get_db()
        db[MEASUREMENTS_COLLECTION].bulk_write(operations)
        return len(operations)

    @classmethod
    def record_ingestion_log(cls, city_id, status, error=None, started_at=None, finished_at=None):
        now = datetime.now(timezone.utc)
        db = cls.get_db()
        db[INGESTION_AUDIT_COLLECTION].insert_one({
            "city_id": city_id,
            "status": status,
            "error_message": error,
            "started_at": started_at or now,
            "finished_at": finished_at or now,
        })
