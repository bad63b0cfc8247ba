from datetime import datetime, timezone

from pymongo.errors import PyMongoError

from app.services.mongo_service import MongoService
from app.services.openaq_service import fetch_city_snapshot
from config.city_catalog import CITY_CATALOG_BY_ID, DEFAULT_TRACKED_CITY_IDS
from config.logging import logger


# =====================================================
# FETCH LIVE SNAPSHOTS + UPSERT + AUDIT
# =====================================================

def run_latest_ingestion(city_ids=None, client=MongoService, session=None):
    logger.info("========== LATEST INGESTION START ==========")

    city_ids = city_ids or DEFAULT_TRACKED_CITY_IDS
    summary = {"success": 0, "empty": 0, "failed": 0, "upserted": 0}

    try:
        for city_id in city_ids:
            city = CITY_CATALOG_BY_ID.get(city_id)
            started_at = datetime.now(timezone.utc)

            if city is None:
                logger.warning(f"Skipping unknown city: {city_id}")
                continue

            status, error = "success", None
            try:
                snapshot = fetch_city_snapshot(city, session=session)
                if snapshot:
                    summary["upserted"] += client.upsert_measurements([snapshot])
                else:
                    status = "empty"

            except PyMongoError:
                raise

            except Exception as e:
                logger.exception(f"Unexpected ingestion error | city={city_id}: {e}")
                status, error = "failed", str(e)

            summary[status] += 1
            client.record_ingestion_log(
                city_id,
                status,
                error=error,
                started_at=started_at,
                finished_at=datetime.now(timezone.utc),
            )

        logger.info(f"Upserted: {summary['upserted']}")
        logger.info("========== INGESTION COMPLETE ==========")

    except PyMongoError as e:
        logger.error(f"MongoDB error: {e}")

    return summary


if __name__ == "__main__":
    run_latest_ingestion()
