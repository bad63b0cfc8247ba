from unittest.mock import patch

from pymongo.errors import PyMongoError

from data_pipeline.ingest_latest import run_latest_ingestion


def _snapshot(city, session=None):
    return dict(city, aqi=150)


class TestRunLatestIngestion:

    def test_statuses_are_audited(self, remote_client):
        def fake_fetch(city, session=None):
            if city["id"] == "mumbai":
                return None
            if city["id"] == "kolkata":
                raise ValueError("malformed payload")
            return _snapshot(city)

        with patch("data_pipeline.ingest_latest.fetch_city_snapshot", side_effect=fake_fetch):
            summary = run_latest_ingestion(
                ["delhi", "mumbai", "kolkata", "atlantis"], client=remote_client
            )

        assert summary == {"success": 1, "empty": 1, "failed": 1, "upserted": 1}

        statuses = {c.args[0]: c.args[1] for c in remote_client.record_ingestion_log.call_args_list}
        assert statuses == {"delhi": "success", "mumbai": "empty", "kolkata": "failed"}

    def test_mongo_error_stops_run(self, remote_client):
        remote_client.upsert_measurements.side_effect = PyMongoError("write failed")

        with patch("data_pipeline.ingest_latest.fetch_city_snapshot", side_effect=_snapshot):
            summary = run_latest_ingestion(["delhi", "pune"], client=remote_client)

        assert summary["upserted"] == 0
        assert remote_client.upsert_measurements.call_count == 1
        remote_client.record_ingestion_log.assert_not_called()
