from unittest.mock import patch

from app.services.snapshot_cache import SnapshotCache


def _snapshot(city_id, aqi=100):
    return {"id": city_id, "name": city_id.title(), "aqi": aqi}


class TestSnapshotCache:

    def test_store_and_get_in_request_order(self, fake_clock):
        cache = SnapshotCache(ttl_seconds=60, clock=fake_clock)
        assert cache.store([_snapshot("delhi"), _snapshot("mumbai")]) == 2

        result = cache.get(["mumbai", "pune", "delhi"])
        assert [s["id"] for s in result] == ["mumbai", "delhi"]
        assert "delhi" in cache
        assert "pune" not in cache

    def test_entries_without_id_are_skipped(self, fake_clock):
        cache = SnapshotCache(ttl_seconds=60, clock=fake_clock)
        assert cache.store([{"aqi": 10}, None, _snapshot("delhi")]) == 1
        assert len(cache) == 1
        assert cache.store([]) == 0

    def test_valid_up_to_ttl_inclusive(self, fake_clock):
        cache = SnapshotCache(ttl_seconds=60, clock=fake_clock)
        cache.store([_snapshot("delhi")])

        fake_clock.advance(60)
        assert cache.get(["delhi"])

        fake_clock.advance(0.001)
        assert cache.get(["delhi"]) == []

    def test_expired_entries_read_as_absent_until_pruned(self, fake_clock):
        cache = SnapshotCache(ttl_seconds=60, clock=fake_clock)
        cache.store([_snapshot("delhi")])
        fake_clock.advance(61)
        cache.store([_snapshot("mumbai")])

        assert len(cache) == 2
        assert cache.get(["delhi", "mumbai"]) == [_snapshot("mumbai")]

        assert cache.prune_expired() == 1
        assert len(cache) == 1
        assert cache.prune_expired() == 0

    def test_restore_refreshes_timestamp(self, fake_clock):
        cache = SnapshotCache(ttl_seconds=60, clock=fake_clock)
        cache.store([_snapshot("delhi", aqi=100)])
        fake_clock.advance(50)
        cache.store([_snapshot("delhi", aqi=150)])
        fake_clock.advance(50)

        assert cache.get(["delhi"]) == [_snapshot("delhi", aqi=150)]

    def test_clear(self, fake_clock):
        cache = SnapshotCache(ttl_seconds=60, clock=fake_clock)
        cache.store([_snapshot("delhi"), _snapshot("mumbai")])

        cache.clear("delhi")
        assert cache.get(["delhi", "mumbai"]) == [_snapshot("mumbai")]

        cache.clear()
        assert len(cache) == 0

    def test_default_ttl_from_settings(self):
        assert SnapshotCache().ttl_seconds == 30 * 60

    def test_empty_request(self, fake_clock):
        cache = SnapshotCache(ttl_seconds=60, clock=fake_clock)
        assert cache.get([]) == []
        assert cache.get(None) == []

    def test_prune_with_nothing_stale_leaves_store_untouched(self, fake_clock):
        cache = SnapshotCache(ttl_seconds=60, clock=fake_clock)
        cache.store([_snapshot("delhi"), _snapshot("mumbai")])
        entries = dict(cache._entries)

        with patch("app.services.snapshot_cache.logger") as logger:
            assert cache.prune_expired() == 0
            assert cache.prune_expired() == 0

        assert cache._entries == entries
        logger.info.assert_not_called()
