import time

from config.logging import logger
from config.settings import settings


class SnapshotCache:
    """
    TTL-bounded store of per-city snapshots for the live-metrics path.

    Entries are {"snapshot", "cached_at"} keyed by the snapshot id and
    are valid while now - cached_at <= ttl. Expired entries read as
    absent until prune_expired() drops them. Single writer assumed.
    """

    def __init__(self, ttl_seconds: float = None, clock=time.time):
        self.ttl_seconds = settings.snapshot_cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        self._entries = {}

    def __len__(self):
        return len(self._entries)

    def __contains__(self, city_id):
        return self._is_valid(self._entries.get(city_id))

    def _is_valid(self, entry) -> bool:
        if not isinstance(entry, dict) or entry.get("cached_at") is None:
            return False
        return self._clock() - entry["cached_at"] <= self.ttl_seconds

    def store(self, snapshots) -> int:
        """Cache snapshots by id; snapshots without an id are skipped."""
        if not snapshots:
            return 0

        now = self._clock()
        stored = 0

        for snapshot in snapshots:
            city_id = snapshot.get("id") if isinstance(snapshot, dict) else None
            if not city_id:
                continue
            self._entries[city_id] = {"snapshot": snapshot, "cached_at": now}
            stored += 1

        return stored

    def get(self, city_ids) -> list:
        """Valid snapshots for the ids, in order; missing/expired are skipped."""
        if not city_ids:
            return []

        return [
            self._entries[city_id]["snapshot"]
            for city_id in city_ids
            if self._is_valid(self._entries.get(city_id))
        ]

    def clear(self, city_id=None):
        if city_id is None:
            self._entries.clear()
            return
        self._entries.pop(city_id, None)

    def prune_expired(self) -> int:
        if all(self._is_valid(entry) for entry in self._entries.values()):
            return 0

        expired = [key for key, entry in self._entries.items() if not self._is_valid(entry)]

        for key in expired:
            del self._entries[key]

        logger.info(f"Pruned {len(expired)} expired snapshot(s)")

        return len(expired)
