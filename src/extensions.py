import threading

from cachetools import TTLCache

from backend.api_client import BackendClient
from invoices.invoice_draft import DraftStore


class SnapshotCache:
    """Per-tenant, time-limited copies of read-mostly backend data (products, settings)."""

    def __init__(self, maxsize=256, ttl=300):
        self._lock = threading.Lock()
        self._cache = TTLCache(maxsize=maxsize, ttl=ttl)

    def init_app(self, app):
        self._cache = TTLCache(maxsize=app.config.get("SNAPSHOT_MAX", 256), ttl=app.config.get("SNAPSHOT_TTL", 300))
        app.extensions["snapshots"] = self

    def get_or_load(self, kind, tenant_key, loader):
        key = (kind, tenant_key)
        with self._lock:
            if key in self._cache:
                return self._cache[key]
        # loader runs outside the lock; a concurrent miss just fetches twice
        value = loader()
        with self._lock:
            self._cache[key] = value
        return value

    def invalidate(self, kind, tenant_key):
        with self._lock:
            self._cache.pop((kind, tenant_key), None)

    def clear(self):
        with self._lock:
            self._cache.clear()


# Initialized in the application factory
backend = BackendClient()
snapshots = SnapshotCache()
drafts = DraftStore()
