import logging
import threading
from cachetools import TTLCache
from .clock import Clock, SystemClock
from ..schemas import LookupResult

logger = logging.getLogger(__name__)

class ResponseCache:
    """
    Process-lifetime memo of lookup results keyed by canonical request.

    Expiry is checked against the injected clock on read: an entry stored at
    t is served while now - t < ttl and treated as absent afterwards.
    """
    def __init__(self, ttl_seconds: int = 300, maxsize: int = 4096, clock: Clock | None = None):
        self.ttl_seconds = ttl_seconds
        self.clock = clock or SystemClock()
        self._entries: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=self.clock)
        self._lock = threading.Lock()

    def get(self, key: str) -> LookupResult | None:
        with self._lock:
            result = self._entries.get(key)
        logger.info("Cache %s | key=%s", "HIT" if result is not None else "MISS", key[:48])
        return result

    def put(self, key: str, result: LookupResult) -> None:
        with self._lock:
            self._entries[key] = result
