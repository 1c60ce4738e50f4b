import threading
from dataclasses import dataclass
from starlette.requests import Request
from .clock import Clock, SystemClock

@dataclass
class RateWindow:
    count: int
    reset_at: float

class RateLimiter:
    """
    Fixed-window per-client limiter.

    The first call for a key (or the first after its window lapsed) opens a
    new window with count=1. Later calls inside the window are admitted while
    the count stays within `limit`; rejected calls leave the count alone.
    """
    def __init__(self, limit: int = 10, window_seconds: float = 60, clock: Clock | None = None):
        self.limit = max(1, limit)
        self.window_seconds = window_seconds
        self.clock = clock or SystemClock()
        self._windows: dict[str, RateWindow] = {}
        self._lock = threading.Lock()

    def admit(self, client_key: str) -> bool:
        now = self.clock()
        with self._lock:
            window = self._windows.get(client_key)
            if window is None or now > window.reset_at:
                self._windows[client_key] = RateWindow(count=1, reset_at=now + self.window_seconds)
                return True
            if window.count >= self.limit:
                return False
            window.count += 1
            return True

    def window(self, client_key: str) -> RateWindow | None:
        with self._lock:
            return self._windows.get(client_key)

def client_key(request: Request) -> str:
    """
    Keyed by client IP; requests without a peer address share one bucket.
    """
    return request.client.host if request.client else "unknown"
