import time
from datetime import datetime, timezone
from typing import Protocol

class Clock(Protocol):
    def __call__(self) -> float: ...

class SystemClock:
    """Wall-clock seconds since the epoch."""
    def __call__(self) -> float:
        return time.time()

class ManualClock:
    """
    Clock that only moves when told to. Lets TTL and rate-window behaviour
    be exercised without sleeping.
    """
    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

def isoformat(ts: float) -> str:
    """Epoch seconds → ISO-8601 UTC with millisecond precision and a Z suffix."""
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"
