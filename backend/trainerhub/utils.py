import threading
import time
from datetime import datetime, timezone

_id_lock = threading.Lock()
_last_id = 0


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def now_ms() -> int:
    """Milliseconds since the epoch, the timestamp format stored in documents."""
    return int(time.time() * 1000)


def time_id() -> str:
    """Return a time-derived document id.

    Ids are millisecond timestamps. Two ids minted in the same millisecond are
    bumped so they stay unique and increasing within the process.
    """
    global _last_id
    with _id_lock:
        candidate = now_ms()
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
    return str(candidate)
