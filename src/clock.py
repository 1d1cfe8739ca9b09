"""Request identifiers and RFC3339 timestamps."""

import threading
import time
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_rfc3339(dt: datetime) -> str:
    """Format *dt* as second-precision RFC3339, using ``Z`` for UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    text = dt.isoformat(timespec="seconds")
    if text.endswith("+00:00"):
        text = text[:-6] + "Z"
    return text


class RequestIdGenerator:
    """Issues per-request identifiers from a nanosecond clock reading.

    The identifier is the decimal nanosecond count since the epoch. Readings
    are kept strictly increasing so two requests in the same clock tick still
    get distinct identifiers.
    """

    def __init__(self, time_ns_func=None):
        self._time_ns = time_ns_func or time.time_ns
        self._lock = threading.Lock()
        self._last = 0

    def next(self) -> tuple[str, datetime]:
        """Return ``(identifier, moment)`` taken from one clock reading."""
        with self._lock:
            reading = self._time_ns()
            if reading <= self._last:
                reading = self._last + 1
            self._last = reading

        seconds, nanos = divmod(reading, 1_000_000_000)
        moment = datetime.fromtimestamp(seconds, tz=timezone.utc).replace(
            microsecond=nanos // 1000
        )
        return str(reading), moment
