"""Structured log emitter — one JSON line per logged request."""

import itertools
import json
import logging
import sys
import threading

from src.models import CanonicalRequestRecord

_instance_ids = itertools.count(1)


class JsonLineFormatter(logging.Formatter):
    """Render a record as compact JSON: level, ts, msg, then its fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "level": record.levelname.lower(),
            "ts": record.created,
            "msg": record.getMessage(),
        }
        entry.update(getattr(record, "fields", {}))
        return json.dumps(entry, separators=(",", ":"), ensure_ascii=False, default=str)


class _BestEffortStreamHandler(logging.StreamHandler):
    """Stream handler that counts write failures instead of reporting them."""

    def __init__(self, stream):
        super().__init__(stream)
        self.dropped = 0

    def handleError(self, record):
        self.dropped += 1


class RequestLogEmitter:
    """Writes canonical request records to a stream as structured events.

    Each emitter owns its own non-propagating logger, so several instances
    (e.g. one per test) never share handlers. The handler's lock serializes
    concurrent writes.
    """

    def __init__(self, stream=None, name: str = "request_log"):
        self._handler = _BestEffortStreamHandler(stream if stream is not None else sys.stderr)
        self._handler.setFormatter(JsonLineFormatter())
        self._logger = logging.getLogger(f"{name}.{next(_instance_ids)}")
        self._logger.setLevel(logging.INFO)
        self._logger.propagate = False
        self._logger.addHandler(self._handler)
        self._closed = False
        self._lock = threading.Lock()
        self._errors = 0

    @property
    def dropped(self) -> int:
        """Number of events that never reached the sink."""
        return self._handler.dropped + self._errors

    @property
    def closed(self) -> bool:
        return self._closed

    def emit(self, record: CanonicalRequestRecord):
        """Log *record* as a single ``request received`` event."""
        self.info("request received", **record.to_event())

    def info(self, msg: str, **fields):
        if self._closed:
            return
        try:
            self._logger.info(msg, extra={"fields": fields})
        except Exception:
            # Sink errors never reach request handling.
            self._count_error()

    def flush(self):
        try:
            self._handler.flush()
        except (OSError, ValueError):
            self._count_error()

    def _count_error(self):
        with self._lock:
            self._errors += 1

    def close(self):
        """Flush buffered events and detach the sink. Safe to call twice."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self.flush()
        self._logger.removeHandler(self._handler)
        self._handler.close()
