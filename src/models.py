"""Request data types: inbound request, decoded body, canonical record."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class InboundRequest:
    method: str
    path: str
    remote_addr: str = ""
    headers: tuple = ()
    query: tuple = ()
    body: bytes = b""

    def header(self, name: str) -> str:
        """First value for header *name* (case-insensitive), or ``""``."""
        wanted = name.lower()
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return ""


class BodyKind(Enum):
    ABSENT = "absent"
    JSON = "json"
    TEXT = "text"


@dataclass(frozen=True)
class DecodedBody:
    kind: BodyKind = BodyKind.ABSENT
    value: Any = None

    @classmethod
    def absent(cls) -> "DecodedBody":
        return cls()

    @classmethod
    def json(cls, value: Any) -> "DecodedBody":
        return cls(BodyKind.JSON, value)

    @classmethod
    def text(cls, value: str) -> "DecodedBody":
        return cls(BodyKind.TEXT, value)

    @property
    def is_absent(self) -> bool:
        return self.kind is BodyKind.ABSENT


@dataclass(frozen=True)
class CanonicalRequestRecord:
    id: str
    timestamp: str
    method: str
    path: str
    ip: str
    headers: dict = field(default_factory=dict)
    query_params: dict = field(default_factory=dict)
    body: DecodedBody = field(default_factory=DecodedBody)

    def to_event(self) -> dict:
        """Log-event fields for this record; ``body`` is left out when absent."""
        event = {
            "id": self.id,
            "timestamp": self.timestamp,
            "method": self.method,
            "path": self.path,
            "ip": self.ip,
            "headers": dict(self.headers),
            "query_params": dict(self.query_params),
        }
        if not self.body.is_absent:
            event["body"] = self.body.value
        return event
