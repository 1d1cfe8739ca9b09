"""Request normalizer — builds a canonical record from an inbound request."""

import json

from src.clock import RequestIdGenerator, format_rfc3339
from src.models import CanonicalRequestRecord, DecodedBody, InboundRequest


def flatten_pairs(pairs) -> dict:
    """Collapse ``(key, value)`` pairs to a dict, keeping the first value per key."""
    flat = {}
    for key, value in pairs:
        if key not in flat:
            flat[key] = value
    return flat


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def decode_body(raw: bytes) -> DecodedBody:
    """Decode a request body: absent if empty, JSON if parseable, else text."""
    if not raw:
        return DecodedBody.absent()
    try:
        return DecodedBody.json(json.loads(raw, parse_constant=_reject_constant))
    except ValueError:
        return DecodedBody.text(raw.decode("utf-8", errors="replace"))


def normalize_request(inbound: InboundRequest, ids: RequestIdGenerator,
                      include_body: bool = False) -> CanonicalRequestRecord:
    """Build the canonical record for *inbound*; the input is not modified."""
    request_id, moment = ids.next()
    body = decode_body(inbound.body) if include_body else DecodedBody.absent()
    return CanonicalRequestRecord(
        id=request_id,
        timestamp=format_rfc3339(moment),
        method=inbound.method,
        path=inbound.path,
        ip=inbound.remote_addr,
        headers=flatten_pairs(inbound.headers),
        query_params=flatten_pairs(inbound.query),
        body=body,
    )
