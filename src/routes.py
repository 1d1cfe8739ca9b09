"""Route table and handlers.

Every handler takes an ``InboundRequest`` plus the shared ``HandlerContext``
and returns a ``HandlerResponse``. The method check and body read live in
``dispatch`` so the 405/400 behaviour is the same for every route.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Optional

from src.clock import RequestIdGenerator, format_rfc3339, utc_now
from src.emitter import RequestLogEmitter
from src.models import InboundRequest
from src.normalizer import normalize_request

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"

WELCOME_MESSAGE = "Welcome to the Go Web Server"
WELCOME_HINT = "Try /get, /post, or /health endpoints"
BODY_READ_ERROR = "Error reading request body"


class BodyReadError(Exception):
    """The request body could not be read from the transport."""


@dataclass
class HandlerContext:
    emitter: RequestLogEmitter
    ids: RequestIdGenerator = field(default_factory=RequestIdGenerator)

    def log_request(self, inbound: InboundRequest, include_body: bool = False):
        self.emitter.emit(normalize_request(inbound, self.ids, include_body))


@dataclass(frozen=True)
class HandlerResponse:
    status: int
    payload: object
    content_type: str = JSON_CONTENT_TYPE

    @property
    def is_json(self) -> bool:
        return self.content_type == JSON_CONTENT_TYPE


@dataclass(frozen=True)
class Route:
    path: str
    handler: Callable[[InboundRequest, HandlerContext], HandlerResponse]
    methods: Optional[frozenset] = None
    reads_body: bool = False

    def allows(self, method: str) -> bool:
        return self.methods is None or method in self.methods


def method_not_allowed() -> HandlerResponse:
    return HandlerResponse(405, {"error": "Method Not Allowed", "status_code": 405})


def bad_request_body() -> HandlerResponse:
    return HandlerResponse(400, BODY_READ_ERROR + "\n", TEXT_CONTENT_TYPE)


def handle_get(inbound: InboundRequest, ctx: HandlerContext) -> HandlerResponse:
    ctx.log_request(inbound)
    query = {}
    for key, value in inbound.query:
        query.setdefault(key, []).append(value)
    return HandlerResponse(200, {
        "message": "GET request received successfully",
        "path": inbound.path,
        "query": query,
        "status_code": 200,
    })


def handle_post(inbound: InboundRequest, ctx: HandlerContext) -> HandlerResponse:
    ctx.log_request(inbound, include_body=True)
    return HandlerResponse(200, {
        "message": "POST request received successfully",
        "path": inbound.path,
        "body_length": len(inbound.body),
        "content_type": inbound.header("Content-Type"),
        "status_code": 200,
    })


def handle_health(inbound: InboundRequest, ctx: HandlerContext) -> HandlerResponse:
    # Health probes are not request-logged.
    return HandlerResponse(200, {"status": "healthy", "time": format_rfc3339(utc_now())})


def handle_default(inbound: InboundRequest, ctx: HandlerContext) -> HandlerResponse:
    ctx.log_request(inbound)
    return HandlerResponse(200, {"message": WELCOME_MESSAGE, "hint": WELCOME_HINT})


ROUTES = (
    Route("/get", handle_get, methods=frozenset({"GET"})),
    Route("/post", handle_post, methods=frozenset({"POST"}), reads_body=True),
    Route("/health", handle_health),
)

DEFAULT_ROUTE = Route("/", handle_default)


def find_route(path: str) -> Route:
    """Exact-path lookup; anything unmatched goes to the default route."""
    for route in ROUTES:
        if route.path == path:
            return route
    return DEFAULT_ROUTE


def dispatch(route: Route, inbound: InboundRequest, ctx: HandlerContext,
             read_body: Optional[Callable[[], bytes]] = None) -> HandlerResponse:
    """Apply the method policy, read the body if needed, then run the handler."""
    if not route.allows(inbound.method):
        return method_not_allowed()

    if route.reads_body and read_body is not None:
        try:
            inbound = replace(inbound, body=read_body())
        except BodyReadError as e:
            logger.warning("Failed to read body for %s %s: %s",
                           inbound.method, inbound.path, e)
            return bad_request_body()

    return route.handler(inbound, ctx)
