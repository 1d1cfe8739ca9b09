"""Flask transport — adapts Flask requests to the route table."""

from flask import Flask, Response, jsonify, request
from werkzeug.exceptions import BadRequest, MethodNotAllowed

from src.clock import RequestIdGenerator
from src.emitter import RequestLogEmitter
from src.models import InboundRequest
from src.routes import (
    BodyReadError,
    HandlerContext,
    HandlerResponse,
    dispatch,
    find_route,
)

HTTP_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "TRACE"]


def create_app(emitter: RequestLogEmitter, ids: RequestIdGenerator | None = None) -> Flask:
    """Flask application factory."""
    app = Flask(__name__)

    context = HandlerContext(emitter, ids or RequestIdGenerator())
    app.config["HANDLER_CONTEXT"] = context

    @app.route("/", defaults={"subpath": ""}, methods=HTTP_METHODS)
    @app.route("/<path:subpath>", methods=HTTP_METHODS)
    def handle(subpath):
        return _dispatch_current_request(context)

    @app.errorhandler(MethodNotAllowed)
    def unrouted_method(e):
        # Verbs outside HTTP_METHODS still go through the route table policy.
        return _dispatch_current_request(context)

    return app


def _dispatch_current_request(context: HandlerContext) -> Response:
    inbound = _inbound_from_request()
    result = dispatch(find_route(inbound.path), inbound, context, _read_body)
    return _to_flask_response(result)


def _remote_addr(environ: dict) -> str:
    addr = environ.get("REMOTE_ADDR", "")
    port = environ.get("REMOTE_PORT")
    if not addr or not port:
        return addr
    if ":" in addr:
        return f"[{addr}]:{port}"
    return f"{addr}:{port}"


def _inbound_from_request() -> InboundRequest:
    environ = request.environ
    return InboundRequest(
        # Raw verb, so the method check stays case-sensitive.
        method=environ.get("REQUEST_METHOD", request.method),
        path=request.path,
        remote_addr=_remote_addr(environ),
        headers=tuple(request.headers.items()),
        query=tuple(request.args.items(multi=True)),
    )


def _read_body() -> bytes:
    try:
        return request.get_data(cache=True)
    except (BadRequest, OSError) as e:
        raise BodyReadError(str(e)) from e


def _to_flask_response(result: HandlerResponse) -> Response:
    if result.is_json:
        resp = jsonify(result.payload)
    else:
        resp = Response(result.payload, content_type=result.content_type)
        resp.headers["X-Content-Type-Options"] = "nosniff"
    resp.status_code = result.status
    return resp
