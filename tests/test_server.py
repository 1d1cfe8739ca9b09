"""Integration tests — start a real listener and talk to it over sockets."""

import http.client
import io
import json
import socket
import threading

import pytest

from src.config import Config
from src.emitter import RequestLogEmitter
from src.server import RequestLogServer


def _make_server():
    """Start a server on an OS-assigned port; returns (server, stream)."""
    stream = io.StringIO()
    emitter = RequestLogEmitter(stream)
    server = RequestLogServer(Config(host="127.0.0.1", port=0), emitter, threading.Event())
    server.start()
    return server, stream


def _request(server, method, path, body=None, headers=None):
    host, port = server.server_address
    conn = http.client.HTTPConnection(host, port, timeout=5)
    try:
        conn.request(method, path, body=body, headers=headers or {})
        resp = conn.getresponse()
        return resp.status, resp.getheader("Content-Type"), resp.read()
    finally:
        conn.close()


def _events(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


class TestLiveServer:
    def test_get_and_post_round_trip(self):
        server, stream = _make_server()
        try:
            status, content_type, data = _request(server, "GET", "/get?x=1")
            assert status == 200
            assert content_type == "application/json"
            assert json.loads(data)["query"] == {"x": ["1"]}

            status, _, data = _request(
                server, "POST", "/post", body=b'{"foo":"bar"}',
                headers={"Content-Type": "application/json"},
            )
            assert status == 200
            assert json.loads(data)["body_length"] == 13
        finally:
            server.stop()

        events = [e for e in _events(stream) if e["msg"] == "request received"]
        assert [e["path"] for e in events] == ["/get", "/post"]
        assert events[1]["body"] == {"foo": "bar"}
        ip, _, port = events[0]["ip"].rpartition(":")
        assert ip == "127.0.0.1"
        assert port.isdigit()

    def test_method_not_allowed(self):
        server, stream = _make_server()
        try:
            status, _, data = _request(server, "PUT", "/get")
            assert status == 405
            assert json.loads(data) == {"error": "Method Not Allowed", "status_code": 405}
        finally:
            server.stop()

    def test_lifecycle_events_and_flush_on_stop(self):
        server, stream = _make_server()
        host, port = server.server_address
        _request(server, "GET", "/anything")
        server.stop()

        messages = [e["msg"] for e in _events(stream)]
        assert messages == ["server started", "request received", "server stopped"]
        assert _events(stream)[0]["address"] == f"{host}:{port}"

    def test_stop_closes_listener(self):
        server, _ = _make_server()
        host, port = server.server_address
        server.stop()
        with pytest.raises(OSError):
            socket.create_connection((host, port), timeout=1).close()


class TestStartupFailure:
    def test_port_in_use_is_fatal(self):
        blocker = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        blocker.bind(("127.0.0.1", 0))
        blocker.listen(1)
        port = blocker.getsockname()[1]
        try:
            emitter = RequestLogEmitter(io.StringIO())
            server = RequestLogServer(Config(host="127.0.0.1", port=port), emitter,
                                      threading.Event())
            with pytest.raises((OSError, SystemExit)):
                server.start()
            assert server.server_address is None
        finally:
            blocker.close()
