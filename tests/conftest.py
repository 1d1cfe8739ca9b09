import io
import json

import pytest

from src.app import create_app
from src.emitter import RequestLogEmitter


@pytest.fixture
def log_stream():
    return io.StringIO()


@pytest.fixture
def emitter(log_stream):
    request_log = RequestLogEmitter(log_stream)
    yield request_log
    request_log.close()


@pytest.fixture
def read_events(log_stream):
    """Return a callable that parses every JSON line written so far."""
    def _read():
        return [json.loads(line) for line in log_stream.getvalue().splitlines() if line.strip()]
    return _read


@pytest.fixture
def app(emitter):
    """Create a Flask test app."""
    application = create_app(emitter)
    application.config["TESTING"] = True
    return application


@pytest.fixture
def client(app):
    """Create a Flask test client."""
    return app.test_client()
