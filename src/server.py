"""HTTP listener bootstrap — serves the Flask app on a background thread."""

import logging
import threading

from werkzeug.serving import make_server

from src.app import create_app
from src.config import Config
from src.emitter import RequestLogEmitter

logger = logging.getLogger(__name__)


class RequestLogServer:
    """Threaded WSGI server that owns the request log emitter's lifetime."""

    def __init__(self, config: Config, emitter: RequestLogEmitter,
                 shutdown_event: threading.Event):
        self._config = config
        self._emitter = emitter
        self._shutdown_event = shutdown_event
        self._app = create_app(emitter)
        self._httpd = None
        self._thread: threading.Thread | None = None

    @property
    def server_address(self) -> tuple | None:
        """Return (host, port) the server is bound to. Useful when port=0."""
        if self._httpd is None:
            return None
        return self._httpd.server_address[:2]

    def start(self):
        """Bind the listener and start serving on a daemon thread.

        A bind failure is fatal: werkzeug reports it and raises SystemExit.
        """
        try:
            self._httpd = make_server(
                self._config.host, self._config.port, self._app, threaded=True
            )
        except (OSError, SystemExit):
            logger.critical("Could not listen on %s:%d", self._config.host, self._config.port)
            raise

        host, port = self.server_address
        logger.info("Server listening on %s:%d", host, port)
        self._emitter.info("server started", address=f"{host}:{port}")

        self._thread = threading.Thread(target=self._httpd.serve_forever, daemon=True)
        self._thread.start()

    def wait(self, poll_interval: float = 1.0):
        """Block until the shutdown event is set."""
        while not self._shutdown_event.wait(timeout=poll_interval):
            pass

    def stop(self):
        """Stop accepting requests, then flush and close the emitter."""
        logger.info("Server shutting down...")
        self._shutdown_event.set()
        if self._httpd is not None:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._httpd = None
        if self._thread is not None:
            self._thread.join(timeout=5)
            self._thread = None
        self._emitter.info("server stopped")
        self._emitter.close()
