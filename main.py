"""Entry point for the request logging HTTP server."""

import logging
import signal
import sys
import threading

from src.config import load_config
from src.emitter import RequestLogEmitter
from src.server import RequestLogServer

BANNER_ENDPOINTS = (
    "  GET  /get",
    "  POST /post",
    "  GET  /health",
    "  GET  / (default)",
)


def main():
    config = load_config()
    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    logger = logging.getLogger(__name__)

    stream = sys.stdout if config.log_stream == "stdout" else sys.stderr
    emitter = RequestLogEmitter(stream)
    shutdown_event = threading.Event()

    def handle_signal(signum, frame):
        logger.info("Received signal %d, shutting down...", signum)
        shutdown_event.set()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    server = RequestLogServer(config, emitter, shutdown_event)
    try:
        server.start()
    except (OSError, SystemExit):
        emitter.close()
        sys.exit(1)

    print(f"Starting server on http://localhost:{server.server_address[1]}")
    print("Available endpoints:")
    for line in BANNER_ENDPOINTS:
        print(line)
    print("\nServer logs will appear below\n", flush=True)

    try:
        server.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        server.stop()


if __name__ == "__main__":
    main()
