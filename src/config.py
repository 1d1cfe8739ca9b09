"""Configuration module — frozen dataclass loaded from environment variables."""

import os
from dataclasses import dataclass

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_STREAMS = ("stdout", "stderr")


@dataclass(frozen=True)
class Config:
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    log_stream: str = "stderr"


def load_config() -> Config:
    """Build Config from environment variables with sensible defaults."""
    log_level = os.environ.get("LOG_LEVEL", Config.log_level).upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"Invalid LOG_LEVEL: {log_level}")

    log_stream = os.environ.get("REQUEST_LOG_STREAM", Config.log_stream).lower()
    if log_stream not in LOG_STREAMS:
        raise ValueError(f"Invalid REQUEST_LOG_STREAM: {log_stream}")

    return Config(
        host=os.environ.get("SERVER_HOST", Config.host),
        port=int(os.environ.get("SERVER_PORT", Config.port)),
        log_level=log_level,
        log_stream=log_stream,
    )
