"""Runtime settings read from the environment."""

import os
from dataclasses import dataclass

DEFAULT_AUTHORITY = "authority"
DEFAULT_URL = "http://127.0.0.1:5000"

# HTTP header carrying the caller identity
CALLER_HEADER = "X-Caller-Id"


@dataclass(frozen=True)
class Settings:
    authority: str = DEFAULT_AUTHORITY
    base_url: str = DEFAULT_URL
    log_level: str = "INFO"
    log_format: str = "console"
    http_timeout: float = 2.0


def load_settings() -> Settings:
    return Settings(
        authority=os.getenv("BALLOTBOX_AUTHORITY", DEFAULT_AUTHORITY),
        base_url=os.getenv("BALLOTBOX_URL", DEFAULT_URL).rstrip("/"),
        log_level=os.getenv("BALLOTBOX_LOG_LEVEL", "INFO").upper(),
        log_format=os.getenv("BALLOTBOX_LOG_FORMAT", "console").lower(),
        http_timeout=float(os.getenv("BALLOTBOX_HTTP_TIMEOUT", "2")),
    )
