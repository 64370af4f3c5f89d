"""Application settings and logging setup."""

import logging
import os
import sys
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


@dataclass(frozen=True)
class Settings:
    """Runtime configuration read from the environment."""
    store_url: str = ""  # empty means the in-memory demo store
    store_token: str = ""
    timezone: str = "UTC"
    notify_gateway_url: str = ""  # empty means mock delivery
    notify_api_key: str = ""
    notify_from_email: str = "noreply@group-scheduler.app"
    notify_from_phone: str = ""
    log_level: str = "INFO"
    http_timeout: float = 30.0

    @property
    def uses_remote_store(self) -> bool:
        return bool(self.store_url)


def get_settings() -> Settings:
    """Build settings from environment variables."""
    return Settings(
        store_url=os.getenv("SCHEDULER_STORE_URL", ""),
        store_token=os.getenv("SCHEDULER_STORE_TOKEN", ""),
        timezone=os.getenv("SCHEDULER_TIMEZONE", "UTC"),
        notify_gateway_url=os.getenv("NOTIFY_GATEWAY_URL", ""),
        notify_api_key=os.getenv("NOTIFY_API_KEY", ""),
        notify_from_email=os.getenv("NOTIFY_FROM_EMAIL", "noreply@group-scheduler.app"),
        notify_from_phone=os.getenv("NOTIFY_FROM_PHONE", ""),
        log_level=os.getenv("SCHEDULER_LOG_LEVEL", "INFO").upper(),
        http_timeout=float(os.getenv("SCHEDULER_HTTP_TIMEOUT", "30.0")),
    )


def configure_logging(level: str = "INFO") -> None:
    """Send all log records to stderr with timestamps."""
    root = logging.getLogger()
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
