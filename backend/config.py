"""Application-wide configuration constants."""

import logging
import os
import platform

logger = logging.getLogger(__name__)


def _env_number(name: str, default, cast):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


# --- Identity ---
APP_NAME = "XShare"
DEVICE_NAME = platform.node() or "unknown-device"
SENDER_INFO = f"{APP_NAME} on {DEVICE_NAME}"

# --- Networking ---
RECEIVER_PORT = _env_number("XSHARE_PORT", 8080, int)
RECEIVE_PATH = "/receive"
SEND_TIMEOUT = _env_number("XSHARE_SEND_TIMEOUT", 10.0, float)  # seconds

# --- Logging ---
LOG_LEVEL = os.environ.get("XSHARE_LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
