"""
POSTURECOACH Shared Utilities

Logging setup and response helpers.
"""

import logging
import sys
from datetime import datetime, timezone


# ============================================
# Logging Configuration
# ============================================

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def level_from_name(name: str, default: int = logging.INFO) -> int:
    """Map a level name such as "debug" to its logging constant."""
    value = logging.getLevelName(str(name).upper())
    return value if isinstance(value, int) else default


def setup_logger(name: str = "posturecoach", level: int = logging.INFO) -> logging.Logger:
    """
    Logger with its own stdout handler.

    Records do not propagate to the root logger, so a message is printed
    once even after logging.basicConfig() has run.

    Usage:
        logger = setup_logger("posturecoach.main", level_from_name(settings.LOG_LEVEL))
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(level)
    return logger


# ============================================
# Response Helpers
# ============================================

def error_response(error: str, message: str = None) -> dict:
    """Body for HTTPException(detail=...): {"success": False, "error", ["message"]}."""
    body = {"success": False, "error": error}
    if message is not None:
        body["message"] = message
    return body


def get_now_iso() -> str:
    """Current UTC time as an ISO 8601 string."""
    return datetime.now(timezone.utc).isoformat()
