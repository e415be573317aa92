"""Error types and logging infrastructure.

Backend and identity failures are raised as ChatError subclasses and
surfaced in the UI; nothing here swallows them. All errors are logged to
file when debugging is enabled.
"""

import logging
import os
import traceback
from pathlib import Path

# Only log to file in development mode (set LIVECHAT_DEBUG=1)
DEBUG_MODE = os.environ.get("LIVECHAT_DEBUG", "").lower() in ("1", "true", "yes")
LOG_FILE = Path.home() / "livechat.log"

# Configure package logger
log = logging.getLogger("livechat")


class ChatError(Exception):
    """Base class for errors raised by the chat backend."""


class AuthError(ChatError):
    """Sign-in, registration or session failure."""


class RecordNotFoundError(ChatError):
    """The referenced message does not exist."""


class PermissionDeniedError(ChatError):
    """The current user may not modify the referenced message."""


def setup_logging(level: int = logging.DEBUG) -> None:
    """Initialize logging to file. Call once at app startup.

    Configures the 'livechat' logger so all child loggers
    (livechat.app, livechat.widgets.*, etc.) inherit the handler.

    Only logs to file if LIVECHAT_DEBUG env var is set.
    """
    if not DEBUG_MODE:
        return

    handler = logging.FileHandler(LOG_FILE, mode="a")
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
    )
    log.addHandler(handler)
    log.setLevel(level)
    log.propagate = False  # Avoid duplicates if root logger is configured
    log.info("Logging initialized")


def log_exception(e: Exception, context: str = "") -> str:
    """Log an exception with context. Returns formatted message for display."""
    tb = "".join(traceback.format_exception(type(e), e, e.__traceback__))
    if context:
        log.error(f"{context}: {e}\n{tb}")
        return f"{context}: {e}"
    else:
        log.error(f"{e}\n{tb}")
        return str(e)
