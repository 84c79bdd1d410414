"""Logging setup for the TradeHub backend.

All loggers live under the ``tradehub`` namespace so a single handler on the
root ``tradehub`` logger covers routes, rules and database helpers.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """Attach one stream handler to the ``tradehub`` logger (idempotent)."""
    global _configured
    root = logging.getLogger("tradehub")
    root.setLevel(level.upper())
    if _configured:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    root.propagate = False
    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger, prefixing bare names with ``tradehub.``."""
    if name != "tradehub" and not name.startswith("tradehub."):
        name = f"tradehub.{name}"
    return logging.getLogger(name)
