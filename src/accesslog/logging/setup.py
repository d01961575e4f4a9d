"""Diagnostics logging configuration for the access log package."""

import logging
import sys

PACKAGE_LOGGER = "accesslog"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class _DiagnosticsHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Marker subclass so reconfiguration only replaces handlers installed here."""


def configure_logging(level: str | int = logging.INFO) -> logging.Logger:
    """Set up the ``accesslog`` logger with a single stderr handler.

    Access lines are written by the sinks, not through this logger; it only
    carries rotation notices, unknown-item warnings and emit failures.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level.upper() if isinstance(level, str) else level)
    for handler in package_logger.handlers[:]:
        if isinstance(handler, _DiagnosticsHandler):
            package_logger.removeHandler(handler)
    handler = _DiagnosticsHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    return package_logger
