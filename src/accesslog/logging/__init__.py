"""Diagnostics logging for the access log package."""

from accesslog.logging.setup import configure_logging

__all__ = ["configure_logging"]
