"""Centralized constants for the access log middleware."""

import enum

# --- Defaults ---

DEFAULT_CONSOLE_ITEMS: tuple[str, ...] = (
    "localTime",
    "statusCode",
    "method",
    "url",
    "ip",
    "responseTime",
)
DEFAULT_FILE_ITEMS: tuple[str, ...] = (
    "iso",
    "statusCode",
    "method",
    "url",
    "ip",
    "ua",
    "responseTime",
)
DEFAULT_SEPARATOR = " "
DEFAULT_FORCE_LOG_MS = 10_000  # Finalize hung exchanges after 10 seconds

LOG_FILE_SUFFIX = ".log"

# --- Placeholder literals ---

MISSING_STATUS = "---"
MISSING_VALUE = "-"
UNKNOWN_ITEM = "?"
DEFAULT_METHOD = "GET"

# --- Response time bands (milliseconds) ---

RESPONSE_TIME_WARN_MS = 100
RESPONSE_TIME_SLOW_MS = 500

# --- ASGI scope state ---

FINALIZER_STATE_KEY = "finalize_access_log"


class Color(enum.StrEnum):
    """ANSI SGR color codes used for styled tokens."""

    RED = "31"
    GREEN = "32"
    YELLOW = "33"
    CYAN = "36"
    WHITE = "37"
    GRAY = "90"
    PURPLE = "94"


ANSI_RESET = "\x1b[0m"
