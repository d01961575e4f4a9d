"""Access log configuration loaded from keyword arguments or environment variables."""

import functools
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings

from accesslog.constants import DEFAULT_FORCE_LOG_MS, DEFAULT_SEPARATOR


class AccessLogSettings(BaseSettings):
    """Access log configuration.

    Item lists accept formatter names or formatter callables. Anything else is
    kept as-is and renders as a placeholder token.
    """

    # Formatters
    ITEM_REGISTRY: dict[str, Any] = Field(default_factory=dict)
    CONSOLE_ITEMS: list[Any] | None = None  # Falls back to FILE_ITEMS
    FILE_ITEMS: list[Any] | None = None  # Falls back to CONSOLE_ITEMS

    # Console sink
    DISABLE_CONSOLE_LOG: bool = False
    PLAIN_CONSOLE_LOG: bool = False

    # Plain line separator (styled lines always use a single space)
    SEP: str = DEFAULT_SEPARATOR

    # File sink; unset disables it
    FOLDER: str | None = None

    # Completion
    FORCE_LOG_MS: int = Field(default=DEFAULT_FORCE_LOG_MS, gt=0)

    # Diagnostics for the package's own logger
    LOG_LEVEL: str = "INFO"

    model_config = {"env_prefix": "ACCESS_LOG_", "arbitrary_types_allowed": True}


@functools.lru_cache(maxsize=1)
def get_settings() -> AccessLogSettings:
    """Return cached access log settings singleton."""
    return AccessLogSettings()
