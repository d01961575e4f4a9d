"""Transport-independent access logger: item resolution, completion, sinks."""

import asyncio
import logging
from datetime import datetime
from typing import Any, TextIO

from accesslog.constants import DEFAULT_CONSOLE_ITEMS, DEFAULT_FILE_ITEMS
from accesslog.items import ItemRegistry
from accesslog.renderer import LineRenderer
from accesslog.settings import AccessLogSettings
from accesslog.sinks import ConsoleSink, DailyFileSink, SinkManager
from accesslog.tracker import CompletionTracker

logger = logging.getLogger(__name__)


class AccessLogger:
    """Emit one access line per exchange.

    Item lists are resolved once here. :meth:`arm` starts tracking an exchange
    and :meth:`log` renders and writes its line when the tracker fires.
    """

    def __init__(self, settings: AccessLogSettings | None = None, console_stream: TextIO | None = None) -> None:
        self.settings = settings or AccessLogSettings()

        registry = ItemRegistry(self.settings.ITEM_REGISTRY)
        self.console_items = registry.resolve_all(
            self.settings.CONSOLE_ITEMS, self.settings.FILE_ITEMS, DEFAULT_CONSOLE_ITEMS
        )
        self.file_items = registry.resolve_all(
            self.settings.FILE_ITEMS, self.settings.CONSOLE_ITEMS, DEFAULT_FILE_ITEMS
        )

        self._renderer = LineRenderer(self.settings.SEP)
        self.sinks = SinkManager(
            console=(
                None
                if self.settings.DISABLE_CONSOLE_LOG
                else ConsoleSink(console_stream, plain=self.settings.PLAIN_CONSOLE_LOG)
            ),
            file=DailyFileSink(self.settings.FOLDER) if self.settings.FOLDER else None,
        )

    def arm(self, env: Any, ctx: Any, loop: asyncio.AbstractEventLoop | None = None) -> CompletionTracker:
        """Start tracking an exchange; its line is logged when the tracker finalizes."""
        return CompletionTracker(
            lambda start_time: self.log(start_time, env, ctx),
            timeout_ms=self.settings.FORCE_LOG_MS,
            loop=loop,
        )

    def log(self, time: datetime, env: Any, ctx: Any) -> None:
        """Render the console and file lines for an exchange and write them.

        Failures are reported on this module's logger and never raised, so a
        broken formatter or a full disk cannot fail the request itself.
        """
        try:
            console_line = (
                self._renderer.render_line(time, env, ctx, self.console_items) if self.sinks.console_enabled else None
            )
            file_line = self._renderer.render_line(time, env, ctx, self.file_items) if self.sinks.file_enabled else None
            self.sinks.emit(time, console_line, file_line)
        except Exception:
            logger.exception("Failed to emit access log line for %s", getattr(ctx, "path", "?"))

    def close(self) -> None:
        """Close the file stream, if one is open."""
        self.sinks.close()
