"""Console and daily rotating file sinks for rendered access lines."""

import logging
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import TextIO

from accesslog.constants import LOG_FILE_SUFFIX
from accesslog.renderer import RenderedLine

logger = logging.getLogger(__name__)


class ConsoleSink:
    """Print access lines to a text stream (``sys.stdout`` by default)."""

    def __init__(self, stream: TextIO | None = None, plain: bool = False) -> None:
        self._stream = stream
        self.plain = plain

    def write(self, line: RenderedLine) -> None:
        # Resolve stdout at write time so redirected streams are honored
        print(line.plain if self.plain else line.styled, file=self._stream or sys.stdout, flush=True)


class DailyFileSink:
    """Append plain lines to ``<folder>/<YYYY-MM-DD>.log`` keyed by UTC date.

    The stream is opened lazily on the first write of a day and the previous
    day's stream is closed before the next one opens.
    """

    def __init__(self, folder: str | Path) -> None:
        self.folder = Path(folder)
        self.current_date: str | None = None
        self._stream: TextIO | None = None

    @property
    def stream(self) -> TextIO | None:
        return self._stream

    @property
    def is_open(self) -> bool:
        return self._stream is not None

    @property
    def path(self) -> Path | None:
        if self.current_date is None:
            return None
        return self.folder / f"{self.current_date}{LOG_FILE_SUFFIX}"

    def write(self, time: datetime, line: str) -> None:
        date = time.astimezone(UTC).strftime("%Y-%m-%d")
        stream = self._stream
        if stream is None or date != self.current_date:
            stream = self._rotate(date)
        stream.write(line + "\n")

    def _rotate(self, date: str) -> TextIO:
        if self._stream is not None:
            logger.info("Rotating access log %s -> %s", self.current_date, date)
        self.close()

        self.folder.mkdir(parents=True, exist_ok=True)
        path = self.folder / f"{date}{LOG_FILE_SUFFIX}"
        stream = open(path, "a", encoding="utf-8", buffering=1)  # noqa: SIM115
        self._stream = stream
        self.current_date = date
        logger.debug("Opened access log file %s", path)
        return stream

    def close(self) -> None:
        if self._stream is None:
            return
        stream, self._stream = self._stream, None
        stream.close()
        logger.debug("Closed access log file for %s", self.current_date)


class SinkManager:
    """Dispatch rendered lines to the configured console and file sinks."""

    def __init__(self, console: ConsoleSink | None = None, file: DailyFileSink | None = None) -> None:
        self.console = console
        self.file = file

    @property
    def console_enabled(self) -> bool:
        return self.console is not None

    @property
    def file_enabled(self) -> bool:
        return self.file is not None

    def emit(self, time: datetime, console_line: RenderedLine | None, file_line: RenderedLine | None) -> None:
        """Write each line to its sink; lines for disabled sinks are ignored.

        A failing sink is reported and skipped so the other still gets its line.
        """
        if self.console is not None and console_line is not None:
            try:
                self.console.write(console_line)
            except Exception:
                logger.exception("Failed to write access log line to console")
        if self.file is not None and file_line is not None:
            try:
                self.file.write(time, file_line.plain)
            except Exception:
                logger.exception("Failed to write access log line to %s", self.file.folder)

    def close(self) -> None:
        if self.file is not None:
            self.file.close()
