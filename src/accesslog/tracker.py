"""One-shot completion tracking for a single exchange."""

import asyncio
import enum
import logging
from collections.abc import Callable
from datetime import UTC, datetime

from accesslog.constants import DEFAULT_FORCE_LOG_MS

logger = logging.getLogger(__name__)


class CompletionState(enum.StrEnum):
    ARMED = "armed"
    FINALIZED = "finalized"


class CompletionSignal(enum.StrEnum):
    """Sources that can finalize an exchange."""

    FINISH = "finish"
    CLOSE = "close"
    ERROR = "error"
    TIMEOUT = "timeout"
    MANUAL = "manual"


class CompletionTracker:
    """Fire ``on_finalize(start_time)`` exactly once for an exchange.

    Arming records the start time and schedules a timeout on the running loop.
    The first signal to arrive wins: it cancels the pending timeout (unless it
    is the timeout), releases the callback and finalizes. Every later signal is
    a no-op that returns ``False``.
    """

    def __init__(
        self,
        on_finalize: Callable[[datetime], None],
        timeout_ms: int = DEFAULT_FORCE_LOG_MS,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.start_time = datetime.now(UTC)
        self.state = CompletionState.ARMED
        self.trigger: CompletionSignal | None = None
        self._on_finalize: Callable[[datetime], None] | None = on_finalize
        loop = loop or asyncio.get_running_loop()
        self._timer: asyncio.TimerHandle | None = loop.call_later(
            timeout_ms / 1000, self.signal, CompletionSignal.TIMEOUT
        )

    @property
    def finalized(self) -> bool:
        return self.state is CompletionState.FINALIZED

    def signal(self, source: CompletionSignal) -> bool:
        """Finalize on behalf of *source*; return whether this call did it."""
        if self.state is CompletionState.FINALIZED:
            return False
        self.state = CompletionState.FINALIZED
        self.trigger = source

        if self._timer is not None and source is not CompletionSignal.TIMEOUT:
            self._timer.cancel()
        self._timer = None

        on_finalize, self._on_finalize = self._on_finalize, None
        if source is CompletionSignal.TIMEOUT:
            logger.debug("Exchange started at %s finalized by timeout", self.start_time.isoformat())
        if on_finalize is not None:
            on_finalize(self.start_time)
        return True

    def finish(self) -> bool:
        return self.signal(CompletionSignal.FINISH)

    def close(self) -> bool:
        return self.signal(CompletionSignal.CLOSE)

    def error(self) -> bool:
        return self.signal(CompletionSignal.ERROR)

    def finalize(self) -> bool:
        """Finalize now, ahead of the automatic signals."""
        return self.signal(CompletionSignal.MANUAL)
