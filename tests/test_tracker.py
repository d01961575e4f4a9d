"""Tests for CompletionTracker."""

import asyncio
from datetime import UTC, datetime

import pytest

from accesslog.tracker import CompletionSignal, CompletionState, CompletionTracker


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[datetime] = []

    def __call__(self, start_time: datetime) -> None:
        self.calls.append(start_time)


@pytest.fixture
def recorder() -> _Recorder:
    return _Recorder()


async def test_starts_armed(recorder: _Recorder) -> None:
    before = datetime.now(UTC)
    tracker = CompletionTracker(recorder, timeout_ms=1000)
    assert tracker.state is CompletionState.ARMED
    assert not tracker.finalized
    assert tracker.start_time >= before
    assert recorder.calls == []
    tracker.close()


async def test_first_signal_wins(recorder: _Recorder) -> None:
    """finish followed by close finalizes once, on behalf of finish."""
    tracker = CompletionTracker(recorder, timeout_ms=1000)
    assert tracker.finish() is True
    assert tracker.close() is False
    assert tracker.error() is False
    assert tracker.finalize() is False
    assert recorder.calls == [tracker.start_time]
    assert tracker.trigger is CompletionSignal.FINISH
    assert tracker.state is CompletionState.FINALIZED


async def test_timeout_finalizes_hung_exchange(recorder: _Recorder) -> None:
    """Without any signal the timeout still produces exactly one call."""
    tracker = CompletionTracker(recorder, timeout_ms=10)
    await asyncio.sleep(0.1)
    assert len(recorder.calls) == 1
    assert tracker.trigger is CompletionSignal.TIMEOUT
    assert tracker.close() is False
    assert len(recorder.calls) == 1


async def test_signal_cancels_timeout(recorder: _Recorder) -> None:
    """Finishing before the timeout leaves no pending timer behind."""
    tracker = CompletionTracker(recorder, timeout_ms=20)
    tracker.close()
    await asyncio.sleep(0.1)
    assert len(recorder.calls) == 1
    assert tracker.trigger is CompletionSignal.CLOSE


async def test_close_then_timeout(recorder: _Recorder) -> None:
    tracker = CompletionTracker(recorder, timeout_ms=10)
    tracker.signal(CompletionSignal.CLOSE)
    tracker.signal(CompletionSignal.TIMEOUT)
    await asyncio.sleep(0.05)
    assert len(recorder.calls) == 1


async def test_manual_finalize(recorder: _Recorder) -> None:
    """The explicit finalize hook finalizes ahead of the automatic signals."""
    tracker = CompletionTracker(recorder, timeout_ms=1000)
    assert tracker.finalize() is True
    assert tracker.trigger is CompletionSignal.MANUAL
    assert tracker.finish() is False
    assert len(recorder.calls) == 1


async def test_error_signal(recorder: _Recorder) -> None:
    tracker = CompletionTracker(recorder, timeout_ms=1000)
    tracker.error()
    assert tracker.trigger is CompletionSignal.ERROR
    assert len(recorder.calls) == 1


def test_explicit_loop() -> None:
    """A loop can be passed in when the tracker is armed outside a coroutine."""
    loop = asyncio.new_event_loop()
    try:
        calls: list[datetime] = []
        CompletionTracker(calls.append, timeout_ms=5, loop=loop)
        loop.run_until_complete(asyncio.sleep(0.05))
        assert len(calls) == 1
    finally:
        loop.close()
