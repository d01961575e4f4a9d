"""Tests for the built-in formatters and the default registry."""

from datetime import UTC, datetime, timedelta, timezone
from typing import Any

import pytest

from accesslog.constants import Color
from accesslog.exchange import Environment, Exchange
from accesslog.formatters import (
    DEFAULT_REGISTRY,
    Formatter,
    format_unknown,
    iso_string,
    paint,
)

from tests.conftest import FIXED_TIME, make_exchange


def _run(name: str, time: datetime = FIXED_TIME, env: Any = None, ctx: Any = None) -> tuple[str, str]:
    plain: list[str] = []
    styled: list[str] = []
    DEFAULT_REGISTRY[name](time, env or Environment(), ctx or make_exchange(), plain, styled)
    assert len(plain) == len(styled) == 1
    return plain[0], styled[0]


@pytest.mark.parametrize("name", sorted(DEFAULT_REGISTRY))
def test_every_formatter_appends_one_token_each(name: str, env: Environment, exchange: Exchange) -> None:
    """Each built-in appends exactly one plain and one styled token."""
    plain: list[str] = ["existing"]
    styled: list[str] = ["existing"]
    DEFAULT_REGISTRY[name](FIXED_TIME, env, exchange, plain, styled)
    assert len(plain) == 2
    assert len(styled) == 2
    assert all(isinstance(token, str) for token in plain + styled)


def test_default_registry_is_read_only() -> None:
    """The default registry cannot be mutated."""
    with pytest.raises(TypeError):
        DEFAULT_REGISTRY["method"] = format_unknown  # type: ignore[index]


def test_iso_formats() -> None:
    """ISO items render UTC with millisecond precision in brackets."""
    assert _run("iso") == ("[2024-06-01T12:00:00.000Z]", "\x1b[90m[2024-06-01T12:00:00.000Z]\x1b[0m")
    assert _run("isoTime")[0] == "[12:00:00.000Z]"
    assert _run("isoDate")[0] == "[2024-06-01]"


def test_iso_converts_other_timezones_to_utc() -> None:
    """Aware times in other zones are rendered in UTC."""
    tokyo = datetime(2024, 6, 2, 6, 0, 0, 123000, tzinfo=timezone(timedelta(hours=9)))
    assert iso_string(tokyo) == "2024-06-01T21:00:00.123Z"


def test_timestamp_is_epoch_millis() -> None:
    assert _run("timestamp")[0] == "[1717243200000]"


def test_local_formats_use_local_clock() -> None:
    """Local items render the wall clock in the local zone."""
    local = FIXED_TIME.astimezone()
    date = f"{local.month}/{local.day}/{local.year}"
    assert _run("local")[0] == f"[{date}, {local.strftime('%X')}]"
    assert _run("localTime")[0] == f"[{local.strftime('%X')}]"
    assert _run("localDate")[0] == f"[{date}]"
    assert _run("localTime")[1].startswith("\x1b[90m[")


@pytest.mark.parametrize(
    ("elapsed", "color"),
    [
        (timedelta(0), Color.GREEN),
        (timedelta(milliseconds=250), Color.YELLOW),
        (timedelta(seconds=2), Color.RED),
    ],
)
def test_response_time_bands(elapsed: timedelta, color: Color) -> None:
    """Response time is colored green below 100ms, yellow below 500ms, red above."""
    plain, styled = _run("responseTime", time=datetime.now(UTC) - elapsed)
    assert plain.endswith("ms")
    assert int(plain[:-2]) >= elapsed // timedelta(milliseconds=1)
    assert styled == paint(plain, color)


@pytest.mark.parametrize(
    ("ms", "color"),
    [
        (99, Color.GREEN),
        (100, Color.YELLOW),
        (499, Color.YELLOW),
        (500, Color.RED),
    ],
)
def test_response_time_band_boundaries(ms: int, color: Color, monkeypatch: pytest.MonkeyPatch) -> None:
    """Bands switch exactly at 100ms and 500ms."""
    monkeypatch.setattr("accesslog.formatters.elapsed_millis", lambda time: ms)
    assert _run("responseTime") == (f"{ms}ms", paint(f"{ms}ms", color))


def test_local_date_has_four_digit_year() -> None:
    local = FIXED_TIME.astimezone()
    assert _run("localDate")[0].endswith(f"/{local.year}]")


def test_response_time_is_measured_at_render_time() -> None:
    """Elapsed time is computed from the start time when the formatter runs."""
    plain, _ = _run("responseTime", time=datetime.now(UTC) - timedelta(seconds=3))
    assert 3000 <= int(plain[:-2]) < 4000


def test_method_defaults_to_get() -> None:
    """WebSocket exchanges carry no method and render as GET."""
    assert _run("method", ctx=make_exchange(method=None)) == ("GET", "\x1b[94mGET\x1b[0m")
    assert _run("method", ctx=make_exchange(method="POST"))[0] == "POST"


@pytest.mark.parametrize(
    ("status", "color"),
    [
        (199, Color.GREEN),
        (200, Color.GREEN),
        (299, Color.GREEN),
        (300, Color.CYAN),
        (301, Color.CYAN),
        (399, Color.CYAN),
        (400, Color.YELLOW),
        (404, Color.YELLOW),
        (499, Color.YELLOW),
        (500, Color.RED),
        (503, Color.RED),
    ],
)
def test_status_code_bands(status: int, color: Color) -> None:
    """Status codes are colored by class with boundaries at 300, 400 and 500."""
    assert _run("statusCode", ctx=make_exchange(status_code=status)) == (str(status), paint(str(status), color))


def test_status_code_absent() -> None:
    """A response that never started renders as white dashes."""
    assert _run("statusCode", ctx=make_exchange(status_code=0)) == ("---", "\x1b[37m---\x1b[0m")


def test_request_fields() -> None:
    assert _run("path") == ("/items/42", "\x1b[37m/items/42\x1b[0m")
    assert _run("url")[0] == "example.com/items/42?expand=1"
    assert _run("host")[0] == "example.com"
    assert _run("ip") == ("127.0.0.1", "\x1b[90m127.0.0.1\x1b[0m")
    assert _run("ua") == ('"curl/8.5.0"', '\x1b[90m"curl/8.5.0"\x1b[0m')
    assert _run("referer")[0] == "https://example.com/"


def test_missing_request_fields_use_dashes() -> None:
    """Absent client and headers render as ``-`` (quoted for the user agent)."""
    ctx = make_exchange(client=None, headers={})
    assert _run("ip", ctx=ctx)[0] == "-"
    assert _run("ua", ctx=ctx)[0] == '"-"'
    assert _run("referer", ctx=ctx)[0] == "-"


def test_formatters_tolerate_foreign_context() -> None:
    """A context without the expected attributes still renders defaults."""
    ctx = object()
    assert _run("statusCode", ctx=ctx)[0] == "---"
    assert _run("method", ctx=ctx)[0] == "GET"
    assert _run("ip", ctx=ctx)[0] == "-"
    assert _run("url", ctx=ctx)[0] == ""


def test_depth_prefixes_styled_token() -> None:
    assert _run("depth", env=Environment(depth=2)) == ("2", "\x1b[36m@2\x1b[0m")


def test_unknown_placeholder() -> None:
    formatter: Formatter = format_unknown
    plain: list[str] = []
    styled: list[str] = []
    formatter(FIXED_TIME, None, None, plain, styled)
    assert plain == ["?"]
    assert styled == ["\x1b[90m?\x1b[0m"]
