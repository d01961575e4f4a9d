"""Built-in log item formatters and the default formatter registry.

A formatter renders one field of the access line. It appends exactly one token
to ``plain`` and one to ``styled`` and has no other side effects::

    def formatter(time, env, ctx, plain, styled) -> None: ...

``time`` is the aware start time of the exchange, ``env`` the
:class:`~accesslog.exchange.Environment` and ``ctx`` the
:class:`~accesslog.exchange.Exchange`. Fields are read with ``getattr`` so a
formatter never fails on a context that lacks them.
"""

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from types import MappingProxyType
from typing import Any, Protocol

from accesslog.constants import (
    ANSI_RESET,
    DEFAULT_METHOD,
    MISSING_STATUS,
    MISSING_VALUE,
    RESPONSE_TIME_SLOW_MS,
    RESPONSE_TIME_WARN_MS,
    UNKNOWN_ITEM,
    Color,
)

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)


class Formatter(Protocol):
    def __call__(self, time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None: ...


def paint(text: str, color: Color) -> str:
    """Wrap *text* in an ANSI color sequence."""
    return f"\x1b[{color}m{text}{ANSI_RESET}"


def _append(plain: list[str], styled: list[str], token: str, color: Color) -> None:
    plain.append(token)
    styled.append(paint(token, color))


def iso_string(time: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    return time.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis(time: datetime) -> int:
    return (time.astimezone(UTC) - _EPOCH) // _ONE_MS


def elapsed_millis(time: datetime) -> int:
    return (datetime.now(UTC) - time) // _ONE_MS


# --- Time ---


def local_date(time: datetime) -> str:
    """Local calendar date as ``M/D/YYYY``, e.g. ``6/1/2024``."""
    local = time.astimezone()
    return f"{local.month}/{local.day}/{local.year}"


def format_local(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    _append(plain, styled, f"[{local_date(time)}, {time.astimezone().strftime('%X')}]", Color.GRAY)


def format_local_time(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    _append(plain, styled, f"[{time.astimezone().strftime('%X')}]", Color.GRAY)


def format_local_date(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    _append(plain, styled, f"[{local_date(time)}]", Color.GRAY)


def format_iso(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    _append(plain, styled, f"[{iso_string(time)}]", Color.GRAY)


def format_iso_time(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    _append(plain, styled, f"[{iso_string(time).split('T')[1]}]", Color.GRAY)


def format_iso_date(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    _append(plain, styled, f"[{iso_string(time).split('T')[0]}]", Color.GRAY)


def format_timestamp(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    _append(plain, styled, f"[{epoch_millis(time)}]", Color.GRAY)


def format_response_time(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    """Milliseconds between the start of the exchange and now."""
    ms = elapsed_millis(time)
    if ms >= RESPONSE_TIME_SLOW_MS:
        color = Color.RED
    elif ms >= RESPONSE_TIME_WARN_MS:
        color = Color.YELLOW
    else:
        color = Color.GREEN
    _append(plain, styled, f"{ms}ms", color)


# --- Request ---


def format_method(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    _append(plain, styled, getattr(ctx, "method", None) or DEFAULT_METHOD, Color.PURPLE)


def status_color(status: int) -> Color:
    if status >= 500:
        return Color.RED
    if status >= 400:
        return Color.YELLOW
    if status >= 300:
        return Color.CYAN
    return Color.GREEN


def format_status_code(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    status = getattr(ctx, "status_code", 0) or 0
    if not status:
        _append(plain, styled, MISSING_STATUS, Color.WHITE)
        return
    _append(plain, styled, str(status), status_color(status))


def format_path(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    _append(plain, styled, getattr(ctx, "path", None) or "", Color.WHITE)


def format_url(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    """Host followed by the raw request target, e.g. ``example.com/a?b=1``."""
    url = (getattr(ctx, "host", None) or "") + (getattr(ctx, "raw_url", None) or "")
    _append(plain, styled, url, Color.WHITE)


def format_host(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    _append(plain, styled, getattr(ctx, "host", None) or "", Color.WHITE)


def format_ip(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    client = getattr(ctx, "client", None)
    address = getattr(client, "host", None) if client is not None else None
    _append(plain, styled, address or MISSING_VALUE, Color.GRAY)


def _header(ctx: Any, name: str) -> str | None:
    headers: Mapping[str, str] | None = getattr(ctx, "headers", None)
    if headers is None:
        return None
    return headers.get(name)


def format_user_agent(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    user_agent = _header(ctx, "user-agent") or MISSING_VALUE
    _append(plain, styled, f'"{user_agent}"', Color.GRAY)


def format_referer(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    _append(plain, styled, _header(ctx, "referer") or MISSING_VALUE, Color.GRAY)


# --- Pipeline ---


def format_depth(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    depth = getattr(env, "depth", 0)
    plain.append(str(depth))
    styled.append(paint(f"@{depth}", Color.CYAN))


def format_unknown(time: datetime, env: Any, ctx: Any, plain: list[str], styled: list[str]) -> None:
    """Placeholder for items that resolve to no formatter."""
    _append(plain, styled, UNKNOWN_ITEM, Color.GRAY)


DEFAULT_REGISTRY: Mapping[str, Formatter] = MappingProxyType(
    {
        "local": format_local,
        "localTime": format_local_time,
        "localDate": format_local_date,
        "iso": format_iso,
        "isoTime": format_iso_time,
        "isoDate": format_iso_date,
        "timestamp": format_timestamp,
        "responseTime": format_response_time,
        "method": format_method,
        "statusCode": format_status_code,
        "path": format_path,
        "url": format_url,
        "host": format_host,
        "ip": format_ip,
        "ua": format_user_agent,
        "referer": format_referer,
        "depth": format_depth,
    }
)
