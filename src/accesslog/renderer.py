"""Rendering of resolved formatter sequences into access lines."""

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any, NamedTuple

from accesslog.constants import DEFAULT_SEPARATOR
from accesslog.formatters import Formatter, format_unknown

logger = logging.getLogger(__name__)


class RenderedLine(NamedTuple):
    plain: str
    styled: str


def render(
    time: datetime, env: Any, ctx: Any, items: Sequence[Formatter]
) -> tuple[list[str], list[str]]:
    """Run *items* in order against one snapshot, collecting plain and styled tokens.

    A formatter that raises is replaced by the ``?`` placeholder for this line;
    whatever it appended before failing is discarded so both lists stay aligned.
    """
    plain: list[str] = []
    styled: list[str] = []
    for formatter in items:
        plain_len, styled_len = len(plain), len(styled)
        try:
            formatter(time, env, ctx, plain, styled)
        except Exception:
            logger.exception("Access log item %r failed, rendering placeholder", formatter)
            del plain[plain_len:], styled[styled_len:]
            format_unknown(time, env, ctx, plain, styled)
    return plain, styled


class LineRenderer:
    """Joins rendered tokens into lines.

    Plain tokens are joined with ``sep``; styled tokens always with a single
    space since they only ever go to a terminal.
    """

    def __init__(self, sep: str = DEFAULT_SEPARATOR) -> None:
        self.sep = sep

    def render_line(self, time: datetime, env: Any, ctx: Any, items: Sequence[Formatter]) -> RenderedLine:
        plain, styled = render(time, env, ctx, items)
        return RenderedLine(self.sep.join(map(str, plain)), " ".join(map(str, styled)))
