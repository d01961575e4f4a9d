"""Resolution of configured log items into formatter sequences."""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from accesslog.formatters import DEFAULT_REGISTRY, Formatter, format_unknown

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class NamedItem:
    """A formatter referenced by registry name."""

    name: str


@dataclass(frozen=True, slots=True)
class InlineItem:
    """A formatter supplied directly as a callable."""

    formatter: Formatter


Item = NamedItem | InlineItem


def parse_item(value: object) -> Item | None:
    """Classify a configured item; ``None`` means it is neither name nor callable."""
    if isinstance(value, str):
        return NamedItem(value)
    if callable(value):
        return InlineItem(value)
    return None


class ItemRegistry:
    """Formatter lookup composed of per-instance overrides over the defaults.

    Lookup order: overrides by name, defaults by name, the item itself when it
    is callable, then the ``?`` placeholder. Overrides that are not callable
    are ignored.
    """

    def __init__(self, overrides: Mapping[str, Any] | None = None) -> None:
        self._overrides: dict[str, Formatter] = {
            name: formatter for name, formatter in (overrides or {}).items() if callable(formatter)
        }

    def lookup(self, name: str) -> Formatter | None:
        return self._overrides.get(name) or DEFAULT_REGISTRY.get(name)

    def resolve(self, value: object) -> Formatter:
        item = parse_item(value)
        match item:
            case NamedItem(name=name):
                formatter = self.lookup(name)
                if formatter is not None:
                    return formatter
                logger.warning("Unknown access log item %r, rendering placeholder", name)
            case InlineItem(formatter=formatter):
                return formatter
            case None:
                logger.warning("Access log item %r is neither a name nor a callable", value)
        return format_unknown

    def resolve_all(
        self,
        configured: Iterable[object] | None,
        fallback: Iterable[object] | None,
        default: Iterable[str],
    ) -> tuple[Formatter, ...]:
        """Resolve *configured*, else *fallback*, else *default* into formatters."""
        if configured is not None:
            source: Iterable[object] = configured
        elif fallback is not None:
            source = fallback
        else:
            source = default
        return tuple(self.resolve(value) for value in source)
