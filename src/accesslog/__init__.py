"""Access log middleware: one plain/styled line per exchange, console and daily files."""

from accesslog.exchange import Environment, Exchange
from accesslog.formatters import DEFAULT_REGISTRY, Formatter
from accesslog.items import InlineItem, ItemRegistry, NamedItem
from accesslog.logger import AccessLogger
from accesslog.middleware import AccessLogMiddleware, get_log_finalizer, install_access_log
from accesslog.renderer import LineRenderer, RenderedLine, render
from accesslog.settings import AccessLogSettings, get_settings
from accesslog.sinks import ConsoleSink, DailyFileSink, SinkManager
from accesslog.tracker import CompletionSignal, CompletionState, CompletionTracker

__all__ = [
    "DEFAULT_REGISTRY",
    "AccessLogMiddleware",
    "AccessLogSettings",
    "AccessLogger",
    "CompletionSignal",
    "CompletionState",
    "CompletionTracker",
    "ConsoleSink",
    "DailyFileSink",
    "Environment",
    "Exchange",
    "Formatter",
    "InlineItem",
    "ItemRegistry",
    "LineRenderer",
    "NamedItem",
    "RenderedLine",
    "SinkManager",
    "get_log_finalizer",
    "get_settings",
    "install_access_log",
    "render",
]
