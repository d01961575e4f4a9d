"""ASGI middleware that writes one access line per HTTP exchange or WebSocket session."""

import asyncio
import logging
from collections.abc import Callable

from starlette.applications import Starlette
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from accesslog.constants import FINALIZER_STATE_KEY
from accesslog.exchange import Environment, Exchange
from accesslog.logger import AccessLogger
from accesslog.logging import configure_logging
from accesslog.settings import AccessLogSettings, get_settings

logger = logging.getLogger(__name__)

_TRACKED_SCOPES = frozenset({"http", "websocket"})
_DISCONNECT_MESSAGES = frozenset({"http.disconnect", "websocket.disconnect"})
_SHUTDOWN_MESSAGES = frozenset({"lifespan.shutdown.complete", "lifespan.shutdown.failed"})

# Status reported by servers when a WebSocket is closed before it is accepted
_WEBSOCKET_REJECTED_STATUS = 403
_WEBSOCKET_ACCEPTED_STATUS = 101


def _is_final_message(message: Message) -> bool:
    message_type = message["type"]
    if message_type in ("http.response.body", "websocket.http.response.body"):
        return not message.get("more_body", False)
    return message_type in ("http.response.pathsend", "websocket.close")


class AccessLogMiddleware:
    """Arm a completion tracker for every exchange and hand control downstream.

    Completion signals come from the ASGI messages flowing through:

    * finish: the last response body chunk, a ``http.response.pathsend`` or a
      ``websocket.close`` was sent;
    * close: the client disconnected, or the downstream app returned or was
      cancelled;
    * error: the downstream app raised;
    * timeout: nothing above happened within ``FORCE_LOG_MS``.

    Handlers can finalize earlier through :func:`get_log_finalizer`, e.g. a
    WebSocket endpoint that wants its line written right after accepting.
    """

    def __init__(
        self,
        app: ASGIApp,
        settings: AccessLogSettings | None = None,
        access_logger: AccessLogger | None = None,
    ) -> None:
        self.app = app
        self.access_logger = access_logger or AccessLogger(settings or get_settings())

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._lifespan(scope, receive, send)
            return
        if scope["type"] not in _TRACKED_SCOPES:
            await self.app(scope, receive, send)
            return

        exchange = Exchange.from_scope(scope)
        tracker = self.access_logger.arm(Environment.from_scope(scope), exchange)
        scope["state"] = {**scope.get("state", {}), FINALIZER_STATE_KEY: tracker.finalize}

        async def receive_with_tracking() -> Message:
            message = await receive()
            if message["type"] in _DISCONNECT_MESSAGES:
                tracker.close()
            return message

        async def send_with_tracking(message: Message) -> None:
            message_type = message["type"]
            if message_type in ("http.response.start", "websocket.http.response.start"):
                exchange.status_code = message["status"]
            elif message_type == "websocket.accept":
                exchange.status_code = _WEBSOCKET_ACCEPTED_STATUS
            elif message_type == "websocket.close" and not exchange.status_code:
                exchange.status_code = _WEBSOCKET_REJECTED_STATUS

            await send(message)

            if _is_final_message(message):
                tracker.finish()

        try:
            await self.app(scope, receive_with_tracking, send_with_tracking)
        except asyncio.CancelledError:
            tracker.close()
            raise
        except Exception:
            tracker.error()
            raise
        tracker.close()

    async def _lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Pass lifespan events through, closing the file sink on shutdown."""

        async def send_with_shutdown(message: Message) -> None:
            if message["type"] in _SHUTDOWN_MESSAGES:
                self.access_logger.close()
                logger.debug("Access log closed on shutdown")
            await send(message)

        await self.app(scope, receive, send_with_shutdown)


def get_log_finalizer(conn: HTTPConnection) -> Callable[[], bool] | None:
    """Return the callable that finalizes *conn*'s access line, if it is tracked."""
    state = conn.scope.get("state") or {}
    return state.get(FINALIZER_STATE_KEY)


def install_access_log(app: Starlette, settings: AccessLogSettings | None = None) -> None:
    """Configure diagnostics logging and register :class:`AccessLogMiddleware` on *app*."""
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    app.add_middleware(AccessLogMiddleware, settings=settings)
