"""Per-exchange snapshots handed to the formatters."""

from collections.abc import Mapping
from dataclasses import dataclass, field

from starlette.datastructures import Address, Headers
from starlette.types import Scope


@dataclass(slots=True)
class Exchange:
    """One request/response pair (or WebSocket session) as seen by the formatters.

    ``status_code`` stays 0 until the response starts. Only the middleware
    updates it; formatters treat the exchange as read-only.
    """

    path: str = ""
    method: str | None = None
    host: str = ""
    raw_url: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)
    client: Address | None = None
    status_code: int = 0
    scope_type: str = "http"

    @classmethod
    def from_scope(cls, scope: Scope) -> "Exchange":
        headers = Headers(scope=scope)
        path: str = scope.get("path", "")

        raw_path: bytes | None = scope.get("raw_path")
        raw_url = raw_path.decode("latin-1") if raw_path else path
        query_string: bytes = scope.get("query_string", b"")
        if query_string:
            raw_url += "?" + query_string.decode("latin-1")

        client = scope.get("client")
        return cls(
            path=path,
            method=scope.get("method"),
            host=headers.get("host", ""),
            raw_url=raw_url,
            headers=headers,
            client=Address(*client) if client else None,
            scope_type=scope["type"],
        )


@dataclass(frozen=True, slots=True)
class Environment:
    """Pipeline metadata for an exchange.

    ``depth`` counts the mount segments in the scope's ``root_path``, i.e. how
    many routers deep the middleware sits.
    """

    depth: int = 0
    scheme: str = "http"
    http_version: str = "1.1"

    @classmethod
    def from_scope(cls, scope: Scope) -> "Environment":
        root_path: str = scope.get("root_path", "")
        return cls(
            depth=len([segment for segment in root_path.split("/") if segment]),
            scheme=scope.get("scheme", "http"),
            http_version=scope.get("http_version", "1.1"),
        )
