"""Shared test configuration and fixtures for access log tests."""

from datetime import UTC, datetime

import pytest
from starlette.datastructures import Address

from accesslog.exchange import Environment, Exchange

FIXED_TIME = datetime(2024, 6, 1, 12, 0, 0, tzinfo=UTC)


def make_exchange(**overrides: object) -> Exchange:
    fields: dict[str, object] = {
        "path": "/items/42",
        "method": "GET",
        "host": "example.com",
        "raw_url": "/items/42?expand=1",
        "headers": {"user-agent": "curl/8.5.0", "referer": "https://example.com/"},
        "client": Address("127.0.0.1", 51000),
        "status_code": 200,
    }
    fields.update(overrides)
    return Exchange(**fields)  # type: ignore[arg-type]


@pytest.fixture
def exchange() -> Exchange:
    return make_exchange()


@pytest.fixture
def env() -> Environment:
    return Environment(depth=1)
