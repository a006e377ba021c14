from __future__ import annotations

import os
from typing import TYPE_CHECKING, cast

import pytest
from litestar import Request
from unity_http_server.locator import StorageLocator

if TYPE_CHECKING:
    from collections.abc import Callable

    from litestar.types import HTTPScope


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of settings-driven tests."""
    for key in list(os.environ):
        if key.startswith(("UNITY_HTTP_SERVER_", "AWS_")):
            monkeypatch.delenv(key)


@pytest.fixture
def locator() -> StorageLocator:
    return StorageLocator(scheme="gs", bucket="unity-builds", prefix="web")


@pytest.fixture
def make_request() -> Callable[..., Request]:
    def factory(
        method: str = "GET", path: str = "/", headers: dict[str, str] | None = None
    ) -> Request:
        scope = cast(
            "HTTPScope",
            {
                "type": "http",
                "method": method,
                "path": path,
                "query_string": b"",
                "headers": [
                    (name.lower().encode("latin-1"), value.encode("latin-1"))
                    for name, value in (headers or {}).items()
                ],
            },
        )

        async def receive():
            return {"type": "http.request", "body": b""}

        return Request(scope=scope, receive=receive)

    return factory
