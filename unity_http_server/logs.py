from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from litestar.types import ASGIApp, Message, Receive, Scope, Send

ACCESS_LOG = logging.getLogger("unity_http_server.access")

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send package logs to stderr at ``level``."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger = logging.getLogger("unity_http_server")
    logger.handlers[:] = [handler]
    logger.setLevel(level)


def access_log_middleware(app: ASGIApp) -> ASGIApp:
    """Log ``METHOD path - status - client`` once a response has started."""

    async def middleware(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await app(scope, receive, send)
            return

        status_code = 500
        method = scope.get("method", "-")
        path = scope.get("path", "-")
        client = scope.get("client")

        async def send_wrapper(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await app(scope, receive, send_wrapper)
        finally:
            ACCESS_LOG.info(
                "%s %s - %s - %s",
                method,
                path,
                status_code,
                client[0] if client else "-",
            )

    return middleware
