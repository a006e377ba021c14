from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from litestar import Litestar, Request, get
from litestar.config.cors import CORSConfig
from litestar.handlers import asgi
from litestar.plugins.prometheus import PrometheusConfig, PrometheusController

from .logs import access_log_middleware
from .modes import RemoteMode, build_responder, resolve_mode
from .settings import load_server_settings_from_env, load_storage_settings_from_env

if TYPE_CHECKING:
    from litestar.types import Receive, Scope, Send

    from .modes import ServerMode
    from .settings import ServerSettings, StorageSettings
    from .storage import ObjectBackend

LOG = logging.getLogger("unity_http_server.app")

prometheus_config = PrometheusConfig(
    app_name="unity_http_server", prefix="unity_http_server"
)


def create_app(
    settings: ServerSettings | None = None,
    storage: StorageSettings | None = None,
    backend: ObjectBackend | None = None,
    mode: ServerMode | None = None,
) -> Litestar:
    """Create the ASGI application serving a Unity Web build.

    The serving mode is resolved here, once; pass ``backend`` to serve a
    remote locator through a custom object store client.

    Raises:
        ConfigError: for a malformed locator or a missing build directory.
    """
    if settings is None:
        settings = load_server_settings_from_env()
    if mode is None:
        mode = resolve_mode(settings.build_path)
    if backend is None and storage is None and isinstance(mode, RemoteMode):
        storage = load_storage_settings_from_env()
    responder = build_responder(mode, storage=storage, backend=backend)

    @get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @asgi(path="/", is_mount=True, copy_scope=True)
    async def build_handler(scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope=scope, receive=receive)
        path = scope.get("path", "/")
        if not path.startswith("/"):
            path = f"/{path}"
        if path != "/" and path.endswith("/"):
            path = path.rstrip("/") or "/"
        response = await responder.respond(request, path)
        asgi_response = response.to_asgi_response(None, request)
        await asgi_response(scope, receive, send)

    async def startup(app: Litestar) -> None:
        await responder.startup()
        LOG.info(
            "Unity HTTP Server started, serving %s at http://%s:%s",
            mode.describe(),
            settings.host,
            settings.port,
        )

    async def shutdown(app: Litestar) -> None:
        await responder.shutdown()

    cors_config = CORSConfig(
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "HEAD", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "If-None-Match"],
        expose_headers=["ETag", "Content-Encoding"],
    )

    return Litestar(
        route_handlers=[health, build_handler, PrometheusController],
        on_startup=[startup],
        on_shutdown=[shutdown],
        cors_config=cors_config,
        middleware=[access_log_middleware, prometheus_config.middleware],
    )
