from __future__ import annotations

import logging
from html import escape
from pathlib import Path
from typing import TYPE_CHECKING

from litestar.response import File, Response

from .assets import classify
from .errors import ConfigError
from .locator import INDEX_DOCUMENT
from .proxy import READ_METHODS, method_not_allowed_response

if TYPE_CHECKING:
    from litestar import Request

LOG = logging.getLogger("unity_http_server.local")


def build_directory(raw: str) -> Path:
    """Validate a local build path.

    Raises:
        ConfigError: if the path does not name an existing directory.
    """
    root = Path(raw).expanduser()
    if not root.is_dir():
        msg = (
            f"Build directory '{raw}' does not exist. "
            "Please specify a valid Unity Web build directory as the first argument."
        )
        raise ConfigError(msg)
    return root.resolve()


class LocalResponder:
    """Serve a Unity Web build from a directory on disk."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    async def startup(self) -> None:
        LOG.info("serving files from %s", self._root)

    async def shutdown(self) -> None:
        pass

    async def respond(self, request: Request, path: str) -> Response:
        if request.method not in READ_METHODS:
            return method_not_allowed_response()

        if path in {"", "/"}:
            index = self._root / INDEX_DOCUMENT
            if not index.is_file():
                return self._missing_build_response()
            return self._file_response(index)

        target = self._resolve(path)
        if target is not None and target.is_dir():
            target = target / INDEX_DOCUMENT
        if target is None or not target.is_file():
            return self._not_found_response(path)
        return self._file_response(target)

    def _resolve(self, path: str) -> Path | None:
        candidate = (self._root / path.lstrip("/")).resolve()
        if candidate != self._root and self._root not in candidate.parents:
            LOG.warning("rejected path outside build directory: %s", path)
            return None
        return candidate

    def _file_response(self, target: Path) -> File:
        overrides = classify(target.name)
        headers = {}
        if overrides.content_encoding:
            headers["Content-Encoding"] = overrides.content_encoding
        return File(
            path=target,
            filename=target.name,
            media_type=overrides.content_type,
            headers=headers,
            content_disposition_type="inline",
        )

    def _not_found_response(self, path: str) -> Response:
        body = f"<h1>File Not Found</h1>\n<p>File not found: {escape(path)}</p>\n"
        return Response(content=body, status_code=404, media_type="text/html")

    def _missing_build_response(self) -> Response:
        body = (
            "<h1>Unity Web Build Not Found</h1>\n"
            f"<p>No index.html found in build directory: {escape(str(self._root))}</p>\n"
            "<p>Please ensure you have a valid Unity Web build in the specified "
            "directory.</p>\n"
        )
        return Response(content=body, status_code=404, media_type="text/html")
