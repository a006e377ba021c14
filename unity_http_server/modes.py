"""Server mode: a local build directory or a remote bucket, chosen once at startup."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from .errors import ConfigError
from .local import LocalResponder, build_directory
from .locator import StorageLocator, looks_like_locator, parse_locator
from .proxy import RemoteObjectProxy
from .storage import S3Backend

if TYPE_CHECKING:
    from litestar import Request
    from litestar.response import Response

    from .settings import StorageSettings
    from .storage import ObjectBackend


class Responder(Protocol):
    async def startup(self) -> None: ...

    async def shutdown(self) -> None: ...

    async def respond(self, request: Request, path: str) -> Response: ...


@dataclass(frozen=True)
class LocalMode:
    root: Path

    def describe(self) -> str:
        return str(self.root)


@dataclass(frozen=True)
class RemoteMode:
    locator: StorageLocator

    def describe(self) -> str:
        return str(self.locator)


ServerMode = LocalMode | RemoteMode


def resolve_mode(build_path: str) -> ServerMode:
    """Decide between local and remote serving from the build path.

    Raises:
        ConfigError: for a malformed locator or a missing build directory.
    """
    if looks_like_locator(build_path):
        locator = parse_locator(build_path)
        if locator is None:
            msg = (
                f"Invalid storage locator '{build_path}'. "
                "Use: gs://bucket-name/path or s3://bucket-name/path"
            )
            raise ConfigError(msg)
        return RemoteMode(locator)
    return LocalMode(build_directory(build_path))


def build_responder(
    mode: ServerMode,
    storage: StorageSettings | None = None,
    backend: ObjectBackend | None = None,
) -> Responder:
    if isinstance(mode, LocalMode):
        return LocalResponder(mode.root)
    if backend is None:
        if storage is None:
            msg = "storage settings are required for remote mode"
            raise ConfigError(msg)
        backend = S3Backend.from_settings(mode.locator, storage)
    return RemoteObjectProxy(mode.locator, backend)
