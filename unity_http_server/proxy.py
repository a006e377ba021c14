from __future__ import annotations

import logging
from functools import partial
from html import escape
from typing import TYPE_CHECKING, Any

from anyio import to_thread
from litestar.response import Response, Stream

from .assets import OCTET_STREAM
from .errors import BackendUnavailable, MidStreamFailure, ObjectNotFound
from .storage import ObjectMetadata

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable

    from litestar import Request

    from .locator import StorageLocator
    from .storage import ObjectBackend, ReadableStream

LOG = logging.getLogger("unity_http_server.proxy")

CHUNK_SIZE = 64 * 1024
READ_METHODS = {"GET", "HEAD"}
CACHE_CONTROL = "no-cache"


async def _run_sync(func: Callable[..., Any], /, *args: Any, **kwargs: Any) -> Any:
    return await to_thread.run_sync(partial(func, *args, **kwargs))


def is_not_modified(client_validator: str | None, metadata: ObjectMetadata) -> bool:
    """Whether a conditional request can be answered with 304.

    Only an exact match of ``If-None-Match`` against the stored ETag counts;
    weak validators and lists are not interpreted.
    """
    if not client_validator or not metadata.etag:
        return False
    return client_validator == metadata.etag


def not_found_response(key: str) -> Response:
    body = f"<h1>File Not Found</h1>\n<p>File not found in storage: {escape(key)}</p>\n"
    return Response(content=body, status_code=404, media_type="text/html")


def server_error_response() -> Response:
    body = "<h1>Internal Server Error</h1>\n<p>The storage backend is unavailable.</p>\n"
    return Response(content=body, status_code=500, media_type="text/html")


def method_not_allowed_response() -> Response:
    return Response(
        content="<h1>Method Not Allowed</h1>\n",
        status_code=405,
        media_type="text/html",
        headers={"Allow": ", ".join(sorted(READ_METHODS))},
    )


class RemoteObjectProxy:
    """Serve a build straight out of an object store bucket."""

    def __init__(
        self,
        locator: StorageLocator,
        backend: ObjectBackend,
        chunk_size: int = CHUNK_SIZE,
    ) -> None:
        self._locator = locator
        self._backend = backend
        self._chunk_size = chunk_size

    @property
    def locator(self) -> StorageLocator:
        return self._locator

    async def startup(self) -> None:
        LOG.info("serving objects from %s", self._locator)

    async def shutdown(self) -> None:
        pass

    async def respond(self, request: Request, path: str) -> Response:
        if request.method not in READ_METHODS:
            return method_not_allowed_response()

        key = self._locator.object_key(path)
        try:
            metadata = await self.resolve(key)
            if not metadata.exists:
                return not_found_response(key)

            if is_not_modified(request.headers.get("if-none-match"), metadata):
                LOG.debug("not modified %s etag=%s", key, metadata.etag)
                return Response(
                    content=b"",
                    status_code=304,
                    headers=self._validator_headers(metadata),
                )

            if request.method == "HEAD":
                return Response(
                    content=b"",
                    status_code=200,
                    media_type=metadata.content_type or OCTET_STREAM,
                    headers=self.response_headers(metadata),
                )

            return await self.deliver(key, metadata)
        except ObjectNotFound:
            return not_found_response(key)
        except BackendUnavailable:
            LOG.exception("storage backend unavailable for %s", key)
            return server_error_response()

    async def resolve(self, key: str) -> ObjectMetadata:
        """Look up an object, returning ``exists=False`` when it is absent.

        Raises:
            BackendUnavailable: if the store cannot be queried.
        """
        if not await _run_sync(self._backend.exists, key):
            LOG.debug("object %s does not exist", key)
            return ObjectMetadata.missing()
        return await _run_sync(self._backend.get_metadata, key)

    async def deliver(self, key: str, metadata: ObjectMetadata) -> Response:
        """Stream the stored bytes of ``key`` without decoding them."""
        stream = await _run_sync(self._backend.open_read_stream, key, decompress=False)
        return Stream(
            content=partial(self.iter_object, stream, key),
            status_code=200,
            media_type=metadata.content_type or OCTET_STREAM,
            headers=self.response_headers(metadata),
        )

    async def iter_object(self, stream: ReadableStream, key: str) -> AsyncIterator[bytes]:
        """Yield the object in bounded chunks.

        The next backend read is only issued once the consumer asks for the
        next chunk, so reads never run ahead of the client socket.
        """
        sent = 0
        try:
            while True:
                try:
                    chunk = await _run_sync(stream.read, self._chunk_size)
                except BackendUnavailable as exc:
                    LOG.error(
                        "aborting response for %s after %d bytes: %s", key, sent, exc
                    )
                    msg = f"stream of {key} broke after {sent} bytes"
                    raise MidStreamFailure(msg) from exc
                if not chunk:
                    break
                sent += len(chunk)
                yield chunk
        finally:
            await _run_sync(stream.close)

    def response_headers(self, metadata: ObjectMetadata) -> dict[str, str]:
        headers = self._validator_headers(metadata)
        if metadata.content_type:
            headers["Content-Type"] = metadata.content_type
        if metadata.content_encoding:
            headers["Content-Encoding"] = metadata.content_encoding
        if metadata.content_length is not None:
            headers["Content-Length"] = str(metadata.content_length)
        return headers

    @staticmethod
    def _validator_headers(metadata: ObjectMetadata) -> dict[str, str]:
        headers = {"Cache-Control": CACHE_CONTROL}
        if metadata.etag:
            headers["ETag"] = metadata.etag
        return headers
