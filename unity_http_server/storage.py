from __future__ import annotations

import logging
import zlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from boto3.session import Session
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from .errors import BackendUnavailable, ObjectNotFound

if TYPE_CHECKING:
    from .locator import StorageLocator
    from .settings import StorageSettings

LOG = logging.getLogger("unity_http_server.storage")

MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


@dataclass(frozen=True)
class ObjectMetadata:
    """Metadata of a stored object, fetched fresh for every request."""

    exists: bool
    etag: str | None = None
    content_type: str | None = None
    content_encoding: str | None = None
    content_length: int | None = None

    @classmethod
    def missing(cls) -> ObjectMetadata:
        return cls(exists=False)


class ReadableStream(Protocol):
    def read(self, size: int = -1) -> bytes: ...

    def close(self) -> None: ...


class ObjectBackend(Protocol):
    """Operations the proxy needs from an object store.

    Implementations are synchronous; the proxy runs them in worker threads.
    Communication failures must raise ``BackendUnavailable``.
    """

    def exists(self, key: str) -> bool: ...

    def get_metadata(self, key: str) -> ObjectMetadata: ...

    def open_read_stream(
        self, key: str, *, decompress: bool = False
    ) -> ReadableStream: ...


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _request_stored_encoding(request: Any, **kwargs: Any) -> None:
    # Cloud Storage transcodes gzip objects unless the client accepts gzip.
    request.headers["Accept-Encoding"] = "gzip"


def build_s3_client(locator: StorageLocator, settings: StorageSettings):
    region = settings.region
    if region is None and locator.scheme == "gs":
        region = "auto"
    session = Session(
        aws_access_key_id=settings.access_key,
        aws_secret_access_key=settings.secret_key,
        aws_session_token=settings.session_token,
        region_name=region,
    )
    return session.client(
        "s3",
        endpoint_url=settings.endpoint_for(locator.scheme),
        config=BotoConfig(
            signature_version="s3v4",
            retries={"mode": "standard", "total_max_attempts": 1},
            s3={"addressing_style": settings.addressing_style},
        ),
    )


class ObjectStream:
    """File-like wrapper over a response body that reports read failures
    as ``BackendUnavailable``."""

    def __init__(self, body: Any, key: str) -> None:
        self._body = body
        self._key = key

    def read(self, size: int = -1) -> bytes:
        try:
            return self._body.read(size if size >= 0 else None)
        except (BotoCoreError, OSError) as exc:
            msg = f"read of {self._key} failed: {exc}"
            raise BackendUnavailable(msg) from exc

    def close(self) -> None:
        self._body.close()


class GunzipStream:
    """Decode a gzip-encoded stream incrementally."""

    def __init__(self, raw: ReadableStream) -> None:
        self._raw = raw
        self._decoder = zlib.decompressobj(16 + zlib.MAX_WBITS)

    def read(self, size: int = -1) -> bytes:
        if size < 0:
            return self._decoder.decompress(self._raw.read()) + self._decoder.flush()
        while True:
            if self._decoder.unconsumed_tail:
                data = self._decoder.decompress(self._decoder.unconsumed_tail, size)
            else:
                compressed = self._raw.read(size)
                if not compressed:
                    return self._decoder.flush()
                data = self._decoder.decompress(compressed, size)
            if data:
                return data

    def close(self) -> None:
        self._raw.close()


class S3Backend:
    """Object store reached through the S3 API (AWS S3, MinIO, Cloud Storage)."""

    def __init__(self, locator: StorageLocator, client: Any) -> None:
        self._locator = locator
        self._client = client
        self._client.meta.events.register(
            "before-sign.s3.GetObject", _request_stored_encoding
        )

    @classmethod
    def from_settings(
        cls, locator: StorageLocator, settings: StorageSettings
    ) -> S3Backend:
        return cls(locator, build_s3_client(locator, settings))

    @property
    def bucket(self) -> str:
        return self._locator.bucket

    def exists(self, key: str) -> bool:
        try:
            self._client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as error:
            if _error_code(error) in MISSING_CODES:
                LOG.debug("miss for %s://%s/%s", self._locator.scheme, self.bucket, key)
                return False
            raise self._unavailable("HeadObject", key, error) from error
        except BotoCoreError as error:
            raise self._unavailable("HeadObject", key, error) from error
        return True

    def get_metadata(self, key: str) -> ObjectMetadata:
        try:
            result = self._client.head_object(Bucket=self.bucket, Key=key)
        except ClientError as error:
            if _error_code(error) in MISSING_CODES:
                raise ObjectNotFound(key) from error
            raise self._unavailable("HeadObject", key, error) from error
        except BotoCoreError as error:
            raise self._unavailable("HeadObject", key, error) from error
        return ObjectMetadata(
            exists=True,
            etag=result.get("ETag") or None,
            content_type=result.get("ContentType") or None,
            content_encoding=result.get("ContentEncoding") or None,
            content_length=result.get("ContentLength"),
        )

    def open_read_stream(self, key: str, *, decompress: bool = False) -> ReadableStream:
        try:
            result = self._client.get_object(Bucket=self.bucket, Key=key)
        except ClientError as error:
            if _error_code(error) in MISSING_CODES:
                raise ObjectNotFound(key) from error
            raise self._unavailable("GetObject", key, error) from error
        except BotoCoreError as error:
            raise self._unavailable("GetObject", key, error) from error

        stream: ReadableStream = ObjectStream(result["Body"], key)
        if decompress and (result.get("ContentEncoding") or "").lower() == "gzip":
            stream = GunzipStream(stream)
        return stream

    def _unavailable(
        self, operation: str, key: str, error: Exception
    ) -> BackendUnavailable:
        msg = (
            f"{operation} failed for {self._locator.scheme}://{self.bucket}/{key}: "
            f"{error}"
        )
        return BackendUnavailable(msg)
