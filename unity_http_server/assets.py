"""Content headers for Unity Web build artifacts served from disk."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import PurePosixPath

OCTET_STREAM = "application/octet-stream"

CONTENT_TYPES = {
    ".wasm": "application/wasm",
    ".js": "application/javascript",
    ".data": OCTET_STREAM,
    ".unityweb": OCTET_STREAM,
}

CONTENT_ENCODINGS = {
    ".gz": "gzip",
    ".br": "br",
}

# Checked in order against the full name of a compressed file.
_EMBEDDED_TYPES = (
    (".wasm.", "application/wasm"),
    (".js.", "application/javascript"),
    (".data.", OCTET_STREAM),
)


@dataclass(frozen=True)
class AssetHeaders:
    content_type: str | None = None
    content_encoding: str | None = None

    def as_headers(self) -> dict[str, str]:
        headers: dict[str, str] = {}
        if self.content_type:
            headers["Content-Type"] = self.content_type
        if self.content_encoding:
            headers["Content-Encoding"] = self.content_encoding
        return headers


def _content_type_for_compressed(name: str) -> str:
    for marker, content_type in _EMBEDDED_TYPES:
        if marker in name:
            return content_type
    return OCTET_STREAM


def classify(path: str) -> AssetHeaders:
    """Return the headers a Unity build file must be served with.

    Pre-compressed files (``.gz``/``.br``) get a ``Content-Encoding`` plus the
    content type of the file they wrap. Unknown extensions return an empty
    result so the static responder's own guess applies.
    """
    name = PurePosixPath(path).name.lower()
    suffix = PurePosixPath(name).suffix

    encoding = CONTENT_ENCODINGS.get(suffix)
    if encoding is not None:
        return AssetHeaders(
            content_type=_content_type_for_compressed(name),
            content_encoding=encoding,
        )
    return AssetHeaders(content_type=CONTENT_TYPES.get(suffix))
