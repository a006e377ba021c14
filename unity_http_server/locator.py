from __future__ import annotations

import re
from dataclasses import dataclass

_LOCATOR_RE = re.compile(r"^(?P<scheme>[A-Za-z][A-Za-z0-9+.-]*)://(?P<bucket>[^/]+)/?(?P<prefix>.*)$")

INDEX_DOCUMENT = "index.html"


@dataclass(frozen=True)
class StorageLocator:
    """Bucket and key prefix of a remote build, e.g. ``gs://bucket/builds/web``."""

    scheme: str
    bucket: str
    prefix: str = ""

    def object_key(self, request_path: str) -> str:
        """Map a request path onto the fully-qualified object key."""
        relative = INDEX_DOCUMENT if request_path in {"", "/"} else request_path.lstrip("/")
        if not self.prefix:
            return relative
        return f"{self.prefix}/{relative}"

    def __str__(self) -> str:
        if not self.prefix:
            return f"{self.scheme}://{self.bucket}"
        return f"{self.scheme}://{self.bucket}/{self.prefix}"


def looks_like_locator(raw: str) -> bool:
    """Whether ``raw`` names a remote bucket rather than a local directory."""
    return "://" in raw


def parse_locator(raw: str) -> StorageLocator | None:
    """Parse ``scheme://bucket[/prefix]``.

    Returns ``None`` when ``raw`` is not a remote locator. Leading and trailing
    slashes are stripped from the prefix.
    """
    match = _LOCATOR_RE.match(raw.strip())
    if match is None:
        return None
    prefix = match.group("prefix").strip("/")
    return StorageLocator(
        scheme=match.group("scheme").lower(),
        bucket=match.group("bucket"),
        prefix=prefix,
    )
