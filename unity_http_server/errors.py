"""Error taxonomy shared by the startup path and the request path."""

from __future__ import annotations


class UnityServerError(Exception):
    """Base class for errors raised by the server."""


class ConfigError(UnityServerError):
    """Invalid CLI arguments, locator or build directory. Fatal at startup."""


class ObjectNotFound(UnityServerError):
    """The requested object or file does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(f"object not found: {key}")
        self.key = key


class BackendUnavailable(UnityServerError):
    """The storage backend could not be reached or refused the request."""


class MidStreamFailure(UnityServerError):
    """The backend read broke after the response headers were sent."""
