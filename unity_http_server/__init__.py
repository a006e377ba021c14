"""HTTP origin server for Unity Web builds, from disk or an object store bucket."""

from .app import create_app
from .assets import AssetHeaders, classify
from .locator import StorageLocator, parse_locator
from .proxy import RemoteObjectProxy
from .settings import ServerSettings, StorageSettings
from .storage import ObjectMetadata, S3Backend

__all__ = [
    "AssetHeaders",
    "ObjectMetadata",
    "RemoteObjectProxy",
    "S3Backend",
    "ServerSettings",
    "StorageLocator",
    "StorageSettings",
    "classify",
    "create_app",
    "parse_locator",
]
