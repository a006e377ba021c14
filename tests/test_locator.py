"""Tests for storage locator parsing and object key resolution."""

from __future__ import annotations

import pytest
from unity_http_server.errors import ConfigError
from unity_http_server.locator import StorageLocator, parse_locator
from unity_http_server.modes import LocalMode, RemoteMode, resolve_mode


class TestParseLocator:
    @pytest.mark.parametrize(
        ("raw", "bucket", "prefix"),
        [
            ("gs://unity-builds/web", "unity-builds", "web"),
            ("s3://unity-builds/releases/1.2/web", "unity-builds", "releases/1.2/web"),
            ("gs://unity-builds", "unity-builds", ""),
            ("gs://unity-builds/", "unity-builds", ""),
            ("gs://unity-builds/web/", "unity-builds", "web"),
        ],
    )
    def test_valid_locators(self, raw, bucket, prefix):
        locator = parse_locator(raw)
        assert locator is not None
        assert locator.bucket == bucket
        assert locator.prefix == prefix

    def test_scheme_is_kept(self):
        locator = parse_locator("S3://bucket/p")
        assert locator == StorageLocator(scheme="s3", bucket="bucket", prefix="p")

    @pytest.mark.parametrize(
        "raw",
        ["./build", "/srv/www/build", "unity-builds/web", "gs:/bucket", "gs:///web"],
    )
    def test_not_a_locator(self, raw):
        assert parse_locator(raw) is None

    def test_str_round_trips(self):
        assert str(parse_locator("gs://b/p/q")) == "gs://b/p/q"
        assert str(parse_locator("gs://b")) == "gs://b"


class TestObjectKey:
    def test_root_maps_to_index_with_prefix(self):
        locator = StorageLocator(scheme="gs", bucket="b", prefix="web")
        assert locator.object_key("/") == "web/index.html"

    def test_root_maps_to_index_without_prefix(self):
        locator = StorageLocator(scheme="gs", bucket="b")
        assert locator.object_key("/") == "index.html"

    def test_single_separator(self):
        locator = parse_locator("gs://b/web/")
        assert locator is not None
        assert locator.object_key("/Build/app.wasm.gz") == "web/Build/app.wasm.gz"

    def test_path_without_prefix(self):
        locator = StorageLocator(scheme="s3", bucket="b")
        assert locator.object_key("/Build/app.data") == "Build/app.data"


class TestResolveMode:
    def test_remote_locator(self):
        mode = resolve_mode("gs://unity-builds/web")
        assert isinstance(mode, RemoteMode)
        assert mode.locator.prefix == "web"

    def test_malformed_locator_is_config_error(self):
        with pytest.raises(ConfigError, match="Invalid storage locator"):
            resolve_mode("gs:///web")

    def test_local_directory(self, tmp_path):
        mode = resolve_mode(str(tmp_path))
        assert isinstance(mode, LocalMode)
        assert mode.root == tmp_path.resolve()

    def test_missing_directory_is_config_error(self, tmp_path):
        with pytest.raises(ConfigError, match="does not exist"):
            resolve_mode(str(tmp_path / "missing"))
