from __future__ import annotations

import pytest
from unity_http_server.assets import AssetHeaders, classify


@pytest.mark.parametrize(
    ("path", "content_type", "content_encoding"),
    [
        ("Build/app.wasm", "application/wasm", None),
        ("Build/app.framework.js", "application/javascript", None),
        ("Build/app.data", "application/octet-stream", None),
        ("Build/app.unityweb", "application/octet-stream", None),
        ("Build/app.wasm.gz", "application/wasm", "gzip"),
        ("Build/app.data.gz", "application/octet-stream", "gzip"),
        ("Build/app.framework.js.gz", "application/javascript", "gzip"),
        ("Build/app.js.br", "application/javascript", "br"),
        ("Build/app.wasm.br", "application/wasm", "br"),
        ("Build/app.symbols.json.gz", "application/octet-stream", "gzip"),
        ("Build/APP.WASM", "application/wasm", None),
    ],
)
def test_classify(path, content_type, content_encoding):
    assert classify(path) == AssetHeaders(content_type, content_encoding)


def test_unknown_extension_defers_to_responder():
    assert classify("index.html") == AssetHeaders()
    assert classify("TemplateData/style.css").as_headers() == {}


def test_secondary_extension_only_from_file_name():
    """Directory names never influence the embedded type."""
    assert classify("/game.wasm.v2/loader.gz").content_type == "application/octet-stream"


def test_as_headers():
    assert classify("app.js.br").as_headers() == {
        "Content-Type": "application/javascript",
        "Content-Encoding": "br",
    }
