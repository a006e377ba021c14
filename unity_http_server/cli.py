from __future__ import annotations

import argparse
import sys
from typing import TYPE_CHECKING

import uvicorn

from .app import create_app
from .errors import ConfigError
from .logs import configure_logging
from .settings import load_server_settings_from_env

if TYPE_CHECKING:
    from collections.abc import Sequence

DESCRIPTION = "Unity HTTP Server - A simple HTTP server optimized for serving Unity Web builds"

EPILOG = """\
examples:
  unity-http-server
  unity-http-server ./path/to/build
  unity-http-server ./path/to/build -p 3000
  unity-http-server ./path/to/build -p 3000 -a 0.0.0.0
  unity-http-server gs://bucket-name/path/to/build
"""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unity-http-server",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "build_path",
        nargs="?",
        default=None,
        help="Unity Web build directory or gs://, s3:// locator (default: ./)",
    )
    parser.add_argument(
        "-p",
        "--port",
        type=int,
        default=None,
        help="port to listen on (default: 8080)",
    )
    parser.add_argument(
        "-a",
        dest="host",
        default=None,
        help="host to bind to (default: localhost)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = load_server_settings_from_env(
            build_path=args.build_path, port=args.port, host=args.host
        )
        configure_logging(settings.log_level)
        app = create_app(settings)
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        access_log=False,
    )
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
