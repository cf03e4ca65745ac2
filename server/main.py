from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional, Sequence

from ledger.errors import ConfigError

from .app import create_app
from .config import ServerConfig
from .runtime_logging import configure_logging


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the voice-ledger upload server.")
    parser.add_argument("--host", default=None, help="Interface to bind (default: LEDGER_HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (default: LEDGER_PORT or 1323)")
    parser.add_argument("--debug", action="store_true", help="Log DEBUG messages")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    logger = logging.getLogger("server.main")

    try:
        config = ServerConfig.from_env()
        overrides = {}
        if args.host:
            overrides["host"] = args.host
        if args.port is not None:
            overrides["port"] = args.port
        if args.debug:
            overrides["log_level"] = "DEBUG"
        config = replace(config, **overrides)
    except ConfigError as exc:
        configure_logging("INFO")
        logger.critical("Refusing to start: %s", exc)
        return 1

    configure_logging(config.log_level)
    try:
        app = create_app(config)
    except ConfigError as exc:
        logger.critical("Refusing to start: %s", exc)
        return 1

    logger.info("Listening on %s:%s", config.host, config.port)
    try:
        app.run(host=config.host, port=config.port, threaded=True)
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user")
    return 0


if __name__ == "__main__":
    sys.exit(main())
