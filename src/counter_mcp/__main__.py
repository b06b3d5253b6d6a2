from __future__ import annotations

import asyncio
import sys

from .server import CounterServer
from .shared.config import load_config
from .shared.errors import ConstructionError, TransportFailure
from .shared.logging import configure_logging, get_logger

logger = get_logger(__name__)


def _tolerate_undecodable_stdin() -> None:
    # The protocol is UTF-8; invalid bytes become lone surrogates instead of a read error.
    reconfigure = getattr(sys.stdin, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(encoding="utf-8", errors="surrogateescape")


def main() -> None:
    config = load_config()
    configure_logging(config.logging)
    _tolerate_undecodable_stdin()

    try:
        server = CounterServer(config)
    except ConstructionError as exc:
        logger.error("Failed to build tool registry: %s", exc)
        raise SystemExit(1) from exc

    try:
        asyncio.run(server.serve())
    except TransportFailure as exc:
        logger.error("Transport failure: %s", exc)
        raise SystemExit(1) from exc
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    main()
