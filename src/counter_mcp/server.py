from __future__ import annotations

from typing import Optional

from .dispatcher import Dispatcher
from .registry import ToolRegistry
from .session import ServerSession
from .shared.config import AppConfig
from .shared.logging import get_logger
from .state import Counter, StateGuard
from .tools import build_registry
from .transport import StreamTransport, Transport

logger = get_logger(__name__)


class CounterServer:
    """Process-wide wiring: one counter behind one guard, shared by every session."""

    def __init__(self, config: Optional[AppConfig] = None, registry: Optional[ToolRegistry] = None) -> None:
        self.config = config or AppConfig()
        self.counter = Counter(self.config.counter)
        self.guard: StateGuard[Counter] = StateGuard(self.counter)
        self.registry = registry if registry is not None else build_registry()
        self.dispatcher = Dispatcher(self.registry, self.guard)

    def open_session(self, transport: Transport) -> ServerSession:
        return ServerSession(self.dispatcher, transport, self.config.server)

    async def serve(self, transport: Optional[Transport] = None) -> None:
        session = self.open_session(transport or StreamTransport())
        logger.info(
            "Serving %s %s with %d tools",
            self.config.server.name,
            self.config.server.version,
            len(self.registry),
        )
        await session.run()
