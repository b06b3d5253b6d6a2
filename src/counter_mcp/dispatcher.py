from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from mcp.types import CallToolResult, TextContent

from .registry import ToolRegistry
from .shared.errors import CounterMcpError, HandlerError, InvalidArguments, NotFound
from .shared.logging import get_logger
from .state import StateGuard

logger = get_logger(__name__)


@dataclass(frozen=True)
class CallResult:
    ok: bool
    content: Tuple[TextContent, ...] = ()
    error: Optional[CounterMcpError] = None

    @staticmethod
    def success(text: str) -> "CallResult":
        return CallResult(ok=True, content=(TextContent(type="text", text=text),))

    @staticmethod
    def failure(error: CounterMcpError) -> "CallResult":
        return CallResult(ok=False, error=error)

    @property
    def text(self) -> Optional[str]:
        return self.content[0].text if self.content else None

    def to_result(self) -> CallToolResult:
        if not self.ok:
            raise ValueError("a failed call has no tool result")
        return CallToolResult(content=list(self.content), isError=False)


class Dispatcher:
    """Resolves a tool by name and runs its handler against the shared guard."""

    def __init__(self, registry: ToolRegistry, guard: StateGuard[Any]) -> None:
        self.registry = registry
        self._guard = guard

    async def dispatch(self, name: str, arguments: Any = None) -> CallResult:
        try:
            descriptor = self.registry.lookup(name)
        except NotFound as exc:
            logger.info("Unknown tool requested: %s", name)
            return CallResult.failure(exc)

        # Handlers take no arguments yet; they are checked and then dropped.
        if arguments is not None:
            if not isinstance(arguments, Mapping):
                return CallResult.failure(InvalidArguments("arguments must be an object", data={"name": name}))
            try:
                self.registry.validate_arguments(name, arguments)
            except InvalidArguments as exc:
                return CallResult.failure(exc)

        try:
            text = await descriptor.handler(self._guard)
        except HandlerError as exc:
            logger.info("Tool %s failed: %s", name, exc.message)
            return CallResult.failure(exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Tool %s raised unexpectedly", name)
            return CallResult.failure(HandlerError(f"internal error in tool {name}: {exc}", data={"name": name}))

        if not isinstance(text, str):
            return CallResult.failure(HandlerError(f"tool {name} returned a non-text result", data={"name": name}))

        logger.debug("Tool %s -> %s", name, text)
        return CallResult.success(text)
