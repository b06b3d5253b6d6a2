from __future__ import annotations

from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Optional

from mcp.types import (
    Implementation,
    InitializeResult,
    ListToolsResult,
    ServerCapabilities,
    ToolsCapability,
)

from .dispatcher import Dispatcher
from .protocol import (
    MalformedMessage,
    error_from_exception,
    make_error,
    make_result,
    negotiate_version,
    parse_message,
    serialize_message,
)
from .shared.config import ServerConfig
from .shared.errors import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    CounterMcpError,
    InvalidArguments,
    ProtocolViolation,
)
from .shared.logging import get_logger
from .transport import Transport

JsonDict = Dict[str, Any]

logger = get_logger(__name__)


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    CLOSED = "closed"


def _dump(model: Any) -> JsonDict:
    return model.model_dump(by_alias=True, exclude_none=True, mode="json")


class ServerSession:
    """One transport connection, from the ``initialize`` handshake until the peer closes.

    Requests are handled strictly one at a time: a response is written before
    the next line is read, so responses are never reordered.
    """

    def __init__(self, dispatcher: Dispatcher, transport: Transport, server: Optional[ServerConfig] = None) -> None:
        self.dispatcher = dispatcher
        self.server = server or ServerConfig()
        self.state = SessionState.UNINITIALIZED
        self.protocol_version: Optional[str] = None
        self.client_info: Optional[JsonDict] = None
        self.capabilities = ServerCapabilities(tools=ToolsCapability(listChanged=False))
        self._transport = transport
        self._methods: Dict[str, Callable[[JsonDict], Awaitable[JsonDict]]] = {
            "initialize": self._initialize,
            "ping": self._ping,
            "tools/list": self._list_tools,
            "tools/call": self._call_tool,
        }

    async def run(self) -> None:
        """Serve until the transport reaches EOF.

        ``TransportFailure`` propagates to the caller; the session is closed either way.
        """
        try:
            while self.state is not SessionState.CLOSED:
                line = await self._transport.receive()
                if line is None:
                    logger.info("Transport closed by peer")
                    break
                if not line.strip():
                    continue
                response = await self.handle_line(line)
                if response is None:
                    continue
                await self._transport.send(serialize_message(response))
        finally:
            self.close()

    def close(self) -> None:
        if self.state is SessionState.CLOSED:
            return
        self.state = SessionState.CLOSED
        self._transport.close()
        logger.info("Session closed")

    async def handle_line(self, line: str) -> Optional[JsonDict]:
        try:
            message = parse_message(line)
        except MalformedMessage as exc:
            return make_error(None, PARSE_ERROR, str(exc))
        return await self.handle_message(message)

    async def handle_message(self, message: JsonDict) -> Optional[JsonDict]:
        method = message.get("method")
        request_id = message.get("id")

        # Notifications have no id and produce no response
        if request_id is None:
            if method == "notifications/initialized":
                logger.debug("Client reported initialized")
            else:
                logger.debug("Ignoring notification %s", method)
            return None

        if not isinstance(method, str):
            return make_error(request_id, INVALID_REQUEST, "Invalid request")

        raw_params = message.get("params")
        if raw_params is None:
            params: JsonDict = {}
        elif isinstance(raw_params, dict):
            params = raw_params
        else:
            return make_error(request_id, INVALID_PARAMS, "Invalid params")

        try:
            if method != "initialize" and self.state is not SessionState.READY:
                raise ProtocolViolation(
                    f"{method} is not allowed before initialize", data={"method": method}
                )
            handler = self._methods.get(method)
            if handler is None:
                return make_error(request_id, METHOD_NOT_FOUND, "Method not found", data={"method": method})
            return make_result(request_id, await handler(params))
        except CounterMcpError as exc:
            return error_from_exception(request_id, exc)
        except Exception:
            logger.exception("Unhandled error while processing %s", method)
            return make_error(request_id, INTERNAL_ERROR, "Internal error")

    async def _initialize(self, params: JsonDict) -> JsonDict:
        if self.state is SessionState.READY:
            raise ProtocolViolation("Session is already initialized", data={"method": "initialize"})

        self.protocol_version = negotiate_version(params.get("protocolVersion"))
        client_info = params.get("clientInfo")
        self.client_info = client_info if isinstance(client_info, dict) else None
        self.state = SessionState.READY
        logger.info(
            "Session initialized (protocol %s, client %s)",
            self.protocol_version,
            (self.client_info or {}).get("name", "unknown"),
        )
        result = InitializeResult(
            protocolVersion=self.protocol_version,
            capabilities=self.capabilities,
            serverInfo=Implementation(name=self.server.name, version=self.server.version),
            instructions=self.server.instructions,
        )
        return _dump(result)

    async def _ping(self, _: JsonDict) -> JsonDict:
        return {}

    async def _list_tools(self, _: JsonDict) -> JsonDict:
        # Single page: any cursor is ignored and nextCursor is never set.
        tools = [descriptor.to_tool() for descriptor in self.dispatcher.registry.list_all()]
        return _dump(ListToolsResult(tools=tools))

    async def _call_tool(self, params: JsonDict) -> JsonDict:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidArguments("tool name must be a non-empty string")
        outcome = await self.dispatcher.dispatch(name, params.get("arguments"))
        if outcome.error is not None:
            raise outcome.error
        return _dump(outcome.to_result())
