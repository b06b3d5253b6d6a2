from __future__ import annotations

from typing import Any

# JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_NOT_INITIALIZED = -32002


class CounterMcpError(Exception):
    code = "counter_mcp_error"
    rpc_code = INTERNAL_ERROR

    def __init__(self, message: str, data: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.data = data or {}


class ProtocolViolation(CounterMcpError):
    """A request arrived in a session state that does not permit it."""

    code = "protocol_violation"
    rpc_code = SERVER_NOT_INITIALIZED


class NotFound(CounterMcpError):
    code = "not_found"
    rpc_code = INVALID_PARAMS

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}", data={"name": name})
        self.name = name


class InvalidArguments(CounterMcpError):
    code = "invalid_arguments"
    rpc_code = INVALID_PARAMS


class HandlerError(CounterMcpError):
    """Failure reported by a tool's own logic, forwarded to the client as-is."""

    code = "handler_error"

    def __init__(
        self, message: str, rpc_code: int | None = None, data: dict[str, Any] | None = None
    ) -> None:
        super().__init__(message, data=data)
        if rpc_code is not None:
            self.rpc_code = rpc_code


class CounterOverflow(HandlerError):
    code = "counter_overflow"


class GuardReentryError(CounterMcpError):
    code = "guard_reentry"


class TransportFailure(CounterMcpError):
    code = "transport_failure"


class ConstructionError(CounterMcpError):
    code = "construction_error"
