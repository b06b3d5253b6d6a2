import json
from typing import Any, Dict, Optional

from .shared.errors import CounterMcpError

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")


class MalformedMessage(Exception):
    """Raised when a line cannot be parsed into a JSON-RPC message."""


def parse_message(line: str) -> Dict[str, Any]:
    """Decode one inbound line into a JSON-RPC 2.0 message object."""
    try:
        message = json.loads(line)
    except json.JSONDecodeError as exc:
        raise MalformedMessage(f"Invalid JSON at column {exc.colno}") from exc
    if not isinstance(message, dict):
        raise MalformedMessage(f"Expected a JSON object, got {type(message).__name__}")
    if message.get("jsonrpc") != JSONRPC_VERSION:
        raise MalformedMessage("Invalid or missing jsonrpc version")
    return message


def serialize_message(message: Dict[str, Any]) -> str:
    """Encode an outbound message as one compact line of pure ASCII.

    Undecodable input bytes reach us as lone surrogates; escaping them keeps
    the output valid UTF-8 whatever the client sent.
    """
    return json.dumps(message, separators=(",", ":")) + "\n"


def negotiate_version(requested: Any) -> str:
    if isinstance(requested, str) and requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return PROTOCOL_VERSION


def _envelope(request_id: Any, **body: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": request_id, **body}


def make_result(request_id: Any, result: Any) -> Dict[str, Any]:
    return _envelope(request_id, result=result)


def make_error(
    request_id: Any, code: int, message: str, data: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    error: Dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return _envelope(request_id, error=error)


def error_from_exception(request_id: Any, exc: CounterMcpError) -> Dict[str, Any]:
    return make_error(request_id, exc.rpc_code, exc.message, data={"kind": exc.code, **exc.data})
