"""MCP stdio server exposing a shared counter through increment/decrement/get_counter tools."""

from .dispatcher import CallResult, Dispatcher
from .protocol import PROTOCOL_VERSION, make_error, make_result, parse_message, serialize_message
from .registry import RegistryBuilder, ToolDescriptor, ToolRegistry
from .server import CounterServer
from .session import ServerSession, SessionState
from .shared.config import SERVER_VERSION as __version__
from .state import Counter, StateGuard
from .tools import build_registry

__all__ = [
    "PROTOCOL_VERSION",
    "CallResult",
    "Counter",
    "CounterServer",
    "Dispatcher",
    "RegistryBuilder",
    "ServerSession",
    "SessionState",
    "StateGuard",
    "ToolDescriptor",
    "ToolRegistry",
    "__version__",
    "build_registry",
    "make_error",
    "make_result",
    "parse_message",
    "serialize_message",
]
