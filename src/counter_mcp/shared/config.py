from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

SERVER_NAME = "counter-mcp"
SERVER_VERSION = "0.1.0"
DEFAULT_INSTRUCTIONS = (
    "This server provides counter tools that can increment, decrement, and retrieve "
    "the current value of a counter. Use the 'increment', 'decrement', and "
    "'get_counter' tools to interact with the counter."
)
OVERFLOW_POLICIES = ("unbounded", "wrap", "saturate", "error")


@dataclass(frozen=True)
class ServerConfig:
    name: str = SERVER_NAME
    version: str = SERVER_VERSION
    instructions: str | None = DEFAULT_INSTRUCTIONS


@dataclass(frozen=True)
class CounterConfig:
    overflow: str = "unbounded"
    bits: int = 32

    def __post_init__(self) -> None:
        if self.overflow not in OVERFLOW_POLICIES:
            raise ValueError(
                f"overflow must be one of {', '.join(OVERFLOW_POLICIES)}, got {self.overflow!r}"
            )
        if self.bits < 2:
            raise ValueError(f"bits must be >= 2, got {self.bits}")


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    file: str | None = None


@dataclass(frozen=True)
class AppConfig:
    server: ServerConfig = field(default_factory=ServerConfig)
    counter: CounterConfig = field(default_factory=CounterConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _load_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Build the process-wide configuration.

    Without a path the defaults are returned. A JSON file may override any of
    the ``server``, ``counter`` and ``logging`` sections; unknown keys are ignored.
    """
    if path is None:
        return AppConfig()

    raw = _load_json(Path(path))
    server_raw = raw.get("server", {})
    counter_raw = raw.get("counter", {})
    logging_raw = raw.get("logging", {})
    return AppConfig(
        server=ServerConfig(
            name=str(server_raw.get("name", SERVER_NAME)),
            version=str(server_raw.get("version", SERVER_VERSION)),
            instructions=server_raw.get("instructions", DEFAULT_INSTRUCTIONS),
        ),
        counter=CounterConfig(
            overflow=str(counter_raw.get("overflow", "unbounded")),
            bits=int(counter_raw.get("bits", 32)),
        ),
        logging=LoggingConfig(
            level=str(logging_raw.get("level", "INFO")),
            file=logging_raw.get("file"),
        ),
    )
