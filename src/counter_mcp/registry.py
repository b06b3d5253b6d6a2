from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from mcp.types import Tool

from .shared.errors import ConstructionError, InvalidArguments, NotFound
from .state import StateGuard

JsonDict = Dict[str, Any]
ToolHandler = Callable[[StateGuard[Any]], Awaitable[str]]

EMPTY_OBJECT_SCHEMA: JsonDict = {"type": "object", "properties": {}}


@dataclass(frozen=True)
class ToolDescriptor:
    name: str
    description: str
    handler: ToolHandler
    input_schema: JsonDict

    def to_tool(self) -> Tool:
        return Tool(
            name=self.name,
            description=self.description,
            inputSchema=copy.deepcopy(self.input_schema),
        )


class ToolRegistry:
    """Read-only mapping of tool name to descriptor, in registration order.

    Instances come from ``RegistryBuilder.build()``.
    """

    def __init__(self, descriptors: List[ToolDescriptor], validators: Dict[str, Draft7Validator]) -> None:
        self._ordered: Tuple[ToolDescriptor, ...] = tuple(descriptors)
        self._index: Mapping[str, ToolDescriptor] = MappingProxyType({d.name: d for d in descriptors})
        self._validators: Mapping[str, Draft7Validator] = MappingProxyType(dict(validators))

    def __len__(self) -> int:
        return len(self._ordered)

    def __contains__(self, name: object) -> bool:
        return name in self._index

    def list_all(self) -> Tuple[ToolDescriptor, ...]:
        return self._ordered

    def lookup(self, name: str) -> ToolDescriptor:
        try:
            return self._index[name]
        except KeyError as exc:
            raise NotFound(name) from exc

    def validate_arguments(self, name: str, arguments: Mapping[str, Any]) -> JsonDict:
        validator = self._validators.get(name)
        if validator is None:
            raise NotFound(name)

        errors = sorted(validator.iter_errors(dict(arguments)), key=lambda e: list(e.path))
        if errors:
            first = errors[0]
            path = ".".join(str(p) for p in first.path) or "<root>"
            raise InvalidArguments(f"{path}: {first.message}", data={"name": name})

        return dict(arguments)


class RegistryBuilder:
    def __init__(self) -> None:
        self._descriptors: List[ToolDescriptor] = []
        self._validators: Dict[str, Draft7Validator] = {}
        self._built = False

    def register(
        self,
        name: str,
        description: str,
        handler: ToolHandler,
        input_schema: Optional[JsonDict] = None,
    ) -> "RegistryBuilder":
        if self._built:
            raise ConstructionError("registry is already built; tools cannot be added")
        if not isinstance(name, str) or not name:
            raise ConstructionError("tool name must be a non-empty string")
        if any(d.name == name for d in self._descriptors):
            raise ConstructionError(f"duplicate tool name: {name}", data={"name": name})
        if not callable(handler):
            raise ConstructionError(f"handler for {name} is not callable", data={"name": name})

        schema = copy.deepcopy(input_schema if input_schema is not None else EMPTY_OBJECT_SCHEMA)
        try:
            Draft7Validator.check_schema(schema)
        except SchemaError as exc:
            raise ConstructionError(f"invalid input schema for {name}: {exc.message}", data={"name": name}) from exc

        self._descriptors.append(
            ToolDescriptor(name=name, description=description, handler=handler, input_schema=schema)
        )
        self._validators[name] = Draft7Validator(schema)
        return self

    def build(self) -> ToolRegistry:
        self._built = True
        return ToolRegistry(self._descriptors, self._validators)
