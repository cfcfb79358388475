"""
Structure inference for JSON column values.

Summarizes the shape of one decoded JSON value (nesting, arrays, leaf
types) to a bounded depth. Arrays are described by their first element
only, so the result is a sample, not a schema.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

DEFAULT_MAX_DEPTH = 5


class StructureNode:
    """Base class for inferred shapes."""

    def describe(self) -> Any:
        """JSON-friendly rendering of the shape."""
        raise NotImplementedError


@dataclass(frozen=True)
class NullNode(StructureNode):
    def describe(self) -> Any:
        return "null"


@dataclass(frozen=True)
class PrimitiveNode(StructureNode):
    type_name: str

    def describe(self) -> Any:
        return self.type_name


@dataclass(frozen=True)
class EmptyArrayNode(StructureNode):
    def describe(self) -> Any:
        return []


@dataclass(frozen=True)
class ArrayNode(StructureNode):
    element: StructureNode

    def describe(self) -> Any:
        return [self.element.describe()]


@dataclass(frozen=True)
class ObjectNode(StructureNode):
    fields: dict[str, StructureNode] = field(default_factory=dict)

    def describe(self) -> Any:
        return {key: node.describe() for key, node in self.fields.items()}


@dataclass(frozen=True)
class TruncatedNode(StructureNode):
    def describe(self) -> Any:
        return "..."


def primitive_type_name(value: Any) -> str:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


def infer_structure(
    value: Any, max_depth: int = DEFAULT_MAX_DEPTH, depth: int = 0
) -> StructureNode:
    """
    Infer the shape of a decoded JSON value.

    Only ``dict`` and ``list`` are treated as containers. Past
    ``max_depth`` a TruncatedNode is returned whatever the value is.
    """
    if depth >= max_depth:
        return TruncatedNode()
    if value is None:
        return NullNode()
    if isinstance(value, list):
        if not value:
            return EmptyArrayNode()
        return ArrayNode(infer_structure(value[0], max_depth, depth + 1))
    if isinstance(value, dict):
        return ObjectNode(
            {str(key): infer_structure(item, max_depth, depth + 1) for key, item in value.items()}
        )
    return PrimitiveNode(primitive_type_name(value))


def decode_json_value(raw: Any) -> Any:
    """
    Decode a value read from a json/jsonb column.

    asyncpg returns json and jsonb as text unless a codec is installed;
    values that are already decoded pass through.
    """
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        return json.loads(raw)
    return raw
