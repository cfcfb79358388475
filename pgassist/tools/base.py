"""Tool system base types and the @tool decorator."""

from __future__ import annotations

import inspect
import logging
import types
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Union, get_args, get_origin, get_type_hints

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)
NONE_TYPE = type(None)

_SCALAR_SCHEMAS = {
    bool: {"type": "boolean"},
    int: {"type": "integer"},
    float: {"type": "number"},
    str: {"type": "string"},
}


class ToolCategory(StrEnum):
    QUERY = "query"
    SCHEMA = "schema"


class ToolPolicy(BaseModel):
    enabled: bool = True
    requires_approval: bool = False
    max_execution_time_seconds: int = Field(default=60, ge=1)
    allowed_users: list[str] | None = None


class ToolDefinition(BaseModel):
    name: str
    description: str
    category: ToolCategory
    policy: ToolPolicy
    parameters_schema: dict[str, Any]


class ToolContext(BaseModel):
    """Per-call context. ``metadata["runtime"]`` carries the AssistRuntime."""

    user_id: str = "local"
    correlation_id: str
    approved: bool = False
    metadata: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def log_action(self, action: str, metadata: dict[str, Any]) -> None:
        logger.info(
            "tool_action",
            extra={
                "user_id": self.user_id,
                "correlation_id": self.correlation_id,
                "action": action,
                "metadata": metadata,
            },
        )


def _extract_parameters_schema(func: Callable[..., Any]) -> dict[str, Any]:
    signature = inspect.signature(func)
    type_hints = get_type_hints(func)
    properties: dict[str, Any] = {}
    required: list[str] = []

    for name, param in signature.parameters.items():
        if name == "ctx":
            continue
        param_schema = _annotation_to_json_schema(type_hints.get(name, param.annotation))
        if param.default is inspect.Parameter.empty:
            required.append(name)
        elif param.default is not None:
            param_schema["default"] = param.default
        properties[name] = param_schema

    return {
        "type": "object",
        "properties": properties,
        "required": required,
        "additionalProperties": False,
    }


def _annotation_to_json_schema(annotation: Any) -> dict[str, Any]:
    if annotation is inspect.Parameter.empty or annotation is Any:
        return {}
    if annotation in _SCALAR_SCHEMAS:
        return dict(_SCALAR_SCHEMAS[annotation])

    origin = get_origin(annotation)
    args = get_args(annotation)
    if annotation is list or origin is list:
        return {"type": "array", "items": _annotation_to_json_schema(args[0]) if args else {}}
    if annotation is dict or origin is dict:
        return {"type": "object", "additionalProperties": True}
    if origin in (Union, types.UnionType):
        non_none = [arg for arg in args if arg is not NONE_TYPE]
        if len(non_none) == 1:
            # Optional[X] is X with a null default; callers may omit it.
            return _annotation_to_json_schema(non_none[0])
        return {"anyOf": [_annotation_to_json_schema(arg) for arg in non_none]}
    return {"type": "string"}


def tool(
    name: str,
    description: str,
    category: ToolCategory,
    requires_approval: bool = False,
    **policy_kwargs: Any,
):
    def decorator(func: Callable[..., Any]):
        from pgassist.tools.registry import ToolRegistry

        tool_def = ToolDefinition(
            name=name,
            description=description,
            category=category,
            policy=ToolPolicy(requires_approval=requires_approval, **policy_kwargs),
            parameters_schema=_extract_parameters_schema(func),
        )
        ToolRegistry.register(tool_def, func)
        return func

    return decorator
