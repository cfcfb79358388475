"""Tool registry for the closed, versioned pg-assist tool set."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import yaml

from pgassist.tools.base import ToolDefinition

logger = logging.getLogger(__name__)

TOOLSET_VERSION = "1.7.0"
TOOL_NAMES = frozenset(
    {"query", "execute", "list_tables", "describe_table", "sample_data", "search_schema"}
)


class ToolRegistry:
    _definitions: dict[str, ToolDefinition] = {}
    _handlers: dict[str, Callable[..., Any]] = {}

    @classmethod
    def register(cls, definition: ToolDefinition, handler: Callable[..., Any]) -> None:
        if definition.name not in TOOL_NAMES:
            raise ValueError(
                f"Tool '{definition.name}' is not part of tool set {TOOLSET_VERSION}"
            )
        cls._definitions[definition.name] = definition
        cls._handlers[definition.name] = handler
        logger.debug(f"Registered tool: {definition.name}")

    @classmethod
    def get_definition(cls, name: str) -> ToolDefinition | None:
        return cls._definitions.get(name)

    @classmethod
    def get_handler(cls, name: str) -> Callable[..., Any] | None:
        return cls._handlers.get(name)

    @classmethod
    def list_definitions(cls) -> list[ToolDefinition]:
        return sorted(cls._definitions.values(), key=lambda definition: definition.name)

    @classmethod
    def load_policy_config(cls, path: str | Path) -> None:
        policy_path = Path(path)
        if not policy_path.exists():
            logger.warning(f"Tool policy file not found: {policy_path}")
            return

        data = yaml.safe_load(policy_path.read_text()) or {}
        for tool_policy in data.get("tools", []):
            name = tool_policy.get("name")
            if not name or name not in cls._definitions:
                logger.warning(f"Ignoring policy for unknown tool: {name}")
                continue
            definition = cls._definitions[name]
            overrides = {
                key: tool_policy[key]
                for key in (
                    "enabled",
                    "requires_approval",
                    "max_execution_time_seconds",
                    "allowed_users",
                )
                if key in tool_policy
            }
            policy = definition.policy.model_copy(update=overrides)
            cls._definitions[name] = definition.model_copy(update={"policy": policy})
            logger.info(f"Loaded policy for tool: {name}")
