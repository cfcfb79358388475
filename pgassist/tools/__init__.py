"""Tool system entrypoint."""

from __future__ import annotations

from pathlib import Path

from pgassist.tools.executor import ToolExecutionError, ToolExecutor
from pgassist.tools.policy import PolicyEngine, ToolPolicyError
from pgassist.tools.registry import TOOL_NAMES, TOOLSET_VERSION, ToolRegistry


def initialize_tools(policy_path: str | Path | None = None) -> None:
    # Register built-in tools
    from pgassist.tools.builtin import database  # noqa: F401

    if policy_path:
        ToolRegistry.load_policy_config(policy_path)


__all__ = [
    "ToolExecutor",
    "ToolExecutionError",
    "PolicyEngine",
    "ToolPolicyError",
    "ToolRegistry",
    "TOOL_NAMES",
    "TOOLSET_VERSION",
    "initialize_tools",
]
