"""
pg-assist CLI

Command-line interface for running the database tools in-process.

Usage:
    pgassist status                                    # Configuration and connectivity
    pgassist tools list                                # List available tools
    pgassist tools run query --args '{"sql": "SELECT 1"}'
    pgassist tools run execute --args '{"sql": "DELETE FROM t"}' --approve
"""

import asyncio
import json
import logging
import sys
import uuid
from typing import Any
from urllib.parse import urlparse

import click
from rich.console import Console
from rich.table import Table

from pgassist.config import get_settings
from pgassist.runtime import AssistRuntime
from pgassist.tools import TOOLSET_VERSION, ToolExecutor, ToolRegistry, initialize_tools
from pgassist.tools.base import ToolContext

console = Console()


def configure_cli_logging() -> None:
    logging.basicConfig(level=logging.WARNING)
    logging.getLogger("pgassist").setLevel(logging.WARNING)


def _format_parameters(schema: dict[str, Any]) -> str:
    required = set(schema.get("required", []))
    return ", ".join(
        name if name in required else f"{name}?" for name in schema.get("properties", {})
    )


def _parse_args(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise click.BadParameter(f"Arguments must be JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise click.BadParameter("Arguments must be a JSON object.")
    return value


async def run_tool_call(
    name: str,
    args: dict[str, Any],
    approved: bool = False,
    runtime: AssistRuntime | None = None,
) -> dict[str, Any]:
    """Run one tool against a freshly started runtime and close it afterwards."""
    settings = get_settings()
    initialize_tools(settings.tools.policy_path)
    runtime = runtime or AssistRuntime.from_settings(settings)
    ctx = ToolContext(
        correlation_id=str(uuid.uuid4()),
        approved=approved,
        metadata={"runtime": runtime},
    )
    async with runtime:
        return await ToolExecutor().execute(name, args, ctx)


# ============================================================================
# CLI Commands
# ============================================================================


@click.group()
@click.version_option(version=TOOLSET_VERSION, prog_name="pg-assist")
def cli():
    """pg-assist - schema-aware PostgreSQL tools."""
    configure_cli_logging()


@cli.command()
def status():
    """Show configuration and connectivity status."""

    async def check_database(runtime: AssistRuntime) -> int:
        async with runtime:
            snapshot = await runtime.schema_cache.get_snapshot()
            return len(snapshot.tables)

    settings = get_settings()
    table = Table(title="pg-assist Status", show_header=True, header_style="bold cyan")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Details")

    table.add_row("Configuration", "ok", f"Environment: {settings.environment}")
    table.add_row(
        "Limits",
        "ok",
        f"max_rows={settings.query.max_rows}, cache_ttl={settings.schema_cache.ttl_seconds}s",
    )

    if settings.database.url is None:
        table.add_row("Database", "missing", "DATABASE_URL not set")
    else:
        parsed = urlparse(str(settings.database.url))
        target = f"{parsed.hostname}:{parsed.port or 5432}{parsed.path}"
        try:
            count = asyncio.run(check_database(AssistRuntime.from_settings(settings)))
            table.add_row("Database", "ok", f"{target} ({count} tables)")
        except Exception as exc:
            table.add_row("Database", "error", f"{target}: {str(exc)[:80]}")

    console.print(table)


@cli.group(name="tools")
def tools():
    """List and run tools."""
    pass


@tools.command(name="list")
def list_tools():
    """List available tools."""
    initialize_tools(get_settings().tools.policy_path)
    table = Table(
        title=f"Tools (v{TOOLSET_VERSION})", show_header=True, header_style="bold cyan"
    )
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Approval")
    table.add_column("Enabled")
    table.add_column("Parameters")
    for definition in ToolRegistry.list_definitions():
        table.add_row(
            definition.name,
            definition.category.value,
            "yes" if definition.policy.requires_approval else "no",
            "yes" if definition.policy.enabled else "no",
            _format_parameters(definition.parameters_schema),
        )
    console.print(table)


@tools.command(name="run")
@click.argument("name")
@click.option("--args", "raw_args", help="Tool arguments as a JSON object.")
@click.option("--approve", is_flag=True, help="Approve tool execution.")
def run_tool(name: str, raw_args: str | None, approve: bool):
    """Run a tool in-process and print its JSON result."""
    args = _parse_args(raw_args)
    try:
        result = asyncio.run(run_tool_call(name, args, approved=approve))
    except Exception as exc:
        console.print(f"[red]Tool execution failed: {exc}[/red]")
        sys.exit(1)
    click.echo(json.dumps(result, indent=2, default=str))


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
