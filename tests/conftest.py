"""
Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import logging
from unittest.mock import AsyncMock

import pytest

from pgassist.config import QuerySettings, clear_settings_cache
from pgassist.connectors.base import CommandResult, FieldInfo, QueryResult
from pgassist.runtime import AssistRuntime
from pgassist.tools import initialize_tools
from pgassist.tools.base import ToolContext

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Run integration tests (requires a live PostgreSQL database)",
    )


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (requires a database)"
    )
    config.addinivalue_line("markers", "unit: mark test as unit test (default)")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless explicitly enabled."""
    if config.getoption("--run-integration"):
        return
    skip_integration = pytest.mark.skip(
        reason="Integration tests disabled (use --run-integration to enable)."
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


# ============================================================================
# Logging and Environment
# ============================================================================


@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """Capture logs at DEBUG for every test."""
    caplog.set_level(logging.DEBUG)
    yield


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, request):
    """Keep .env files and cached settings from leaking between tests."""
    if "integration" in request.keywords:
        clear_settings_cache()
        yield
        clear_settings_cache()
        return
    monkeypatch.setenv("PG_ASSIST_ENV_SOURCE", "environment")
    for name in ("DATABASE_URL", "NEON_PG_CONNECTION_STRING"):
        monkeypatch.delenv(name, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


# ============================================================================
# Database Fakes
# ============================================================================

SCHEMA_TABLES = ["orders", "products", "users"]
SCHEMA_COLUMNS = [
    ("orders", "id"),
    ("orders", "user_id"),
    ("orders", "total"),
    ("products", "id"),
    ("products", "title"),
    ("products", "attributes"),
    ("users", "id"),
    ("users", "name"),
    ("users", "email"),
]


def make_result(rows: list[dict], fields: list[str] | None = None) -> QueryResult:
    names = fields if fields is not None else (list(rows[0].keys()) if rows else [])
    return QueryResult(
        rows=rows,
        row_count=len(rows),
        fields=[FieldInfo(name=name, data_type_id=25) for name in names],
        execution_time_ms=1.0,
    )


@pytest.fixture
def mock_connector():
    """Connector double with a small three-table catalog."""
    connector = AsyncMock()
    connector.schema_name = "public"
    connector.list_tables = AsyncMock(return_value=list(SCHEMA_TABLES))
    connector.list_columns = AsyncMock(return_value=list(SCHEMA_COLUMNS))
    connector.execute = AsyncMock(return_value=make_result([]))
    connector.execute_command = AsyncMock(
        return_value=CommandResult(command="INSERT", row_count=1, execution_time_ms=1.0)
    )
    return connector


@pytest.fixture
def runtime(mock_connector):
    """Runtime wired to the connector double with small limits."""
    return AssistRuntime.create(
        mock_connector,
        ttl_seconds=300,
        query=QuerySettings(max_rows=3, sample_default_rows=2, sample_max_rows=5),
    )


@pytest.fixture
def tool_context(runtime):
    """ToolContext carrying the test runtime."""
    initialize_tools()
    return ToolContext(correlation_id="test", metadata={"runtime": runtime})


@pytest.fixture
def result_factory():
    """Build QueryResult objects from row dicts."""
    return make_result
