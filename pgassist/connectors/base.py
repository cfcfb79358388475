"""
Base Database Connector

Abstract base class for database connectors. Provides a consistent
async interface for connecting to, querying, and reading the catalog.

All connectors must implement:
- connect(): Establish connection with connection pooling
- execute(): Run read statements, returning rows and field metadata
- execute_command(): Run write statements, returning the command tag
- list_tables() / list_columns(): Catalog accessor used by the schema cache
- close(): Clean up connections and pools
"""

import logging
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


# ============================================================================
# Data Models
# ============================================================================


class FieldInfo(BaseModel):
    """A result column as reported by the driver."""

    name: str = Field(..., description="Column label")
    data_type_id: int | None = Field(None, description="PostgreSQL type OID")


class QueryResult(BaseModel):
    """Result from a read statement."""

    rows: list[dict[str, Any]] = Field(..., description="Query result rows")
    row_count: int = Field(..., description="Number of rows returned")
    fields: list[FieldInfo] = Field(default_factory=list, description="Result columns")
    execution_time_ms: float = Field(..., description="Query execution time in ms")

    @property
    def columns(self) -> list[str]:
        """Column names in result order."""
        return [field.name for field in self.fields]


class CommandResult(BaseModel):
    """Result from a write statement."""

    command: str = Field(..., description="Command tag (INSERT, UPDATE, CREATE, ...)")
    row_count: int | None = Field(None, description="Rows affected, when reported")
    execution_time_ms: float = Field(..., description="Execution time in ms")


class ConnectorError(Exception):
    """Base exception for connector errors."""

    pass


class ConnectionError(ConnectorError):
    """Error establishing or managing database connection."""

    pass


class QueryError(ConnectorError):
    """
    Error executing a statement.

    Keeps the driver's own message and SQLSTATE so callers can
    diagnose the failure without parsing the wrapped text.
    """

    def __init__(
        self,
        message: str,
        driver_message: str | None = None,
        sqlstate: str | None = None,
    ):
        super().__init__(message)
        self.driver_message = driver_message or message
        self.sqlstate = sqlstate


class SchemaError(ConnectorError):
    """Error reading the database catalog."""

    pass


# ============================================================================
# Base Connector
# ============================================================================


class BaseConnector(ABC):
    """
    Abstract base class for database connectors.

    Usage:
        connector = PostgresConnector(host="localhost", ...)
        await connector.connect()

        result = await connector.execute("SELECT * FROM users WHERE id = $1", [123])
        print(f"Found {result.row_count} rows")

        status = await connector.execute_command("DELETE FROM users WHERE id = $1", [123])
        print(status.command, status.row_count)

        await connector.close()
    """

    def __init__(
        self,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        schema_name: str = "public",
        pool_size: int = 10,
        timeout: int = 30,
        **kwargs,
    ):
        """
        Initialize connector.

        Args:
            host: Database host
            port: Database port
            database: Database name
            user: Database user
            password: Database password
            schema_name: Schema read by the catalog accessor (default: public)
            pool_size: Connection pool size (default: 10)
            timeout: Statement timeout in seconds (default: 30)
            **kwargs: Additional connector-specific parameters
        """
        self.host = host
        self.port = port
        self.database = database
        self.user = user
        self.password = password
        self.schema_name = schema_name
        self.pool_size = pool_size
        self.timeout = timeout
        self.kwargs = kwargs

        self._pool = None
        self._connected = False

        logger.info(f"Initialized {self.__class__.__name__} for {user}@{host}:{port}/{database}")

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish database connection and create connection pool.

        Idempotent: calling multiple times does not create multiple pools.

        Raises:
            ConnectionError: If connection fails
        """
        pass

    @abstractmethod
    async def execute(
        self,
        query: str,
        params: list[Any] | None = None,
        timeout: int | None = None,
    ) -> QueryResult:
        """
        Execute a statement that returns rows.

        Args:
            query: SQL text (use $1, $2 for parameters)
            params: Query parameters (optional)
            timeout: Statement timeout in seconds (overrides default)

        Raises:
            QueryError: If execution fails
            ConnectionError: If not connected
        """
        pass

    @abstractmethod
    async def execute_command(
        self,
        query: str,
        params: list[Any] | None = None,
        timeout: int | None = None,
    ) -> CommandResult:
        """
        Execute a statement for its effect and report the command tag.

        Raises:
            QueryError: If execution fails
            ConnectionError: If not connected
        """
        pass

    @abstractmethod
    async def list_tables(self) -> list[str]:
        """
        List base table names in the configured schema.

        Raises:
            SchemaError: If the catalog cannot be read
        """
        pass

    @abstractmethod
    async def list_columns(self) -> list[tuple[str, str]]:
        """
        List (table, column) pairs for every column in the configured schema.

        Raises:
            SchemaError: If the catalog cannot be read
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close connections. Safe to call multiple times."""
        pass

    @property
    def is_connected(self) -> bool:
        """Check if connector is connected."""
        return self._connected

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
        return False

    def __repr__(self) -> str:
        """String representation."""
        status = "connected" if self._connected else "disconnected"
        return f"<{self.__class__.__name__} {self.user}@{self.host}:{self.port}/{self.database} ({status})>"
