"""
PostgreSQL Connector

Async PostgreSQL connector using asyncpg.

Features:
- Connection pooling with asyncpg
- Parameterized statement execution with per-call statement timeout
- Field metadata (name, type OID) for read results, even when empty
- Command tag parsing for write statements
- Catalog accessor for the schema cache

Usage:
    connector = PostgresConnector(
        host="localhost",
        port=5432,
        database="mydb",
        user="postgres",
        password="secret"
    )

    await connector.connect()

    result = await connector.execute(
        "SELECT * FROM users WHERE age > $1",
        params=[18]
    )
    tables = await connector.list_tables()

    await connector.close()
"""

import logging
import time
from typing import Any, List, Optional
from urllib.parse import unquote, urlparse

import asyncpg

from pgassist.config import DatabaseSettings
from pgassist.connectors.base import (
    BaseConnector,
    CommandResult,
    ConnectionError,
    FieldInfo,
    QueryError,
    QueryResult,
    SchemaError,
)

logger = logging.getLogger(__name__)

TABLES_QUERY = """
    SELECT table_name
    FROM information_schema.tables
    WHERE table_schema = $1
    AND table_type = 'BASE TABLE'
    ORDER BY table_name
"""

COLUMNS_QUERY = """
    SELECT table_name, column_name
    FROM information_schema.columns
    WHERE table_schema = $1
    ORDER BY table_name, ordinal_position
"""


def parse_command_tag(status: str) -> tuple[str, int | None]:
    """
    Split a PostgreSQL command status into verb and affected row count.

    "INSERT 0 3" -> ("INSERT", 3), "CREATE TABLE" -> ("CREATE TABLE", None)
    """
    parts = (status or "").split()
    if not parts:
        return "", None
    if parts[-1].isdigit():
        return parts[0], int(parts[-1])
    return " ".join(parts), None


class PostgresConnector(BaseConnector):
    """
    PostgreSQL database connector using asyncpg.

    Provides async interface for PostgreSQL with connection pooling,
    statement execution, and catalog reads.
    """

    async def connect(self) -> None:
        """
        Establish connection to PostgreSQL and create connection pool.

        Raises:
            ConnectionError: If connection fails
        """
        if self._connected and self._pool:
            logger.debug("Already connected, skipping connection")
            return

        try:
            logger.info(f"Connecting to PostgreSQL at {self.host}:{self.port}/{self.database}")

            self._pool = await asyncpg.create_pool(
                host=self.host,
                port=self.port,
                database=self.database,
                user=self.user,
                password=self.password,
                min_size=1,
                max_size=self.pool_size,
                command_timeout=self.timeout,
                **self.kwargs,
            )

            # Test connection
            async with self._pool.acquire() as conn:
                version = await conn.fetchval("SELECT version()")
                logger.info(f"Connected to PostgreSQL: {version.split(',')[0]}")

            self._connected = True

        except asyncpg.PostgresError as e:
            logger.error(f"PostgreSQL connection failed: {e}")
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected error during connection: {e}")
            raise ConnectionError(f"Connection error: {e}") from e

    def _ensure_connected(self) -> None:
        if not self._connected or not self._pool:
            raise ConnectionError("Not connected to database. Call connect() first.")

    async def execute(
        self,
        query: str,
        params: Optional[List[Any]] = None,
        timeout: Optional[int] = None,
    ) -> QueryResult:
        """
        Execute a statement that returns rows.

        The statement is prepared so the result fields are known even
        when no rows come back.

        Raises:
            QueryError: If query fails
            ConnectionError: If not connected
        """
        self._ensure_connected()

        start_time = time.perf_counter()
        query_timeout = timeout or self.timeout

        try:
            async with self._pool.acquire() as conn:
                await conn.execute(f"SET statement_timeout = {query_timeout * 1000}")

                statement = await conn.prepare(query)
                rows = await statement.fetch(*(params or []))

                fields = [
                    FieldInfo(name=attribute.name, data_type_id=attribute.type.oid)
                    for attribute in statement.get_attributes()
                ]
                result_rows = [dict(row) for row in rows]

                execution_time_ms = (time.perf_counter() - start_time) * 1000

                logger.debug(
                    f"Query executed in {execution_time_ms:.2f}ms, "
                    f"returned {len(result_rows)} rows"
                )

                return QueryResult(
                    rows=result_rows,
                    row_count=len(result_rows),
                    fields=fields,
                    execution_time_ms=execution_time_ms,
                )

        except asyncpg.QueryCanceledError as e:
            logger.error(f"Query timed out after {query_timeout}s: {query[:100]}...")
            raise QueryError(
                f"Query timeout ({query_timeout}s)", driver_message=str(e), sqlstate=e.sqlstate
            ) from e
        except asyncpg.PostgresError as e:
            logger.error(f"Query failed: {e}\nQuery: {query[:200]}...")
            raise QueryError(
                f"Query execution failed: {e}", driver_message=str(e), sqlstate=e.sqlstate
            ) from e
        except Exception as e:
            logger.error(f"Unexpected error during query execution: {e}")
            raise QueryError(f"Query error: {e}") from e

    async def execute_command(
        self,
        query: str,
        params: Optional[List[Any]] = None,
        timeout: Optional[int] = None,
    ) -> CommandResult:
        """
        Execute a statement for its effect.

        Raises:
            QueryError: If the statement fails
            ConnectionError: If not connected
        """
        self._ensure_connected()

        start_time = time.perf_counter()
        query_timeout = timeout or self.timeout

        try:
            async with self._pool.acquire() as conn:
                await conn.execute(f"SET statement_timeout = {query_timeout * 1000}")
                status = await conn.execute(query, *(params or []))

            command, row_count = parse_command_tag(status)
            execution_time_ms = (time.perf_counter() - start_time) * 1000
            logger.debug(f"Statement {command} completed in {execution_time_ms:.2f}ms")

            return CommandResult(
                command=command,
                row_count=row_count,
                execution_time_ms=execution_time_ms,
            )

        except asyncpg.QueryCanceledError as e:
            logger.error(f"Statement timed out after {query_timeout}s: {query[:100]}...")
            raise QueryError(
                f"Statement timeout ({query_timeout}s)", driver_message=str(e), sqlstate=e.sqlstate
            ) from e
        except asyncpg.PostgresError as e:
            logger.error(f"Statement failed: {e}\nStatement: {query[:200]}...")
            raise QueryError(
                f"Statement execution failed: {e}", driver_message=str(e), sqlstate=e.sqlstate
            ) from e
        except Exception as e:
            logger.error(f"Unexpected error during statement execution: {e}")
            raise QueryError(f"Statement error: {e}") from e

    async def list_tables(self) -> list[str]:
        """
        List base tables in the configured schema, ordered by name.

        Raises:
            SchemaError: If the catalog query fails
        """
        self._ensure_connected()
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(TABLES_QUERY, self.schema_name)
        except asyncpg.PostgresError as e:
            logger.error(f"Table listing failed: {e}")
            raise SchemaError(f"Failed to list tables: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected error during table listing: {e}")
            raise SchemaError(f"Table listing error: {e}") from e
        return [row["table_name"] for row in rows]

    async def list_columns(self) -> list[tuple[str, str]]:
        """
        List (table, column) pairs for the configured schema.

        Raises:
            SchemaError: If the catalog query fails
        """
        self._ensure_connected()
        try:
            async with self._pool.acquire() as conn:
                rows = await conn.fetch(COLUMNS_QUERY, self.schema_name)
        except asyncpg.PostgresError as e:
            logger.error(f"Column listing failed: {e}")
            raise SchemaError(f"Failed to list columns: {e}") from e
        except Exception as e:
            logger.error(f"Unexpected error during column listing: {e}")
            raise SchemaError(f"Column listing error: {e}") from e
        return [(row["table_name"], row["column_name"]) for row in rows]

    async def close(self) -> None:
        """
        Close connection pool and clean up resources.

        Safe to call multiple times.
        """
        if not self._pool:
            logger.debug("No connection pool to close")
            return

        try:
            await self._pool.close()
            self._pool = None
            self._connected = False
            logger.info("PostgreSQL connection closed")
        except Exception as e:
            logger.error(f"Error closing connection: {e}")
            raise ConnectionError(f"Failed to close connection: {e}") from e


def create_connector(settings: DatabaseSettings) -> PostgresConnector:
    """
    Build a PostgresConnector from database settings.

    Raises:
        ConnectionError: If no database URL is configured
    """
    if settings.url is None:
        raise ConnectionError(
            "No database configured. Set DATABASE_URL (or NEON_PG_CONNECTION_STRING)."
        )
    parsed = urlparse(str(settings.url))
    return PostgresConnector(
        host=parsed.hostname or "localhost",
        port=parsed.port or 5432,
        database=parsed.path.lstrip("/") if parsed.path else "postgres",
        user=unquote(parsed.username) if parsed.username else "postgres",
        password=unquote(parsed.password) if parsed.password else "",
        schema_name=settings.schema_name,
        pool_size=settings.pool_size,
        timeout=settings.statement_timeout,
        ssl=settings.ssl,
    )
