"""
Database Connectors Module

Provides the async PostgreSQL connector the tools execute through.

Usage:
    from pgassist.connectors import PostgresConnector

    connector = PostgresConnector(
        host="localhost",
        port=5432,
        database="mydb",
        user="postgres",
        password="secret"
    )

    async with connector:
        result = await connector.execute("SELECT * FROM users")
        tables = await connector.list_tables()
"""

from pgassist.connectors.base import (
    BaseConnector,
    CommandResult,
    ConnectionError,
    ConnectorError,
    FieldInfo,
    QueryError,
    QueryResult,
    SchemaError,
)
from pgassist.connectors.postgres import PostgresConnector, create_connector

__all__ = [
    "BaseConnector",
    "PostgresConnector",
    "create_connector",
    "FieldInfo",
    "QueryResult",
    "CommandResult",
    "ConnectorError",
    "ConnectionError",
    "QueryError",
    "SchemaError",
]
