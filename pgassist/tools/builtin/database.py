"""Built-in database tools: thin adapters over the query assistance core."""

from __future__ import annotations

import logging
from typing import Any

from pgassist.connectors.base import QueryError, QueryResult
from pgassist.core.classifier import apply_row_cap, ensure_read_only, ensure_write_statement
from pgassist.core.identifiers import assert_safe_identifier, quote_identifier
from pgassist.core.similarity import rank_similar
from pgassist.core.structure import decode_json_value, infer_structure
from pgassist.runtime import AssistRuntime
from pgassist.tools.base import ToolCategory, ToolContext, tool

logger = logging.getLogger(__name__)

JSON_TYPES = {"json", "jsonb"}

DESCRIBE_COLUMNS_QUERY = """
    SELECT column_name, data_type, is_nullable, column_default
    FROM information_schema.columns
    WHERE table_schema = $1 AND table_name = $2
    ORDER BY ordinal_position
"""

PRIMARY_KEYS_QUERY = """
    SELECT kcu.column_name
    FROM information_schema.table_constraints tc
    JOIN information_schema.key_column_usage kcu
        ON tc.constraint_name = kcu.constraint_name
        AND tc.table_schema = kcu.table_schema
    WHERE tc.constraint_type = 'PRIMARY KEY'
    AND tc.table_schema = $1
    AND tc.table_name = $2
    ORDER BY kcu.ordinal_position
"""


def _get_runtime(ctx: ToolContext | None) -> AssistRuntime:
    runtime = ctx.metadata.get("runtime") if ctx else None
    if runtime is None:
        raise ValueError("No database runtime available for this tool call.")
    return runtime


async def _enhanced_error(runtime: AssistRuntime, exc: QueryError, sql: str) -> QueryError:
    message = await runtime.enhancer.enhance(exc, sql)
    return QueryError(message, driver_message=exc.driver_message, sqlstate=exc.sqlstate)


async def _run_enhanced(
    runtime: AssistRuntime, sql: str, params: list[Any] | None = None
) -> QueryResult:
    try:
        return await runtime.connector.execute(sql, params)
    except QueryError as exc:
        raise await _enhanced_error(runtime, exc, sql) from exc


def _qualified_table(runtime: AssistRuntime, table: str) -> str:
    schema = quote_identifier(runtime.connector.schema_name, "schema name")
    return f"{schema}.{quote_identifier(table, 'table name')}"


@tool(
    name="query",
    description=(
        "Run a read-only SQL statement (SELECT, WITH or EXPLAIN) and return the rows. "
        "Statements without a LIMIT are capped at the configured maximum row count."
    ),
    category=ToolCategory.QUERY,
)
async def query(
    sql: str, params: list[Any] | None = None, ctx: ToolContext | None = None
) -> dict[str, Any]:
    classification = ensure_read_only(sql)
    runtime = _get_runtime(ctx)
    max_rows = runtime.query.max_rows
    statement = apply_row_cap(sql, classification, max_rows)

    try:
        result = await runtime.connector.execute(statement, params)
    except QueryError as exc:
        raise await _enhanced_error(runtime, exc, sql) from exc

    response: dict[str, Any] = {
        "row_count": result.row_count,
        "rows": result.rows,
        "fields": [field.model_dump() for field in result.fields],
    }
    if classification.needs_row_cap and result.row_count >= max_rows:
        response["truncated"] = True
        response["warning"] = (
            f"Results truncated at {max_rows} rows. "
            f"Add a LIMIT clause or filters to control the result size."
        )
    return response


@tool(
    name="execute",
    description=(
        "Run a SQL statement that modifies data or schema (INSERT, UPDATE, DELETE, "
        "CREATE, ALTER, DROP, ...). Use the query tool for SELECT statements."
    ),
    category=ToolCategory.QUERY,
)
async def execute(
    sql: str, params: list[Any] | None = None, ctx: ToolContext | None = None
) -> dict[str, Any]:
    classification = ensure_write_statement(sql)
    runtime = _get_runtime(ctx)

    try:
        result = await runtime.connector.execute_command(sql, params)
    except QueryError as exc:
        raise await _enhanced_error(runtime, exc, sql) from exc

    if classification.is_schema_mutating:
        runtime.schema_cache.invalidate()
        logger.info(f"Schema cache invalidated after {result.command}")

    return {
        "command": result.command,
        "row_count": result.row_count,
        "schema_cache_invalidated": classification.is_schema_mutating,
    }


@tool(
    name="list_tables",
    description="List the tables in the default schema.",
    category=ToolCategory.SCHEMA,
)
async def list_tables(ctx: ToolContext | None = None) -> dict[str, Any]:
    runtime = _get_runtime(ctx)
    snapshot = await runtime.schema_cache.get_snapshot()
    return {"tables": list(snapshot.tables), "count": len(snapshot.tables)}


@tool(
    name="describe_table",
    description=(
        "Describe a table: columns, types, nullability, defaults, primary keys, "
        "and the inferred structure of JSON/JSONB columns."
    ),
    category=ToolCategory.SCHEMA,
)
async def describe_table(table: str, ctx: ToolContext | None = None) -> dict[str, Any]:
    assert_safe_identifier(table, "table name")
    runtime = _get_runtime(ctx)
    schema_name = runtime.connector.schema_name

    columns = await _run_enhanced(runtime, DESCRIBE_COLUMNS_QUERY, [schema_name, table])
    if not columns.rows:
        snapshot = await runtime.schema_cache.get_snapshot()
        suggestions = rank_similar(table, snapshot.tables)
        message = f'Table "{table}" not found in schema "{schema_name}".'
        if suggestions:
            message += f" Did you mean: {', '.join(suggestions)}?"
        raise ValueError(message)

    primary_keys = await _run_enhanced(runtime, PRIMARY_KEYS_QUERY, [schema_name, table])

    json_structures: dict[str, Any] = {}
    for column in columns.rows:
        if column["data_type"] in JSON_TYPES:
            json_structures[column["column_name"]] = await _describe_json_column(
                runtime, table, column["column_name"], column["data_type"]
            )

    response: dict[str, Any] = {
        "table": table,
        "schema": schema_name,
        "columns": columns.rows,
        "primary_keys": [row["column_name"] for row in primary_keys.rows],
    }
    if json_structures:
        response["json_structures"] = json_structures
    return response


async def _describe_json_column(
    runtime: AssistRuntime, table: str, column: str, data_type: str
) -> dict[str, Any]:
    """Sample one non-null value and, for jsonb, the distinct top-level keys."""
    quoted_column = quote_identifier(column, "column name")
    source = _qualified_table(runtime, table)
    settings = runtime.query

    sample = await _run_enhanced(
        runtime,
        f"SELECT {quoted_column} AS value FROM {source} "
        f"WHERE {quoted_column} IS NOT NULL LIMIT 1",
    )
    description: dict[str, Any] = {"type": data_type, "structure": None}
    if sample.rows:
        value = decode_json_value(sample.rows[0]["value"])
        description["structure"] = infer_structure(
            value, max_depth=settings.structure_max_depth
        ).describe()

    if data_type == "jsonb":
        keys = await _run_enhanced(
            runtime,
            f"SELECT DISTINCT jsonb_object_keys({quoted_column}) AS key FROM {source} "
            f"WHERE jsonb_typeof({quoted_column}) = 'object' "
            f"ORDER BY 1 LIMIT {settings.json_key_probe_limit}",
        )
        description["top_level_keys"] = [row["key"] for row in keys.rows]
    return description


@tool(
    name="sample_data",
    description=(
        "Return a few rows from a table to show what its data looks like. "
        "Use the query tool for filtered results."
    ),
    category=ToolCategory.SCHEMA,
)
async def sample_data(
    table: str, limit: int | None = None, ctx: ToolContext | None = None
) -> dict[str, Any]:
    assert_safe_identifier(table, "table name")
    runtime = _get_runtime(ctx)
    settings = runtime.query
    requested = settings.sample_default_rows if limit is None else limit
    bounded_limit = max(1, min(int(requested), settings.sample_max_rows))

    sql = f"SELECT * FROM {_qualified_table(runtime, table)} LIMIT {bounded_limit}"
    try:
        result = await runtime.connector.execute(sql)
    except QueryError as exc:
        raise await _enhanced_error(runtime, exc, sql) from exc

    return {
        "table": table,
        "columns": result.columns,
        "rows": result.rows,
        "row_count": result.row_count,
        "limit": bounded_limit,
    }


@tool(
    name="search_schema",
    description=(
        "Find tables and columns whose names contain a search term. "
        "Suggests similar names when nothing matches."
    ),
    category=ToolCategory.SCHEMA,
)
async def search_schema(term: str, ctx: ToolContext | None = None) -> dict[str, Any]:
    needle = term.strip().lower()
    if not needle:
        raise ValueError("Search term must not be empty.")
    runtime = _get_runtime(ctx)
    snapshot = await runtime.schema_cache.get_snapshot()

    tables = [name for name in snapshot.tables if needle in name.lower()]
    columns = [
        {"table": table, "column": column}
        for table, column in snapshot.columns
        if needle in column.lower()
    ]
    response: dict[str, Any] = {"term": term, "tables": tables, "columns": columns}
    if not tables and not columns:
        names = list(dict.fromkeys([*snapshot.tables, *snapshot.column_names()]))
        response["suggestions"] = rank_similar(needle, names)
    return response
