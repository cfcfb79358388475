"""
Error Enhancer

Turns "column does not exist" and "relation does not exist" driver
errors into actionable messages by suggesting close names from the
schema cache. Any other error is returned untouched.

Usage:
    enhancer = ErrorEnhancer(schema_cache)
    try:
        await connector.execute(sql)
    except QueryError as exc:
        message = await enhancer.enhance(exc, sql)
"""

from __future__ import annotations

import logging
import re

from pgassist.core.schema_cache import SchemaCache, SchemaSnapshot
from pgassist.core.similarity import rank_similar

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5
TABLE_PREVIEW_LIMIT = 20

_QUALIFIED_NAME = r'"?(?:\w+"?\."?)?(\w+)"?'
# UPDATE and INSERT targets report `column "x" of relation "t" does not exist`.
COLUMN_MISSING = re.compile(
    rf'column\s+{_QUALIFIED_NAME}(?:\s+of\s+relation\s+"?(\w+)"?)?\s+does\s+not\s+exist',
    re.IGNORECASE,
)
RELATION_MISSING = re.compile(
    rf"relation\s+{_QUALIFIED_NAME}\s+does\s+not\s+exist", re.IGNORECASE
)
# Best effort: first FROM/UPDATE target in the statement, schema prefix dropped.
TABLE_REFERENCE = re.compile(r'\b(?:from|update)\s+(?:"?\w+"?\.)?"?(\w+)"?', re.IGNORECASE)


def extract_table_name(sql: str) -> str | None:
    """Guess the table a statement reads or updates. Not a SQL parser."""
    match = TABLE_REFERENCE.search(sql or "")
    return match.group(1) if match else None


def _error_text(error: BaseException | str) -> tuple[str, str]:
    """Return (message shown to the caller, text matched against)."""
    message = str(error)
    driver_message = getattr(error, "driver_message", None) or message
    return message, driver_message


def _format_suggestions(suggestions: list[str], kind: str) -> str:
    if not suggestions:
        return f"No similar {kind} names found."
    return f"Did you mean: {', '.join(suggestions)}?"


class ErrorEnhancer:
    """Explain unknown-column and unknown-table errors using cached schema names."""

    def __init__(self, schema_cache: SchemaCache, max_suggestions: int = MAX_SUGGESTIONS):
        self.schema_cache = schema_cache
        self.max_suggestions = max_suggestions

    async def enhance(self, error: BaseException | str, sql: str = "") -> str:
        """
        Build a human-readable message for a failed statement.

        Never raises: if the schema cannot be consulted the original
        message is returned.
        """
        message, driver_message = _error_text(error)

        column_match = COLUMN_MISSING.search(driver_message)
        # "column ... of relation ..." also contains the relation shape
        relation_match = None if column_match else RELATION_MISSING.search(driver_message)
        if not column_match and not relation_match:
            return message

        try:
            snapshot = await self.schema_cache.get_snapshot()
            if column_match:
                hint = self._column_hint(
                    column_match.group(1), sql, snapshot, relation=column_match.group(2)
                )
            else:
                hint = self._relation_hint(relation_match.group(1), snapshot)
        except Exception as exc:
            logger.debug(f"Error enhancement skipped: {exc}")
            return message

        return f"{message}\n\n{hint}"

    def _column_hint(
        self, column: str, sql: str, snapshot: SchemaSnapshot, relation: str | None = None
    ) -> str:
        table = relation or extract_table_name(sql)
        table_columns = snapshot.columns_for(table) if table else []

        if table_columns:
            suggestions = rank_similar(column, table_columns, limit=self.max_suggestions)
            return "\n".join(
                [
                    f'Column "{column}" does not exist in table "{table}".',
                    _format_suggestions(suggestions, "column"),
                    f'Available columns in "{table}": {", ".join(table_columns)}',
                ]
            )

        suggestions = rank_similar(column, snapshot.column_names(), limit=self.max_suggestions)
        return "\n".join(
            [
                f'Column "{column}" does not exist.',
                _format_suggestions(suggestions, "column"),
            ]
        )

    def _relation_hint(self, relation: str, snapshot: SchemaSnapshot) -> str:
        suggestions = rank_similar(relation, snapshot.tables, limit=self.max_suggestions)
        preview = list(snapshot.tables[:TABLE_PREVIEW_LIMIT])
        listing = ", ".join(preview) if preview else "(none)"
        remaining = len(snapshot.tables) - len(preview)
        if remaining > 0:
            listing += f", ... ({remaining} more)"
        return "\n".join(
            [
                f'Table "{relation}" does not exist.',
                _format_suggestions(suggestions, "table"),
                f"Available tables: {listing}",
            ]
        )
