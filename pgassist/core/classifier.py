"""
Query classification and entry-point guards.

Keyword-prefix rules only: no parsing. The text is trimmed and
lower-cased for detection; the original text is what gets executed.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

from pgassist.core.errors import InvalidQueryKindError

SCHEMA_MUTATING_KEYWORDS = frozenset({"create", "alter", "drop", "truncate", "rename"})

_FIRST_KEYWORD = re.compile(r"[a-z_]+")
_LIMIT_CLAUSE = re.compile(r"\blimit\b|\bfetch\s+(?:first|next)\b")
# Statement terminator followed only by comments and whitespace.
_TRAILING_TERMINATOR = re.compile(r";[;\s]*(?:(?:--[^\n]*|/\*.*?\*/)[;\s]*)*\Z", re.DOTALL)


class QueryKind(StrEnum):
    READ = "read"
    WRITE = "write"
    EXPLAIN = "explain"


@dataclass(frozen=True)
class QueryClassification:
    kind: QueryKind
    has_explicit_limit: bool
    is_schema_mutating: bool
    first_keyword: str = ""

    @property
    def needs_row_cap(self) -> bool:
        """Read statements without their own limit get the default cap."""
        return self.kind == QueryKind.READ and not self.has_explicit_limit


def normalize(sql: str) -> str:
    return sql.strip().lower()


def classify(sql: str) -> QueryClassification:
    normalized = normalize(sql)
    match = _FIRST_KEYWORD.match(normalized)
    first_keyword = match.group(0) if match else ""

    if normalized.startswith("explain"):
        kind = QueryKind.EXPLAIN
    elif normalized.startswith("select") or normalized.startswith("with"):
        kind = QueryKind.READ
    else:
        kind = QueryKind.WRITE

    return QueryClassification(
        kind=kind,
        has_explicit_limit=_LIMIT_CLAUSE.search(normalized) is not None,
        is_schema_mutating=first_keyword in SCHEMA_MUTATING_KEYWORDS,
        first_keyword=first_keyword,
    )


def ensure_read_only(sql: str) -> QueryClassification:
    """
    Raises:
        InvalidQueryKindError: If the statement is not SELECT, WITH or EXPLAIN
    """
    classification = classify(sql)
    if classification.kind == QueryKind.WRITE:
        raise InvalidQueryKindError(
            "Query must be a SELECT, WITH or EXPLAIN statement. "
            "Use the execute tool for statements that modify data or schema.",
            kind=classification.kind,
            expected_tool="execute",
        )
    return classification


def ensure_write_statement(sql: str) -> QueryClassification:
    """
    Raises:
        InvalidQueryKindError: If the statement is a read or EXPLAIN
    """
    classification = classify(sql)
    if classification.kind != QueryKind.WRITE:
        raise InvalidQueryKindError(
            f"Execute should not be used for {classification.first_keyword.upper()} "
            f"statements. Use the query tool instead.",
            kind=classification.kind,
            expected_tool="query",
        )
    return classification


def apply_row_cap(sql: str, classification: QueryClassification, max_rows: int) -> str:
    """Append ``LIMIT max_rows`` to uncapped reads; other statements pass through unchanged."""
    if not classification.needs_row_cap:
        return sql
    terminator = _TRAILING_TERMINATOR.search(sql)
    stripped = (sql[: terminator.start()] if terminator else sql).rstrip()
    # New line so a trailing "-- comment" cannot swallow the clause.
    return f"{stripped}\nLIMIT {int(max_rows)}"
