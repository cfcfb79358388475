"""Validation for names interpolated directly into SQL text."""

from __future__ import annotations

import re

from pgassist.core.errors import InvalidIdentifierError

SAFE_IDENTIFIER = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def is_safe_identifier(value: object) -> bool:
    return isinstance(value, str) and SAFE_IDENTIFIER.fullmatch(value) is not None


def assert_safe_identifier(value: str, label: str = "identifier") -> str:
    """
    Return ``value`` unchanged if it is a bare SQL identifier.

    Identifiers cannot be bound as parameters, so every table, column or
    index name coming from a caller passes through here before it is
    formatted into a statement. Qualified (``schema.table``), quoted or
    whitespace-padded names are rejected.

    Raises:
        InvalidIdentifierError: If the value is not a bare identifier
    """
    if not is_safe_identifier(value):
        raise InvalidIdentifierError(label, value)
    return value


def quote_identifier(value: str, label: str = "identifier") -> str:
    """Validate and double-quote an identifier so its case is preserved."""
    return f'"{assert_safe_identifier(value, label)}"'
