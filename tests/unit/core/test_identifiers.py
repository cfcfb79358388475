"""Unit tests for the SQL identifier guard."""

import pytest

from pgassist.core.errors import InvalidIdentifierError
from pgassist.core.identifiers import assert_safe_identifier, quote_identifier


@pytest.mark.parametrize("name", ["users", "user_profiles", "_internal", "MyTable", "orders_2024"])
def test_accepts_bare_identifiers(name):
    assert assert_safe_identifier(name, "table name") == name


@pytest.mark.parametrize(
    "name",
    [
        "",
        "orders; DROP TABLE x",
        "'; DROP TABLE users --",
        "my table",
        "1table",
        "a.b",
        "schema.table",
        "func()",
        ' users',
        '"users"',
    ],
)
def test_rejects_unsafe_identifiers(name):
    with pytest.raises(InvalidIdentifierError):
        assert_safe_identifier(name, "table name")


def test_error_carries_label_and_value():
    with pytest.raises(InvalidIdentifierError) as excinfo:
        assert_safe_identifier("a.b", "column name")

    assert excinfo.value.label == "column name"
    assert excinfo.value.value == "a.b"
    assert "column name" in str(excinfo.value)
    assert isinstance(excinfo.value, ValueError)


def test_rejects_non_string_values():
    with pytest.raises(InvalidIdentifierError):
        assert_safe_identifier(None, "table name")


def test_quote_identifier_validates_before_quoting():
    assert quote_identifier("Users") == '"Users"'
    with pytest.raises(InvalidIdentifierError):
        quote_identifier('x"; DROP TABLE y; --')
