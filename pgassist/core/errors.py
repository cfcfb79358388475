"""Exceptions raised by the query assistance core before any database round trip."""


class AssistError(Exception):
    """Base exception for query assistance failures."""

    pass


class InvalidIdentifierError(AssistError, ValueError):
    """An untrusted string was rejected before being spliced into SQL."""

    def __init__(self, label: str, value: str):
        self.label = label
        self.value = value
        super().__init__(
            f"Invalid {label}: {value!r}. Identifiers must start with a letter or "
            f"underscore and contain only letters, digits, and underscores."
        )


class InvalidQueryKindError(AssistError, ValueError):
    """A statement was sent to the wrong entry point for its read/write nature."""

    def __init__(self, message: str, kind: str, expected_tool: str | None = None):
        self.kind = kind
        self.expected_tool = expected_tool
        super().__init__(message)
