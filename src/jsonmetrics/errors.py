from __future__ import annotations

from typing import Optional


class ParseError(ValueError):
    """Base class for failures that abort a whole parse call."""

    def __init__(self, message: str, *, query: Optional[str] = None, field: Optional[str] = None):
        super().__init__(message)
        self.query = query
        self.field = field


class InvalidDocument(ParseError):
    """Input buffer is not a well-formed JSON document."""


class QueryNotFound(ParseError):
    """A configured query did not resolve, or resolved to null."""


class UnsupportedCoercion(ParseError):
    """A resolved value cannot be converted to the requested type."""
