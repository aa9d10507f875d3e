"""Search query construction and execution."""

from .builder import QueryBuilder, escape_literal, quote_literal, sanitize_author
from .executor import SearchExecutor

__all__ = [
    "QueryBuilder",
    "SearchExecutor",
    "escape_literal",
    "quote_literal",
    "sanitize_author",
]
