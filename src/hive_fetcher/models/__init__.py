"""Pydantic models for Hive search data structures."""

from .post import HivePost
from .request import AbsoluteRange, RelativeDays, SearchRequest, SearchRequestBody
from .search_result import (
    BoundConditions,
    DebugInfo,
    GeneratedQuery,
    SearchOutcome,
    SearchResponse,
    SearchResult,
)

__all__ = [
    "HivePost",
    "AbsoluteRange",
    "RelativeDays",
    "SearchRequest",
    "SearchRequestBody",
    "BoundConditions",
    "DebugInfo",
    "GeneratedQuery",
    "SearchOutcome",
    "SearchResponse",
    "SearchResult",
]
