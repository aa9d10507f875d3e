"""Dependency injection for FastAPI."""

from fastapi import Request

from ..config import settings
from ..query.builder import QueryBuilder
from ..query.executor import SearchExecutor
from ..storage.content_store import ContentStore


# Shared instances
_query_builder = QueryBuilder(max_rows=settings.max_rows)


async def get_content_store(request: Request) -> ContentStore:
    """Get the content store owned by the application lifespan.

    Args:
        request: FastAPI request object

    Returns:
        ContentStore instance
    """
    return request.app.state.content_store


async def get_query_builder() -> QueryBuilder:
    """Get query builder instance.

    Returns:
        QueryBuilder instance
    """
    return _query_builder


async def get_executor(request: Request) -> SearchExecutor:
    """Get an executor bound to the application's content store.

    Args:
        request: FastAPI request object

    Returns:
        SearchExecutor instance
    """
    return SearchExecutor(request.app.state.content_store)
