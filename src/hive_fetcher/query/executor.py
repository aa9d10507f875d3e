"""Executes generated search statements against the content store."""

import time

import structlog

from ..models.post import HivePost
from ..models.search_result import GeneratedQuery, SearchResult
from ..storage.content_store import ContentStore

logger = structlog.get_logger()


class SearchExecutor:
    """Runs one GeneratedQuery per call and wraps the outcome in a SearchResult."""

    def __init__(self, store: ContentStore):
        """Initialize search executor.

        Args:
            store: Pooled connection source
        """
        self.store = store

    async def execute(self, query: GeneratedQuery) -> SearchResult:
        """Execute a built query once, without retries.

        Any failure, including a row that does not map to a post, comes
        back as an unsuccessful result carrying the error message and the
        attempted statement text.

        Args:
            query: Query produced by QueryBuilder

        Returns:
            SearchResult with rows on success, error on failure
        """
        start_time = time.time()

        try:
            async with self.store.acquire() as connection:
                records = await connection.fetch(query.sql, *query.parameters)
            rows = [HivePost(**dict(record)) for record in records]
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(
                "query_failed",
                error=message,
                error_type=type(e).__name__,
                statement=query.statement_text,
            )
            return SearchResult(
                success=False,
                error=message,
                debug_sql=query.statement_text,
            )

        duration = time.time() - start_time

        logger.info(
            "query_executed",
            row_count=len(rows),
            duration=f"{duration:.2f}s",
        )

        return SearchResult(
            success=True,
            rows=rows,
            debug_sql=query.statement_text,
        )
