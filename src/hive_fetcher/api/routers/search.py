"""Search API endpoint."""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
import structlog

from ...config import settings
from ...models.request import SearchRequestBody
from ...models.search_result import SearchResponse
from ...query.builder import QueryBuilder
from ...query.executor import SearchExecutor
from ..dependencies import get_executor, get_query_builder

logger = structlog.get_logger()

router = APIRouter(prefix="/search", tags=["Search"])


@router.post(
    "",
    response_model=SearchResponse,
    response_model_exclude_none=True,
    responses={400: {"model": SearchResponse}, 500: {"model": SearchResponse}},
)
async def search_posts(
    body: SearchRequestBody,
    builder: QueryBuilder = Depends(get_query_builder),
    executor: SearchExecutor = Depends(get_executor),
) -> SearchResponse | JSONResponse:
    """Search top-level Hive posts by keyword, time window and author.

    Args:
        body: Keywords plus either `days` or a `startDate`/`endDate` pair
        builder: Injected query builder
        executor: Injected search executor

    Returns:
        SearchResponse with matching posts and the generated SQL. A store
        failure is returned with status 500 and the attempted SQL.
    """
    request = body.to_search_request(
        max_keywords=settings.max_keywords,
        default_days=settings.default_days,
        genesis_date=settings.genesis_date,
    )

    logger.info(
        "executing_search",
        keywords=request.keywords,
        time_spec=request.time_spec.kind,
        author=request.author,
    )

    query = builder.build(request)
    result = await executor.execute(query)
    response = SearchResponse.from_result(result)

    if not result.success:
        return JSONResponse(
            status_code=500,
            content=response.model_dump(mode="json", exclude_none=True),
        )

    logger.info("search_complete", row_count=result.row_count)
    return response
