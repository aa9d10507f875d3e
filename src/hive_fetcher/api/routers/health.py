"""Health check endpoints."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from ...storage.content_store import ContentStore
from ..dependencies import get_content_store

router = APIRouter()

BANNER = """
<h1>HAF Middleware Server is Running</h1>
<p>This is the API backend.</p>
<p>Open the front end (or run <code>hive-fetcher search</code>) to search posts.</p>
"""


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: datetime
    version: str
    database: str


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def banner() -> str:
    """Tell a browser that this is the middleware, not the front end."""
    return BANNER


@router.get("/health", response_model=HealthResponse)
async def health_check(store: ContentStore = Depends(get_content_store)) -> HealthResponse:
    """Check API health status and content store reachability."""
    from ... import __version__

    reachable = await store.check_connection()

    return HealthResponse(
        status="healthy" if reachable else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        database="ok" if reachable else "unreachable",
    )
