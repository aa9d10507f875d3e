"""Client pipeline: request, response normalization and derived view state."""

from enum import Enum
from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from ..errors import (
    ClientPrecheckError,
    HiveFetcherError,
    InvalidSearchRequest,
    QueryExecutionError,
    TransportError,
)
from ..models.post import HivePost
from ..models.request import AbsoluteRange, RelativeDays
from ..models.search_result import SearchOutcome
from .form import DEFAULT_DAYS, SearchForm
from .view_state import PAGE_SIZE, ViewState

logger = structlog.get_logger()

PENDING_SQL = "Waiting for server to generate SQL..."
SERVER_SQL_PLACEHOLDER = "SQL generated on server"
LOCAL_ENDPOINT = "http://localhost:3000/search"


class FetchStatus(str, Enum):
    """Lifecycle of the most recent search."""

    IDLE = "IDLE"
    LOADING = "LOADING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


def build_request_body(
    keywords: list[str],
    time_spec: RelativeDays | AbsoluteRange | None = None,
    author: str | None = None,
) -> dict[str, Any]:
    """Build the `POST /search` body, applying the client-side guards.

    Args:
        keywords: Keywords to search for
        time_spec: Relative window or absolute range; None means the default window
        author: Handle for a user-scoped search, None for the whole chain

    Returns:
        JSON-ready request body

    Raises:
        ClientPrecheckError: On empty keywords or a blank author in user scope
    """
    cleaned = [k.strip() for k in keywords if k and k.strip()]
    if not cleaned:
        raise ClientPrecheckError("Add at least one keyword")
    if author is not None and not author.strip():
        raise ClientPrecheckError("Enter a username to search a specific user")

    body: dict[str, Any] = {"keywords": cleaned}
    if isinstance(time_spec, AbsoluteRange):
        body["startDate"] = time_spec.start.isoformat()
        body["endDate"] = time_spec.end.isoformat()
    else:
        body["days"] = time_spec.count if time_spec else DEFAULT_DAYS
    body["author"] = author.strip() if author else None
    return body


def _debug_sql(payload: Any) -> str | None:
    if isinstance(payload, dict) and isinstance(payload.get("debug"), dict):
        return payload["debug"].get("generatedSql")
    return None


class ResultsPipeline:
    """Sends searches to the middleware and keeps the state a front end renders.

    Each call clears the previous results before the request goes out. A
    search that resolves after a newer one was started still returns its
    outcome to its caller but no longer touches the shared state.
    """

    def __init__(
        self,
        endpoint_url: str = LOCAL_ENDPOINT,
        page_size: int = PAGE_SIZE,
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        """Initialize results pipeline.

        Args:
            endpoint_url: Middleware search endpoint
            page_size: Posts per page in the view state
            timeout: Request timeout in seconds for the default client
            client: Optional preconfigured httpx client
        """
        self.endpoint_url = endpoint_url
        self.view = ViewState(page_size=page_size)
        self.status = FetchStatus.IDLE
        self.error_message = ""
        self.debug_sql = ""
        self.debug_log: list[str] = []
        self._generation = 0
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def search(
        self,
        keywords: list[str],
        time_spec: RelativeDays | AbsoluteRange | None = None,
        author: str | None = None,
    ) -> SearchOutcome:
        """Run a search for keywords within a time window and optional author.

        Raises:
            ClientPrecheckError: If the request fails a client-side guard
            HiveFetcherError: If the middleware or transport reports a failure
        """
        body = build_request_body(keywords, time_spec, author)
        return await self.submit(body)

    async def search_form(self, form: SearchForm) -> SearchOutcome:
        """Run the search described by a SearchForm."""
        return await self.submit(form.to_request_body())

    async def submit(self, body: dict[str, Any]) -> SearchOutcome:
        """Send a prepared request body and update the shared state.

        Args:
            body: Request body as produced by build_request_body

        Returns:
            Normalized rows and the server's debug SQL
        """
        endpoint = (self.endpoint_url or "").strip()
        if not endpoint:
            raise ClientPrecheckError("No endpoint configured.")

        self._generation += 1
        generation = self._generation
        self._begin(endpoint)

        logger.info("search_started", keywords=body.get("keywords"), endpoint=endpoint)

        try:
            outcome = await self._fetch(endpoint, body)
        except HiveFetcherError as e:
            logger.error(
                "search_failed",
                endpoint=endpoint,
                error=e.message,
                error_type=type(e).__name__,
                statement=e.debug_sql,
            )
            if generation == self._generation:
                self._fail(e, endpoint)
            raise

        if generation == self._generation:
            self._succeed(outcome)
        else:
            logger.debug("stale_search_ignored", generation=generation, latest=self._generation)

        return outcome

    async def _fetch(self, endpoint: str, body: dict[str, Any]) -> SearchOutcome:
        try:
            response = await self._client.post(endpoint, json=body)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(f"Failed to fetch: {e}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.is_success:
            if isinstance(payload, dict) and payload.get("error"):
                if response.status_code == 400:
                    raise InvalidSearchRequest(payload["error"])
                raise QueryExecutionError(payload["error"], debug_sql=_debug_sql(payload))
            raise TransportError(
                f"Server responded with status {response.status_code}",
                debug_sql=_debug_sql(payload),
            )

        if not isinstance(payload, dict):
            raise TransportError("failed to parse response")

        if not payload.get("success"):
            raise QueryExecutionError(
                payload.get("error") or "Unknown server error",
                debug_sql=_debug_sql(payload),
            )

        try:
            rows = [HivePost.from_row(row) for row in payload.get("data") or []]
        except (TypeError, ValidationError) as e:
            raise TransportError("failed to parse response", debug_sql=_debug_sql(payload)) from e

        return SearchOutcome(
            rows=rows,
            debug_sql=_debug_sql(payload) or SERVER_SQL_PLACEHOLDER,
        )

    def _begin(self, endpoint: str) -> None:
        self.status = FetchStatus.LOADING
        self.view.clear()
        self.error_message = ""
        self.debug_sql = PENDING_SQL
        self.debug_log = [
            "Initializing search...",
            f"Target Endpoint: {endpoint}",
            "Sending request...",
        ]

    def _succeed(self, outcome: SearchOutcome) -> None:
        self.debug_sql = outcome.debug_sql
        self.debug_log.append(f"Success! Received {len(outcome.rows)} records.")
        self.view.set_posts(outcome.rows)
        self.status = FetchStatus.SUCCESS

    def _fail(self, error: HiveFetcherError, endpoint: str) -> None:
        self.error_message = error.message
        self.debug_sql = error.debug_sql or ""
        self.debug_log.append(f"ERROR: {error.message}")

        if isinstance(error, TransportError):
            self.debug_log.extend([
                "",
                "CRITICAL CONNECTION ERROR:",
                "1. Ensure the middleware server is running and reachable.",
                f"2. Verify the configured endpoint (currently {endpoint}).",
                f"3. For local development the endpoint is usually {LOCAL_ENDPOINT}.",
            ])

        self.status = FetchStatus.ERROR

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this pipeline created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "ResultsPipeline":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
