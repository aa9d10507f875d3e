"""Generated query, search result and response envelope models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .post import HivePost


class BoundConditions(BaseModel):
    """Rendered WHERE fragments substituted for the user-supplied values."""

    model_config = ConfigDict(frozen=True)

    time: str
    author: str | None = None
    keywords: list[str] = []


class GeneratedQuery(BaseModel):
    """A built search statement.

    `sql` and `parameters` are what runs against the store; every
    user-supplied value is bound, never interpolated. `statement_text` is
    the same statement with the bound values rendered as escaped literals,
    for debugging only.
    """

    model_config = ConfigDict(frozen=True)

    sql: str
    parameters: tuple[Any, ...] = ()
    statement_text: str
    bound_conditions: BoundConditions


class SearchResult(BaseModel):
    """Outcome of executing one GeneratedQuery."""

    model_config = ConfigDict(frozen=True)

    success: bool
    rows: list[HivePost] = []
    error: str | None = None
    debug_sql: str

    @property
    def row_count(self) -> int:
        return len(self.rows)


class DebugInfo(BaseModel):
    """Debug trace returned alongside results."""

    generatedSql: str
    rowCount: int | None = None


class SearchResponse(BaseModel):
    """Envelope returned by `POST /search`."""

    success: bool
    data: list[HivePost] | None = None
    error: str | None = None
    debug: DebugInfo | None = None

    @classmethod
    def from_result(cls, result: SearchResult) -> "SearchResponse":
        """Wrap an execution result in the wire envelope."""
        if result.success:
            return cls(
                success=True,
                data=result.rows,
                debug=DebugInfo(generatedSql=result.debug_sql, rowCount=result.row_count),
            )
        return cls(
            success=False,
            error=result.error,
            debug=DebugInfo(generatedSql=result.debug_sql),
        )

    @classmethod
    def invalid(cls, message: str) -> "SearchResponse":
        """Envelope for a request rejected before query construction."""
        return cls(success=False, error=message)


class SearchOutcome(BaseModel):
    """What the client pipeline hands back to the front end."""

    rows: list[HivePost] = Field(default_factory=list)
    debug_sql: str
