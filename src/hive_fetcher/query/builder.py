"""SQL construction for keyword searches over Hive posts."""

import re
from datetime import datetime, time
from typing import Any

import structlog

from ..models.request import AbsoluteRange, RelativeDays, SearchRequest
from ..models.search_result import BoundConditions, GeneratedQuery

logger = structlog.get_logger()

# Row bound for every search; a deployment may lower or raise it via settings.max_rows
MAX_ROWS = 100
CONTENT_TABLE = "hafsql.comments"
COLUMNS = (
    "author",
    "permlink",
    "title",
    "body",
    "created",
    "parent_permlink AS category",
)

# Hive account names only use lowercase letters, digits, dots and hyphens
AUTHOR_DISALLOWED = re.compile(r"[^a-z0-9.\-]")
RANGE_START = time(0, 0, 0)
RANGE_END = time(23, 59, 59)


def escape_literal(value: str) -> str:
    """Double embedded single quotes so the value can sit inside a SQL literal."""
    return value.replace("'", "''")


def quote_literal(value: str) -> str:
    """Render a value as a single-quoted SQL literal."""
    return f"'{escape_literal(value)}'"


def sanitize_author(author: str | None) -> str | None:
    """Reduce an author handle to the Hive account-name alphabet.

    Args:
        author: Raw handle from the request

    Returns:
        Lowercased handle stripped of disallowed characters, or None when
        nothing usable remains
    """
    if author is None:
        return None
    cleaned = AUTHOR_DISALLOWED.sub("", author.strip().lower())
    return cleaned or None


def _format_timestamp(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M:%S")


class _Bindings:
    """Numbered placeholders and their bound values."""

    def __init__(self) -> None:
        self.values: list[Any] = []

    def bind(self, value: Any) -> str:
        self.values.append(value)
        return f"${len(self.values)}"


class QueryBuilder:
    """Turns a SearchRequest into a bounded, parameterized search statement.

    The relative time window is inlined as a literal interval at build time,
    so the debug text shows exactly which window ran. Keyword patterns,
    the author handle and absolute dates are bound parameters.
    """

    def __init__(self, max_rows: int = MAX_ROWS, table: str = CONTENT_TABLE):
        """Initialize query builder.

        Args:
            max_rows: Maximum number of rows any search may return
            table: Fully qualified content table name
        """
        self.max_rows = max_rows
        self.table = table

    def build(self, request: SearchRequest) -> GeneratedQuery:
        """Build the search statement for a validated request.

        Args:
            request: Validated search request

        Returns:
            GeneratedQuery with executable SQL, bound parameters and debug text
        """
        bindings = _Bindings()
        executable = ["parent_author = ''"]
        rendered = ["parent_author = ''"]

        time_sql, time_text = self._time_condition(request.time_spec, bindings)
        executable.append(time_sql)
        rendered.append(time_text)

        author_text = None
        author = sanitize_author(request.author)
        if author:
            executable.append(f"author = {bindings.bind(author)}")
            author_text = f"author = {quote_literal(author)}"
            rendered.append(author_text)

        keyword_sql = []
        keyword_text = []
        for keyword in request.keywords:
            pattern = f"%{keyword}%"
            placeholder = bindings.bind(pattern)
            literal = quote_literal(pattern)
            keyword_sql.append(f"(title ILIKE {placeholder} OR body ILIKE {placeholder})")
            keyword_text.append(f"(title ILIKE {literal} OR body ILIKE {literal})")

        executable.append(f"({' OR '.join(keyword_sql)})")
        rendered.append(f"({' OR '.join(keyword_text)})")

        query = GeneratedQuery(
            sql=self._statement(executable),
            parameters=tuple(bindings.values),
            statement_text=self._statement(rendered),
            bound_conditions=BoundConditions(
                time=time_text,
                author=author_text,
                keywords=keyword_text,
            ),
        )

        logger.debug(
            "query_built",
            keywords=request.keywords,
            author=author,
            statement=query.statement_text,
        )
        return query

    def _time_condition(
        self,
        time_spec: RelativeDays | AbsoluteRange,
        bindings: _Bindings,
    ) -> tuple[str, str]:
        if isinstance(time_spec, AbsoluteRange):
            start = datetime.combine(time_spec.start, RANGE_START)
            end = datetime.combine(time_spec.end, RANGE_END)
            executable = f"created BETWEEN {bindings.bind(start)} AND {bindings.bind(end)}"
            rendered = (
                f"created BETWEEN {quote_literal(_format_timestamp(start))}"
                f" AND {quote_literal(_format_timestamp(end))}"
            )
            return executable, rendered

        condition = f"created > NOW() - INTERVAL '{int(time_spec.count)} days'"
        return condition, condition

    def _statement(self, conditions: list[str]) -> str:
        where = "\n    AND ".join(conditions)
        return (
            "SELECT\n"
            f"    {', '.join(COLUMNS)}\n"
            "FROM\n"
            f"    {self.table}\n"
            "WHERE\n"
            f"    {where}\n"
            "ORDER BY\n"
            "    created DESC\n"
            f"LIMIT {int(self.max_rows)}"
        )
