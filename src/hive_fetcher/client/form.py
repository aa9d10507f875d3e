"""Search form state and the guards applied before a request is sent."""

from datetime import date
from typing import Any, Literal

from ..errors import ClientPrecheckError

MAX_KEYWORDS = 3
DEFAULT_DAYS = 3
QUICK_SELECT_DAYS = (3, 5, 7, 30, 60, 90, 120, 150, 365)

Scope = Literal["global", "user"]


class SearchForm:
    """Keywords plus time and author scope, as collected by a front end.

    A custom date range is only offered for user-scoped searches. Switching
    back to the global scope while a custom range is selected returns the
    time mode to the default relative window.
    """

    def __init__(self, max_keywords: int = MAX_KEYWORDS, default_days: int = DEFAULT_DAYS):
        self.max_keywords = max_keywords
        self.default_days = default_days
        self.keywords: list[str] = []
        self.days: int | None = default_days
        self.custom_start: date | None = None
        self.custom_end: date | None = None
        self.scope: Scope = "global"
        self.author = ""

    @property
    def is_custom_range(self) -> bool:
        return self.days is None

    def add_keyword(self, keyword: str) -> None:
        """Add a keyword.

        Raises:
            ClientPrecheckError: If the form is full or the keyword already exists
        """
        trimmed = keyword.strip()
        if not trimmed:
            return
        if len(self.keywords) >= self.max_keywords:
            raise ClientPrecheckError(f"Max {self.max_keywords} keywords allowed")
        if trimmed in self.keywords:
            raise ClientPrecheckError("Keyword already exists")
        self.keywords.append(trimmed)

    def remove_keyword(self, keyword: str) -> None:
        self.keywords = [k for k in self.keywords if k != keyword]

    def set_days(self, days: int) -> None:
        """Select a relative window of the last `days` days."""
        if days <= 0:
            raise ClientPrecheckError("Days must be a positive number")
        self.days = days
        self.custom_start = None
        self.custom_end = None

    def set_custom_range(self, start: date | None, end: date | None) -> None:
        """Select a custom date range; bounds may be filled in one at a time."""
        if self.scope != "user":
            raise ClientPrecheckError("Custom date ranges are only available for a specific user")
        self.days = None
        self.custom_start = start
        self.custom_end = end

    def set_scope(self, scope: Scope, author: str | None = None) -> None:
        """Switch between searching the whole chain and a single author."""
        if scope == "global" and self.is_custom_range:
            self.set_days(self.default_days)
        self.scope = scope
        if author is not None:
            self.author = author

    def precheck(self) -> None:
        """Reject searches that must not reach the network.

        Raises:
            ClientPrecheckError: On empty keywords, a blank author in user scope,
                or a custom range with a missing bound
        """
        if not self.keywords:
            raise ClientPrecheckError("Add at least one keyword")
        if self.scope == "user" and not self.author.strip():
            raise ClientPrecheckError("Enter a username to search a specific user")
        if self.is_custom_range:
            if self.custom_start is None or self.custom_end is None:
                raise ClientPrecheckError("Select both a start and an end date")
            if self.custom_start > self.custom_end:
                raise ClientPrecheckError("The start date must not be after the end date")

    def to_request_body(self) -> dict[str, Any]:
        """Build the JSON body for `POST /search` after running the precheck."""
        self.precheck()

        body: dict[str, Any] = {"keywords": list(self.keywords)}
        if self.is_custom_range:
            body["startDate"] = self.custom_start.isoformat()
            body["endDate"] = self.custom_end.isoformat()
        else:
            body["days"] = self.days
        body["author"] = self.author.strip() if self.scope == "user" else None
        return body

    def describe_window(self) -> str:
        if self.is_custom_range and self.custom_start and self.custom_end:
            return f"{self.custom_start.isoformat()} to {self.custom_end.isoformat()}"
        return f"the last {self.days} days"
