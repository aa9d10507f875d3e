"""Search request models: the wire body and the validated domain request."""

import re
from datetime import date, datetime, timezone
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from ..errors import InvalidSearchRequest

DATE_PATTERN = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")
DEFAULT_DAYS = 3


class RelativeDays(BaseModel):
    """Posts created within the last `count` days."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["relative"] = "relative"
    count: int = Field(default=DEFAULT_DAYS, gt=0)


class AbsoluteRange(BaseModel):
    """Posts created between `start` 00:00:00 and `end` 23:59:59 inclusive."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["absolute"] = "absolute"
    start: date
    end: date

    @model_validator(mode="after")
    def _check_order(self) -> "AbsoluteRange":
        if self.start > self.end:
            raise ValueError("startDate must not be after endDate")
        return self


TimeSpec = Annotated[RelativeDays | AbsoluteRange, Field(discriminator="kind")]


class SearchRequest(BaseModel):
    """Validated search request handed to the query builder."""

    model_config = ConfigDict(frozen=True)

    keywords: list[Annotated[str, Field(min_length=1)]] = Field(..., min_length=1)
    time_spec: TimeSpec = Field(default_factory=RelativeDays)
    author: str | None = None


def parse_calendar_date(value: str) -> date:
    """Parse a strict YYYY-MM-DD string.

    Raises:
        InvalidSearchRequest: If the value is not a real calendar date in that format
    """
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        raise InvalidSearchRequest("Invalid date format. Use YYYY-MM-DD.")
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise InvalidSearchRequest("Invalid date format. Use YYYY-MM-DD.") from None


def _first_error(exc: ValidationError) -> str:
    error = exc.errors()[0]
    ctx = error.get("ctx") or {}
    return str(ctx.get("error", error["msg"]))


class SearchRequestBody(BaseModel):
    """JSON body accepted by `POST /search`.

    Either `days` or the `startDate`/`endDate` pair is meaningful; the
    pair wins when both are sent, and neither means the default window.
    """

    keywords: list[str] | None = None
    days: int | None = None
    startDate: str | None = None
    endDate: str | None = None
    author: str | None = None

    def to_search_request(
        self,
        max_keywords: int = 3,
        default_days: int = DEFAULT_DAYS,
        genesis_date: date = date(2020, 3, 20),
        today: date | None = None,
    ) -> SearchRequest:
        """Validate the body and convert it to a SearchRequest.

        Args:
            max_keywords: Upper bound on the number of keywords
            default_days: Relative window used when no valid window is given
            genesis_date: Earliest date an absolute range may start on
            today: Latest date an absolute range may end on (defaults to UTC today)

        Returns:
            SearchRequest ready for query construction

        Raises:
            InvalidSearchRequest: If any field is missing or malformed
        """
        if not self.keywords:
            raise InvalidSearchRequest("Keywords array is required")
        if any(not keyword.strip() for keyword in self.keywords):
            raise InvalidSearchRequest("Keywords must be non-empty strings")
        if len(self.keywords) > max_keywords:
            raise InvalidSearchRequest(f"Too many keywords (max {max_keywords})")

        time_spec: RelativeDays | AbsoluteRange
        if self.startDate or self.endDate:
            if not (self.startDate and self.endDate):
                raise InvalidSearchRequest(
                    "Both startDate and endDate are required for a custom range"
                )
            start = parse_calendar_date(self.startDate)
            end = parse_calendar_date(self.endDate)
            try:
                time_spec = AbsoluteRange(start=start, end=end)
            except ValidationError as e:
                raise InvalidSearchRequest(_first_error(e)) from None

            latest = today or datetime.now(timezone.utc).date()
            if start < genesis_date or end > latest:
                raise InvalidSearchRequest(
                    f"Dates must be between {genesis_date.isoformat()} and today"
                )
        elif self.days is not None and self.days > 0:
            time_spec = RelativeDays(count=self.days)
        else:
            time_spec = RelativeDays(count=default_days)

        return SearchRequest(
            keywords=list(self.keywords),
            time_spec=time_spec,
            author=self.author,
        )
