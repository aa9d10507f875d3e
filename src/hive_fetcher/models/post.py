"""Hive post model matching the middleware's row shape."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class HivePost(BaseModel):
    """A top-level Hive post returned by a search."""

    model_config = ConfigDict(extra="allow", frozen=True)

    author: str
    permlink: str
    title: str = ""
    body: str = ""
    created: datetime
    category: str | None = Field(default=None, description="Parent permlink of a top-level post")

    @field_validator("title", "body", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def key(self) -> tuple[str, str]:
        """Identity of the post on chain."""
        return (self.author, self.permlink)

    def url(self, platform_url: str) -> str:
        """Link to the post on a Hive front end such as https://peakd.com."""
        return f"{platform_url.rstrip('/')}/@{self.author}/{self.permlink}"

    def matches(self, term: str) -> bool:
        """Case-insensitive substring match over title, author and body."""
        needle = term.lower()
        return (
            needle in self.title.lower()
            or needle in self.author.lower()
            or needle in self.body.lower()
        )

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "HivePost":
        """Build a post from a wire row that carries either `body` or `body_preview`.

        Args:
            row: Row dictionary from a search response

        Returns:
            HivePost whose body is the preview when present, else the full body
        """
        data = dict(row)
        preview = data.pop("body_preview", None)
        data["body"] = preview or data.get("body") or ""
        return cls(**data)
