"""Client-side filtering and pagination over a fetched result set."""

import math

from ..models.post import HivePost

PAGE_SIZE = 9


class ViewState:
    """Derived view over the current search rows.

    Changing the rows or the filter term recomputes the filtered list and
    resets the page cursor to 1. Changing only the page recomputes the
    visible slice.
    """

    def __init__(self, page_size: int = PAGE_SIZE):
        """Initialize view state.

        Args:
            page_size: Number of posts per page
        """
        if page_size < 1:
            raise ValueError("page_size must be positive")

        self.page_size = page_size
        self._all_posts: list[HivePost] = []
        self._filter_term = ""
        self._filtered: list[HivePost] = []
        self._current_page = 1
        self._visible: list[HivePost] = []

    @property
    def all_posts(self) -> list[HivePost]:
        return list(self._all_posts)

    @property
    def filter_term(self) -> str:
        return self._filter_term

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def filtered_posts(self) -> list[HivePost]:
        return list(self._filtered)

    @property
    def visible_posts(self) -> list[HivePost]:
        return list(self._visible)

    @property
    def total_pages(self) -> int:
        return math.ceil(len(self._filtered) / self.page_size)

    def set_posts(self, posts: list[HivePost]) -> None:
        """Replace the raw rows, e.g. after a new search resolves."""
        self._all_posts = list(posts)
        self._refilter()

    def clear(self) -> None:
        self.set_posts([])

    def set_filter(self, term: str) -> None:
        """Set the local filter term (matched against title, author and body)."""
        self._filter_term = term
        self._refilter()

    def go_to_page(self, page: int) -> bool:
        """Move the page cursor.

        Args:
            page: 1-based page number

        Returns:
            True if the cursor moved, False if the page is out of range
        """
        if page < 1 or page > max(1, self.total_pages):
            return False
        self._current_page = page
        self._slice()
        return True

    def next_page(self) -> bool:
        return self.go_to_page(self._current_page + 1)

    def previous_page(self) -> bool:
        return self.go_to_page(self._current_page - 1)

    def _refilter(self) -> None:
        term = self._filter_term
        if term:
            self._filtered = [post for post in self._all_posts if post.matches(term)]
        else:
            self._filtered = list(self._all_posts)
        self._current_page = 1
        self._slice()

    def _slice(self) -> None:
        start = (self._current_page - 1) * self.page_size
        self._visible = self._filtered[start:start + self.page_size]
