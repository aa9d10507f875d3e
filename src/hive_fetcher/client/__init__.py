"""Client-side search pipeline for front ends."""

from .form import SearchForm
from .pipeline import FetchStatus, ResultsPipeline, build_request_body
from .view_state import ViewState

__all__ = [
    "FetchStatus",
    "ResultsPipeline",
    "SearchForm",
    "ViewState",
    "build_request_body",
]
