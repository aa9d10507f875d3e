"""Utility modules for Hive Fetcher."""

from .logging import request_context, setup_logging

__all__ = ["request_context", "setup_logging"]
