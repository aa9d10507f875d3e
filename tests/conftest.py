"""Pytest fixtures for Hive Fetcher tests."""

import re
from contextlib import asynccontextmanager
from datetime import datetime, timedelta

import pytest


def make_row(author, permlink, title, body, created, parent_author="", category="hive"):
    """A hafsql.comments row as the fake store keeps it."""
    return {
        "author": author,
        "permlink": permlink,
        "title": title,
        "body": body,
        "created": created,
        "parent_author": parent_author,
        "parent_permlink": category,
    }


def run_search(rows, sql, params, now):
    """Evaluate a generated search statement over in-memory rows.

    Understands exactly the statement shape QueryBuilder emits: a literal
    relative interval or bound BETWEEN dates, an optional bound author and
    bound `%keyword%` patterns, then ORDER BY created DESC and LIMIT.
    """
    interval = re.search(r"INTERVAL '(\d+) days'", sql)
    limit = int(re.search(r"LIMIT (\d+)", sql).group(1))
    patterns = [p.strip("%").lower() for p in params if isinstance(p, str) and p.startswith("%")]
    bounds = [p for p in params if isinstance(p, datetime)]
    authors = [p for p in params if isinstance(p, str) and not p.startswith("%")]

    matched = []
    for row in rows:
        if row["parent_author"] != "":
            continue
        if interval and row["created"] <= now - timedelta(days=int(interval.group(1))):
            continue
        if bounds and not bounds[0] <= row["created"] <= bounds[1]:
            continue
        if authors and row["author"] != authors[0]:
            continue
        text = (row["title"].lower(), row["body"].lower())
        if not any(p in field for p in patterns for field in text):
            continue
        matched.append(row)

    matched.sort(key=lambda r: r["created"], reverse=True)
    return [
        {
            "author": r["author"],
            "permlink": r["permlink"],
            "title": r["title"],
            "body": r["body"],
            "created": r["created"],
            "category": r["parent_permlink"],
        }
        for r in matched[:limit]
    ]


class FakeConnection:
    """Stands in for an asyncpg connection."""

    def __init__(self, rows, error=None, now=None):
        self.rows = rows
        self.error = error
        self.now = now or datetime.now()
        self.calls = []

    async def fetch(self, sql, *params):
        self.calls.append((sql, params))
        if self.error:
            raise self.error
        return run_search(self.rows, sql, params, self.now)

    async def fetchval(self, sql):
        if self.error:
            raise self.error
        return 1


class FakeContentStore:
    """In-memory content store that tracks connection checkouts."""

    def __init__(self, rows=None, error=None, now=None):
        self.connection = FakeConnection(rows or [], error=error, now=now)
        self.acquired = 0
        self.released = 0
        self.started = False
        self.stopped = False

    async def start(self):
        self.started = True

    async def stop(self):
        self.stopped = True

    @asynccontextmanager
    async def acquire(self):
        self.acquired += 1
        try:
            yield self.connection
        finally:
            self.released += 1

    async def check_connection(self):
        try:
            async with self.acquire() as connection:
                await connection.fetchval("SELECT 1")
        except Exception:
            return False
        return True


@pytest.fixture
def now():
    return datetime.now()


@pytest.fixture
def sample_rows(now):
    """Two matching and three non-matching rows for the keyword 'hive'."""
    return [
        make_row("alice", "hive-news", "Hive news roundup", "All about the chain",
                 now - timedelta(hours=30)),
        make_row("bob", "weekend", "My weekend", "Spent it building on HIVE",
                 now - timedelta(hours=2)),
        make_row("carol", "cooking", "Pasta night", "Nothing to see here",
                 now - timedelta(hours=5)),
        make_row("dave", "old-hive", "Hive history", "From long ago",
                 now - timedelta(days=10)),
        make_row("erin", "re-hive-news", "", "Great hive post!",
                 now - timedelta(hours=1), parent_author="alice"),
    ]


@pytest.fixture
def sample_post_data():
    """Sample post row as returned by the middleware."""
    return {
        "author": "alice",
        "permlink": "hive-news",
        "title": "Hive news roundup",
        "body": "All about the chain",
        "created": "2025-01-01T10:00:00",
        "category": "hive",
    }


@pytest.fixture
def fake_store(sample_rows, now):
    return FakeContentStore(rows=sample_rows, now=now)


@pytest.fixture
def make_store(now):
    """Factory for extra stores, e.g. one whose every query fails."""

    def _make(rows=None, error=None):
        return FakeContentStore(rows=rows, error=error, now=now)

    return _make


@pytest.fixture
def api_client(fake_store):
    """FastAPI test client serving searches from the fake store."""
    from fastapi.testclient import TestClient

    from hive_fetcher.api.app import create_app

    with TestClient(create_app(content_store=fake_store)) as client:
        yield client
