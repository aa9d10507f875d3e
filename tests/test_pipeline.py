"""Tests for the client results pipeline."""

import asyncio
import json
from datetime import date

import httpx
import pytest
import respx

from hive_fetcher.client.form import SearchForm
from hive_fetcher.client.pipeline import (
    FetchStatus,
    PENDING_SQL,
    ResultsPipeline,
    SERVER_SQL_PLACEHOLDER,
    build_request_body,
)
from hive_fetcher.errors import (
    ClientPrecheckError,
    InvalidSearchRequest,
    QueryExecutionError,
    TransportError,
)
from hive_fetcher.models.request import AbsoluteRange, RelativeDays

ENDPOINT = "http://middleware.test/search"


def row(permlink, **extra):
    data = {
        "author": "alice",
        "permlink": permlink,
        "title": f"Title {permlink}",
        "body": "full body",
        "created": "2025-01-01T10:00:00",
        "category": "hive",
    }
    data.update(extra)
    return data


def success_payload(rows, sql="SELECT ..."):
    return {"success": True, "data": rows, "debug": {"generatedSql": sql, "rowCount": len(rows)}}


@pytest.fixture
async def pipeline():
    async with ResultsPipeline(endpoint_url=ENDPOINT) as p:
        yield p


def test_build_request_body_defaults():
    assert build_request_body(["hive", " "]) == {"keywords": ["hive"], "days": 3, "author": None}


def test_build_request_body_range_and_author():
    body = build_request_body(
        ["hive"],
        AbsoluteRange(start=date(2024, 1, 1), end=date(2024, 1, 31)),
        author=" alice ",
    )

    assert body == {
        "keywords": ["hive"],
        "startDate": "2024-01-01",
        "endDate": "2024-01-31",
        "author": "alice",
    }


@respx.mock
async def test_search_success(pipeline):
    route = respx.post(ENDPOINT).mock(
        return_value=httpx.Response(200, json=success_payload([row("a"), row("b")], sql="SELECT 1"))
    )

    outcome = await pipeline.search(["hive"], RelativeDays(count=7))

    assert json.loads(route.calls.last.request.content) == {
        "keywords": ["hive"],
        "days": 7,
        "author": None,
    }
    assert [p.permlink for p in outcome.rows] == ["a", "b"]
    assert outcome.debug_sql == "SELECT 1"
    assert pipeline.status == FetchStatus.SUCCESS
    assert pipeline.debug_sql == "SELECT 1"
    assert pipeline.debug_log[-1] == "Success! Received 2 records."
    assert [p.permlink for p in pipeline.view.visible_posts] == ["a", "b"]


@respx.mock
async def test_body_preview_is_preferred(pipeline):
    respx.post(ENDPOINT).mock(
        return_value=httpx.Response(200, json=success_payload([row("a", body_preview="short")]))
    )

    outcome = await pipeline.search(["hive"])

    assert outcome.rows[0].body == "short"


@respx.mock
async def test_missing_debug_sql_uses_placeholder(pipeline):
    respx.post(ENDPOINT).mock(
        return_value=httpx.Response(200, json={"success": True, "data": []})
    )

    outcome = await pipeline.search(["hive"])

    assert outcome.rows == []
    assert outcome.debug_sql == SERVER_SQL_PLACEHOLDER


@respx.mock
async def test_server_failure_envelope(pipeline):
    respx.post(ENDPOINT).mock(
        return_value=httpx.Response(
            500,
            json={"success": False, "error": "connection terminated", "debug": {"generatedSql": "SELECT 2"}},
        )
    )

    with pytest.raises(QueryExecutionError) as exc_info:
        await pipeline.search(["hive"])

    assert exc_info.value.message == "connection terminated"
    assert pipeline.status == FetchStatus.ERROR
    assert pipeline.error_message == "connection terminated"
    assert pipeline.debug_sql == "SELECT 2"
    assert pipeline.view.all_posts == []


@respx.mock
async def test_bad_request_envelope(pipeline):
    respx.post(ENDPOINT).mock(
        return_value=httpx.Response(400, json={"success": False, "error": "Keywords array is required"})
    )

    with pytest.raises(InvalidSearchRequest, match="Keywords array is required"):
        await pipeline.search(["hive"])


@respx.mock
async def test_unsuccessful_200_envelope(pipeline):
    respx.post(ENDPOINT).mock(
        return_value=httpx.Response(200, json={"success": False, "error": "boom"})
    )

    with pytest.raises(QueryExecutionError, match="boom"):
        await pipeline.search(["hive"])


@respx.mock
async def test_non_json_response(pipeline):
    respx.post(ENDPOINT).mock(return_value=httpx.Response(200, text="<html>proxy</html>"))

    with pytest.raises(TransportError, match="failed to parse response"):
        await pipeline.search(["hive"])


@respx.mock
async def test_status_without_envelope(pipeline):
    respx.post(ENDPOINT).mock(return_value=httpx.Response(502, text="Bad Gateway"))

    with pytest.raises(TransportError, match="Server responded with status 502"):
        await pipeline.search(["hive"])


@respx.mock
async def test_connection_error_adds_guidance(pipeline):
    respx.post(ENDPOINT).mock(side_effect=httpx.ConnectError("Connection refused"))

    with pytest.raises(TransportError) as exc_info:
        await pipeline.search(["hive"])

    assert exc_info.value.message.startswith("Failed to fetch")
    assert "CRITICAL CONNECTION ERROR:" in pipeline.debug_log
    assert any(ENDPOINT in line for line in pipeline.debug_log)


@pytest.mark.parametrize("endpoint", ["http://localhost:abc/search", "http://local\x01host/search"])
async def test_malformed_endpoint_is_a_transport_error(endpoint):
    async with ResultsPipeline(endpoint_url=endpoint) as p:
        with pytest.raises(TransportError) as exc_info:
            await p.search(["hive"])

    assert exc_info.value.message.startswith("Failed to fetch")
    assert p.status == FetchStatus.ERROR
    assert p.error_message == exc_info.value.message
    assert "CRITICAL CONNECTION ERROR:" in p.debug_log


@respx.mock
async def test_precheck_never_reaches_network(pipeline):
    route = respx.post(ENDPOINT)

    with pytest.raises(ClientPrecheckError, match="Add at least one keyword"):
        await pipeline.search([" "])
    with pytest.raises(ClientPrecheckError, match="Enter a username"):
        await pipeline.search(["hive"], author="  ")

    assert not route.called
    assert pipeline.status == FetchStatus.IDLE


async def test_blank_endpoint_is_rejected():
    async with ResultsPipeline(endpoint_url="  ") as p:
        with pytest.raises(ClientPrecheckError, match="No endpoint configured."):
            await p.search(["hive"])


@respx.mock
async def test_new_search_clears_previous_results(pipeline):
    respx.post(ENDPOINT).mock(
        side_effect=[
            httpx.Response(200, json=success_payload([row("a")])),
            httpx.Response(500, json={"success": False, "error": "boom"}),
        ]
    )

    await pipeline.search(["hive"])
    with pytest.raises(QueryExecutionError):
        await pipeline.search(["hive"])

    assert pipeline.view.all_posts == []
    assert pipeline.debug_log[0] == "Initializing search..."
    assert pipeline.debug_sql == ""


@respx.mock
async def test_search_form(pipeline):
    route = respx.post(ENDPOINT).mock(return_value=httpx.Response(200, json=success_payload([])))
    form = SearchForm()
    form.add_keyword("hive")
    form.set_scope("user", author="alice")
    form.set_custom_range(date(2024, 1, 1), date(2024, 1, 2))

    await pipeline.search_form(form)

    assert json.loads(route.calls.last.request.content)["startDate"] == "2024-01-01"


async def test_state_is_cleared_while_loading():
    seen = {}
    release = asyncio.Event()

    async def handler(request):
        await release.wait()
        return httpx.Response(200, json=success_payload([row("a")]))

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    pipeline = ResultsPipeline(endpoint_url=ENDPOINT, client=client)
    pipeline.view.set_posts([])

    task = asyncio.create_task(pipeline.search(["hive"]))
    await asyncio.sleep(0)
    seen["status"] = pipeline.status
    seen["sql"] = pipeline.debug_sql
    release.set()
    await task
    await client.aclose()

    assert seen == {"status": FetchStatus.LOADING, "sql": PENDING_SQL}
    assert pipeline.status == FetchStatus.SUCCESS


async def test_stale_response_does_not_overwrite_newer_search():
    slow_release = asyncio.Event()

    async def handler(request):
        keywords = json.loads(request.content)["keywords"]
        if keywords == ["slow"]:
            await slow_release.wait()
            return httpx.Response(200, json=success_payload([row("slow-post")], sql="SLOW"))
        return httpx.Response(200, json=success_payload([row("fast-post")], sql="FAST"))

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    pipeline = ResultsPipeline(endpoint_url=ENDPOINT, client=client)

    slow = asyncio.create_task(pipeline.search(["slow"]))
    await asyncio.sleep(0)
    await pipeline.search(["fast"])
    slow_release.set()
    slow_outcome = await slow
    await client.aclose()

    assert [p.permlink for p in slow_outcome.rows] == ["slow-post"]
    assert [p.permlink for p in pipeline.view.all_posts] == ["fast-post"]
    assert pipeline.debug_sql == "FAST"
    assert pipeline.status == FetchStatus.SUCCESS
