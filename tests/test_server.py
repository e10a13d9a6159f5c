"""Tests for tool registration and the HTTP surface."""

import json
from functools import partial

import httpx
import pytest
import respx
from fastmcp import Client
from fastmcp.exceptions import ToolError
from starlette.testclient import TestClient

from datadog_mcp.base import create_starlette_app_with_rest
from datadog_mcp.server import SERVER_NAME, build_server, close_adapters

API = "https://api.datadoghq.com"
SEARCH = f"{API}/api/v2/spans/events/search"


@pytest.fixture
def server(config):
    mcp, adapters = build_server(config)
    return mcp, adapters


@pytest.mark.asyncio
async def test_all_tools_registered(server):
    mcp, adapters = server
    async with Client(mcp) as client:
        tools = await client.list_tools()
    assert sorted(t.name for t in tools) == sorted(adapters)
    assert all(adapter.initialized for adapter in adapters.values())


@pytest.mark.asyncio
async def test_get_trace_returns_json_text(server):
    mcp, _ = server
    with respx.mock:
        respx.post(SEARCH).mock(return_value=httpx.Response(200, json={
            "data": [{"id": "s1"}, {"id": "s2"}], "meta": {}
        }))
        async with Client(mcp) as client:
            result = await client.call_tool("get-trace", {"traceId": "abc123"})

    payload = json.loads(result.content[0].text)
    assert payload["traceId"] == "abc123"
    assert payload["spanCount"] == 2


@pytest.mark.asyncio
async def test_search_spans_limit_default_applied(server):
    mcp, _ = server
    spans = [{"id": str(i)} for i in range(150)]
    with respx.mock:
        respx.post(SEARCH).mock(return_value=httpx.Response(200, json={"data": spans}))
        async with Client(mcp) as client:
            result = await client.call_tool("search-spans", {"filter": {"query": "service:api", "from": "now-1h"}})

    payload = json.loads(result.content[0].text)
    assert payload["data"] == spans[:100]


@pytest.mark.asyncio
async def test_schema_violation_rejected_before_backend(server):
    mcp, _ = server
    with respx.mock(assert_all_called=False) as mock:
        async with Client(mcp) as client:
            with pytest.raises(ToolError):
                await client.call_tool("get-trace", {})
            with pytest.raises(ToolError):
                await client.call_tool("get-monitor", {"monitorId": "not-a-number"})
            with pytest.raises(ToolError):
                await client.call_tool("get-events", {"start": 1, "end": 2, "priority": "urgent"})
        assert mock.calls.call_count == 0


@pytest.mark.asyncio
async def test_adapter_error_surfaces_as_tool_error(server):
    mcp, _ = server
    with respx.mock:
        respx.post(SEARCH).mock(return_value=httpx.Response(429))
        async with Client(mcp) as client:
            with pytest.raises(ToolError, match="300 requests per hour"):
                await client.call_tool("search-spans", {})


@pytest.fixture
def http_client(server):
    mcp, adapters = server

    def readiness():
        return {name: "initialized" for name in adapters}

    app = create_starlette_app_with_rest(mcp, SERVER_NAME, readiness_fn=readiness, auth_token="secret")
    return TestClient(app)


def test_health(http_client):
    response = http_client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.json()["service"] == "datadog"


def test_ready_lists_tools(http_client):
    response = http_client.get("/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["ready"] is True
    assert "get-trace" in data["components"]


def test_rest_bridge_requires_token(http_client):
    response = http_client.post("/api/call", json={"tool": "get-metrics"})
    assert response.status_code == 401

    response = http_client.post(
        "/api/call", json={"tool": "get-metrics"}, headers={"Authorization": "Bearer wrong"}
    )
    assert response.status_code == 403


def test_rest_bridge_requires_tool_field(http_client):
    response = http_client.post("/api/call", json={}, headers={"Authorization": "Bearer secret"})
    assert response.status_code == 400
    assert "tool" in response.json()["error"]


@pytest.mark.asyncio
@pytest.mark.parametrize("tool,arguments", [
    ("search-spans", {"limit": -1}),
    ("search-logs", {"limit": 0}),
    ("get-monitors", {"limit": -5}),
    ("get-trace", {"traceId": "abc123", "limit": 0}),
])
async def test_non_positive_limit_rejected(server, tool, arguments):
    mcp, _ = server
    with respx.mock(assert_all_called=False) as mock:
        async with Client(mcp) as client:
            with pytest.raises(ToolError):
                await client.call_tool(tool, arguments)
        assert mock.calls.call_count == 0


def test_shutdown_closes_adapters(server):
    mcp, adapters = server
    app = create_starlette_app_with_rest(
        mcp, SERVER_NAME, shutdown_fn=partial(close_adapters, adapters)
    )
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert all(adapter.initialized for adapter in adapters.values())
    assert not any(adapter.initialized for adapter in adapters.values())
