"""Tests for the generic tool adapter contract."""

import httpx
import pytest
import respx

from datadog_mcp.errors import (
    AuthorizationError,
    CredentialsError,
    DatadogAPIError,
    ErrorKind,
    NotFoundError,
    ParameterError,
    RateLimitError,
    classify,
)
from datadog_mcp.server import create_adapters
from datadog_mcp.tools import dashboards, events, incidents, logs, metrics, monitors, spans
from datadog_mcp.tools.spans import AggregateSpansParams, GetTraceParams, SearchSpansParams

API = "https://api.datadoghq.com"
SEARCH = f"{API}/api/v2/spans/events/search"
AGGREGATE = f"{API}/api/v2/spans/analytics/aggregate"

# Valid parameters for every tool
VALID_PARAMS = {
    "get-monitors": lambda: monitors.GetMonitorsParams(),
    "get-monitor": lambda: monitors.GetMonitorParams(monitor_id=42),
    "get-dashboards": lambda: dashboards.GetDashboardsParams(),
    "get-dashboard": lambda: dashboards.GetDashboardParams(dashboard_id="abc-def-ghi"),
    "get-metrics": lambda: metrics.GetMetricsParams(q="system.cpu"),
    "get-metric-metadata": lambda: metrics.GetMetricMetadataParams(metric_name="system.cpu.user"),
    "get-events": lambda: events.GetEventsParams(start=1700000000, end=1700003600),
    "get-incidents": lambda: incidents.GetIncidentsParams(),
    "search-logs": lambda: logs.SearchLogsParams(),
    "aggregate-logs": lambda: logs.AggregateLogsParams(),
    "search-spans": lambda: SearchSpansParams(),
    "aggregate-spans": lambda: AggregateSpansParams(),
    "get-trace": lambda: GetTraceParams(trace_id="abc123"),
}

ALL_TOOLS = sorted(VALID_PARAMS)

SPAN_CASES = [
    ("search-spans", SearchSpansParams, SEARCH),
    ("aggregate-spans", AggregateSpansParams, AGGREGATE),
    ("get-trace", lambda: GetTraceParams(trace_id="abc123"), SEARCH),
]


def test_every_tool_has_an_adapter(config):
    assert sorted(create_adapters(config)) == ALL_TOOLS


def test_classify():
    assert classify(403) is ErrorKind.AUTHORIZATION
    assert classify(429) is ErrorKind.UNCLASSIFIED
    assert classify(429, has_quota=True) is ErrorKind.RATE_LIMIT
    assert classify(404) is ErrorKind.UNCLASSIFIED
    assert classify(404, has_not_found=True) is ErrorKind.NOT_FOUND
    assert classify(500, True, True) is ErrorKind.UNCLASSIFIED
    assert classify(None) is ErrorKind.UNCLASSIFIED


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ALL_TOOLS)
async def test_execute_before_initialize_fails(config, name):
    adapter = create_adapters(config)[name]
    assert not adapter.initialized
    with respx.mock(assert_all_called=False) as mock:
        with pytest.raises(RuntimeError, match="before initialize"):
            await adapter.execute(VALID_PARAMS[name]())
        assert mock.calls.call_count == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("name", ALL_TOOLS)
async def test_missing_credentials_fail_before_network(missing_app_key, name):
    adapter = create_adapters(missing_app_key)[name]
    adapter.initialize()
    with respx.mock(assert_all_called=False) as mock:
        with pytest.raises(CredentialsError, match="API Key and App Key are required"):
            await adapter.execute(object())
        assert mock.calls.call_count == 0


@pytest.mark.asyncio
async def test_empty_required_field_rejected(config):
    adapter = spans.create_adapters(config)["get-trace"]
    adapter.initialize()
    with respx.mock(assert_all_called=False) as mock:
        with pytest.raises(ParameterError, match="traceId is required"):
            await adapter.execute(GetTraceParams(trace_id="   "))
        assert mock.calls.call_count == 0


@pytest.mark.asyncio
async def test_initialize_is_idempotent(config):
    adapter = spans.create_adapters(config)["search-spans"]
    adapter.initialize()
    handle = adapter._client
    adapter.initialize()
    assert adapter._client is handle

    with respx.mock:
        route = respx.post(SEARCH).mock(return_value=httpx.Response(200, json={"data": []}))
        assert await adapter.execute(SearchSpansParams()) == {"data": []}
        assert route.call_count == 1

    await adapter.aclose()
    assert not adapter.initialized


@pytest.mark.asyncio
async def test_sends_credentials(config):
    adapter = monitors.create_adapters(config)["get-monitor"]
    adapter.initialize()
    with respx.mock:
        route = respx.get(f"{API}/api/v1/monitor/42").mock(
            return_value=httpx.Response(200, json={"id": 42})
        )
        assert await adapter.execute(monitors.GetMonitorParams(monitor_id=42)) == {"id": 42}
        request = route.calls.last.request
        assert request.headers["DD-API-KEY"] == "test-api-key"
        assert request.headers["DD-APPLICATION-KEY"] == "test-app-key"


@pytest.mark.asyncio
@pytest.mark.parametrize("name,make_params,url", SPAN_CASES)
async def test_span_403_names_scope(config, name, make_params, url):
    adapter = spans.create_adapters(config)[name]
    adapter.initialize()
    with respx.mock:
        respx.post(url).mock(return_value=httpx.Response(403, json={"errors": ["Forbidden"]}))
        with pytest.raises(AuthorizationError, match="apm_read"):
            await adapter.execute(make_params())


@pytest.mark.asyncio
@pytest.mark.parametrize("name,make_params,url", SPAN_CASES)
async def test_span_429_names_quota(config, name, make_params, url):
    adapter = spans.create_adapters(config)[name]
    adapter.initialize()
    with respx.mock:
        respx.post(url).mock(return_value=httpx.Response(429, json={"errors": ["Too many"]}))
        with pytest.raises(RateLimitError, match="300 requests per hour"):
            await adapter.execute(make_params())


@pytest.mark.asyncio
async def test_trace_404_names_trace(config):
    adapter = spans.create_adapters(config)["get-trace"]
    adapter.initialize()
    with respx.mock:
        respx.post(SEARCH).mock(return_value=httpx.Response(404, json={"errors": ["Not found"]}))
        with pytest.raises(NotFoundError) as exc:
            await adapter.execute(GetTraceParams(trace_id="abc123"))
    assert "abc123" in str(exc.value)
    assert "15 minutes" in str(exc.value)


@pytest.mark.asyncio
async def test_search_404_passes_through(config):
    adapter = spans.create_adapters(config)["search-spans"]
    adapter.initialize()
    with respx.mock:
        respx.post(SEARCH).mock(return_value=httpx.Response(404, json={"errors": ["Not found"]}))
        with pytest.raises(DatadogAPIError) as exc:
            await adapter.execute(SearchSpansParams())
    assert exc.value.status == 404
    assert not isinstance(exc.value, NotFoundError)


@pytest.mark.asyncio
async def test_unclassified_error_reraised_unchanged(config):
    adapter = monitors.create_adapters(config)["get-monitor"]
    adapter.initialize()
    with respx.mock:
        respx.get(f"{API}/api/v1/monitor/7").mock(
            return_value=httpx.Response(500, json={"errors": ["Internal error"]})
        )
        with pytest.raises(DatadogAPIError) as exc:
            await adapter.execute(monitors.GetMonitorParams(monitor_id=7))
    assert exc.value.status == 500
    assert "Internal error" in str(exc.value)


@pytest.mark.asyncio
async def test_monitor_429_without_quota_passes_through(config):
    adapter = monitors.create_adapters(config)["get-monitor"]
    adapter.initialize()
    with respx.mock:
        respx.get(f"{API}/api/v1/monitor/7").mock(return_value=httpx.Response(429))
        with pytest.raises(DatadogAPIError) as exc:
            await adapter.execute(monitors.GetMonitorParams(monitor_id=7))
    assert exc.value.status == 429


@pytest.mark.asyncio
async def test_monitor_403_names_monitor_scope(config):
    adapter = monitors.create_adapters(config)["get-monitors"]
    adapter.initialize()
    with respx.mock:
        respx.get(f"{API}/api/v1/monitor").mock(return_value=httpx.Response(403))
        with pytest.raises(AuthorizationError, match="monitors_read"):
            await adapter.execute(monitors.GetMonitorsParams())


@pytest.mark.asyncio
async def test_transport_error_propagates(config):
    adapter = spans.create_adapters(config)["search-spans"]
    adapter.initialize()
    with respx.mock:
        respx.post(SEARCH).mock(side_effect=httpx.ConnectError("boom"))
        with pytest.raises(httpx.ConnectError):
            await adapter.execute(SearchSpansParams())
