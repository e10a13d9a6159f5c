"""Datadog APM span and trace tools."""

import json
import logging
from typing import Dict, List, Optional

from fastmcp import FastMCP
from pydantic import Field

from ..client import BackendRequest
from ..config import DatadogConfig
from .adapter import ToolAdapter, compact, dump, truncate
from .models import AggregateOptions, Compute, Limit, Page, SpansGroupBy, TimeFilter, WireModel

logger = logging.getLogger(__name__)

SCOPE = "apm_read"
RATE_LIMIT = "300 requests per hour"
DEFAULT_LIMIT = 100
TRACE_LIMIT = 1000
TRACE_WINDOW = ("now-15m", "now")

SEARCH_PATH = "/api/v2/spans/events/search"
AGGREGATE_PATH = "/api/v2/spans/analytics/aggregate"


class SearchSpansParams(WireModel):
    filter: Optional[TimeFilter] = None
    sort: Optional[str] = None
    page: Optional[Page] = None
    limit: Optional[Limit] = DEFAULT_LIMIT


class AggregateSpansParams(WireModel):
    filter: Optional[TimeFilter] = None
    compute: Optional[List[Compute]] = None
    group_by: Optional[List[SpansGroupBy]] = Field(default=None, alias="groupBy")
    options: Optional[AggregateOptions] = None


class GetTraceParams(WireModel):
    trace_id: str = Field(alias="traceId")
    limit: Optional[Limit] = TRACE_LIMIT


def _search_request(attributes: dict) -> BackendRequest:
    return BackendRequest("POST", SEARCH_PATH, json={
        "data": {"attributes": attributes, "type": "search_request"}
    })


def build_search(params: SearchSpansParams) -> BackendRequest:
    return _search_request(compact(
        filter=dump(params.filter),
        sort=params.sort,
        page=dump(params.page),
    ))


def build_aggregate(params: AggregateSpansParams) -> BackendRequest:
    attributes = compact(
        filter=dump(params.filter),
        compute=[dump(c) for c in params.compute] if params.compute else None,
        group_by=[dump(g) for g in params.group_by] if params.group_by else None,
        options=dump(params.options),
    )
    return BackendRequest("POST", AGGREGATE_PATH, json={
        "data": {"attributes": attributes, "type": "aggregate_request"}
    })


def build_trace(params: GetTraceParams) -> BackendRequest:
    # A trace is every span sharing the trace_id
    start, end = TRACE_WINDOW
    return _search_request({
        "filter": {"query": f"trace_id:{params.trace_id}", "from": start, "to": end},
        "sort": "timestamp",
        "page": {"limit": params.limit or TRACE_LIMIT},
    })


def normalize_search(params: SearchSpansParams, response: dict) -> dict:
    return truncate(response, "data", params.limit)


def normalize_trace(params: GetTraceParams, response: dict) -> dict:
    spans = response.get("data") or []
    logger.info(f"Trace {params.trace_id}: {len(spans)} spans")
    return {
        "traceId": params.trace_id,
        "spans": spans,
        "meta": response.get("meta"),
        "spanCount": len(spans),
    }


def trace_not_found(params: GetTraceParams) -> str:
    return (
        f"Trace with ID {params.trace_id} not found. Make sure the trace exists and is "
        "within the time window (last 15 minutes by default)."
    )


def create_adapters(config: DatadogConfig) -> Dict[str, ToolAdapter]:
    """Create the span tool adapters (all share the spans quota)."""
    common = dict(domain="spans", scope=SCOPE, rate_limit=RATE_LIMIT)
    return {
        "search-spans": ToolAdapter(
            config, "search-spans", build_request=build_search,
            normalize=normalize_search, **common,
        ),
        "aggregate-spans": ToolAdapter(
            config, "aggregate-spans", build_request=build_aggregate, **common,
        ),
        "get-trace": ToolAdapter(
            config, "get-trace", build_request=build_trace, normalize=normalize_trace,
            not_found=trace_not_found, required=[("trace_id", "traceId")], **common,
        ),
    }


def register_tools(mcp: FastMCP, adapters: Dict[str, ToolAdapter]):
    """Register APM span tools with the MCP server."""

    @mcp.tool(
        name="search-spans",
        description=(
            "Search APM spans in Datadog with filtering options. Use filter.query for search terms "
            "(e.g., 'service:web-app operation_name:http.request'), from/to for time ranges "
            "(e.g., 'now-1h', 'now'), and sort to order results. Essential for investigating "
            "application performance and tracing issues. Rate limited to 300 requests/hour."
        ),
    )
    async def search_spans(
        filter: Optional[TimeFilter] = None,
        sort: Optional[str] = None,
        page: Optional[Page] = None,
        limit: Limit = DEFAULT_LIMIT,
    ) -> str:
        params = SearchSpansParams(filter=filter, sort=sort, page=page, limit=limit)
        result = await adapters["search-spans"].execute(params)
        return json.dumps(result)

    @mcp.tool(
        name="aggregate-spans",
        description=(
            "Perform analytical queries and aggregations on APM span data. Calculate metrics "
            "(count, avg, p50, p99, etc.), group by dimensions (service, resource, etc.), and create "
            "statistical summaries from traces. Use this for performance analysis, latency "
            "percentiles, and error rate calculations. Rate limited to 300 requests/hour."
        ),
    )
    async def aggregate_spans(
        filter: Optional[TimeFilter] = None,
        compute: Optional[List[Compute]] = None,
        groupBy: Optional[List[SpansGroupBy]] = None,
        options: Optional[AggregateOptions] = None,
    ) -> str:
        params = AggregateSpansParams(filter=filter, compute=compute, group_by=groupBy, options=options)
        result = await adapters["aggregate-spans"].execute(params)
        return json.dumps(result)

    @mcp.tool(
        name="get-trace",
        description=(
            "Retrieve all spans for a specific trace ID. A trace represents the complete journey of "
            "a request through your distributed system. This tool fetches all spans (operations) "
            "that belong to the trace, sorted chronologically. Useful for debugging specific "
            "requests or understanding the full execution path. Rate limited to 300 requests/hour."
        ),
    )
    async def get_trace(traceId: str, limit: Limit = TRACE_LIMIT) -> str:
        params = GetTraceParams(trace_id=traceId, limit=limit)
        result = await adapters["get-trace"].execute(params)
        return json.dumps(result)
