"""Datadog log search and analytics tools."""

import json
from typing import Dict, List, Optional

from fastmcp import FastMCP
from pydantic import Field

from ..client import BackendRequest
from ..config import DatadogConfig
from .adapter import ToolAdapter, compact, dump, truncate
from .models import AggregateOptions, Compute, Limit, LogsFilter, LogsGroupBy, Page, WireModel

SCOPE = "logs_read_data"
DEFAULT_LIMIT = 100


class SearchLogsParams(WireModel):
    filter: Optional[LogsFilter] = None
    sort: Optional[str] = None
    page: Optional[Page] = None
    limit: Optional[Limit] = DEFAULT_LIMIT


class AggregateLogsParams(WireModel):
    filter: Optional[LogsFilter] = None
    compute: Optional[List[Compute]] = None
    group_by: Optional[List[LogsGroupBy]] = Field(default=None, alias="groupBy")
    options: Optional[AggregateOptions] = None


def build_search(params: SearchLogsParams) -> BackendRequest:
    return BackendRequest("POST", "/api/v2/logs/events/search", json=compact(
        filter=dump(params.filter),
        sort=params.sort,
        page=dump(params.page),
    ))


def build_aggregate(params: AggregateLogsParams) -> BackendRequest:
    return BackendRequest("POST", "/api/v2/logs/analytics/aggregate", json=compact(
        filter=dump(params.filter),
        compute=[dump(c) for c in params.compute] if params.compute else None,
        group_by=[dump(g) for g in params.group_by] if params.group_by else None,
        options=dump(params.options),
    ))


def normalize_search(params: SearchLogsParams, response: dict) -> dict:
    return truncate(response, "data", params.limit)


def create_adapters(config: DatadogConfig) -> Dict[str, ToolAdapter]:
    """Create the log tool adapters (served from the logs site)."""
    return {
        "search-logs": ToolAdapter(
            config, "search-logs", domain="logs", build_request=build_search,
            normalize=normalize_search, scope=SCOPE,
        ),
        "aggregate-logs": ToolAdapter(
            config, "aggregate-logs", domain="logs", build_request=build_aggregate, scope=SCOPE,
        ),
    }


def register_tools(mcp: FastMCP, adapters: Dict[str, ToolAdapter]):
    """Register log tools with the MCP server."""

    @mcp.tool(
        name="search-logs",
        description=(
            "Search logs in Datadog with advanced filtering options. Use filter.query for search terms "
            "(e.g., 'service:web-app status:error'), from/to for time ranges (e.g., 'now-15m', 'now'), "
            "and sort to order results. Essential for investigating application issues."
        ),
    )
    async def search_logs(
        filter: Optional[LogsFilter] = None,
        sort: Optional[str] = None,
        page: Optional[Page] = None,
        limit: Limit = DEFAULT_LIMIT,
    ) -> str:
        params = SearchLogsParams(filter=filter, sort=sort, page=page, limit=limit)
        result = await adapters["search-logs"].execute(params)
        return json.dumps(result)

    @mcp.tool(
        name="aggregate-logs",
        description=(
            "Perform analytical queries and aggregations on log data. Essential for calculating metrics "
            "(count, avg, sum, etc.), grouping data by fields, and creating statistical summaries from "
            "logs. Use this when you need to analyze patterns or extract metrics from log data."
        ),
    )
    async def aggregate_logs(
        filter: Optional[LogsFilter] = None,
        compute: Optional[List[Compute]] = None,
        groupBy: Optional[List[LogsGroupBy]] = None,
        options: Optional[AggregateOptions] = None,
    ) -> str:
        params = AggregateLogsParams(filter=filter, compute=compute, group_by=groupBy, options=options)
        result = await adapters["aggregate-logs"].execute(params)
        return json.dumps(result)
