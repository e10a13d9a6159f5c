"""Datadog event stream tools."""

import json
from enum import Enum
from typing import Dict, Optional

from fastmcp import FastMCP
from pydantic import Field

from ..client import BackendRequest
from ..config import DatadogConfig
from .adapter import ToolAdapter, compact, truncate
from .models import Limit, WireModel

SCOPE = "events_read"
DEFAULT_LIMIT = 100


class EventPriority(str, Enum):
    NORMAL = "normal"
    LOW = "low"


class GetEventsParams(WireModel):
    start: int = Field(description="POSIX timestamp (seconds)")
    end: int = Field(description="POSIX timestamp (seconds)")
    priority: Optional[EventPriority] = None
    sources: Optional[str] = None
    tags: Optional[str] = None
    unaggregated: Optional[bool] = None
    exclude_aggregation: Optional[bool] = Field(default=None, alias="excludeAggregation")
    limit: Optional[Limit] = DEFAULT_LIMIT


def build_list(params: GetEventsParams) -> BackendRequest:
    return BackendRequest("GET", "/api/v1/events", params=compact(
        start=params.start,
        end=params.end,
        priority=params.priority.value if params.priority else None,
        sources=params.sources,
        tags=params.tags,
        unaggregated=params.unaggregated,
        exclude_aggregate=params.exclude_aggregation,
    ))


def normalize_list(params: GetEventsParams, response: dict) -> dict:
    return truncate(response, "events", params.limit)


def create_adapters(config: DatadogConfig) -> Dict[str, ToolAdapter]:
    return {
        "get-events": ToolAdapter(
            config, "get-events", domain="events", build_request=build_list,
            normalize=normalize_list, scope=SCOPE,
            required=[("start", "start"), ("end", "end")],
        ),
    }


def register_tools(mcp: FastMCP, adapters: Dict[str, ToolAdapter]):
    """Register event tools with the MCP server."""

    @mcp.tool(
        name="get-events",
        description=(
            "Search for events in Datadog within a specified time range. Events include deployments, "
            "alerts, comments, and other activities. Useful for correlating system behaviors with "
            "specific events."
        ),
    )
    async def get_events(
        start: int,
        end: int,
        priority: Optional[EventPriority] = None,
        sources: Optional[str] = None,
        tags: Optional[str] = None,
        unaggregated: Optional[bool] = None,
        excludeAggregation: Optional[bool] = None,
        limit: Limit = DEFAULT_LIMIT,
    ) -> str:
        params = GetEventsParams(
            start=start,
            end=end,
            priority=priority,
            sources=sources,
            tags=tags,
            unaggregated=unaggregated,
            exclude_aggregation=excludeAggregation,
            limit=limit,
        )
        result = await adapters["get-events"].execute(params)
        return json.dumps(result)
