"""Datadog monitor tools."""

import json
import logging
from typing import Dict, List, Optional

from fastmcp import FastMCP
from pydantic import Field

from ..client import BackendRequest
from ..config import DatadogConfig
from .adapter import ToolAdapter, compact
from .models import Limit, WireModel

logger = logging.getLogger(__name__)

SCOPE = "monitors_read"
DEFAULT_LIMIT = 100

# overall_state value -> summary key
STATE_KEYS = {"Alert": "alert", "Warn": "warn", "No Data": "noData", "OK": "ok"}


class GetMonitorsParams(WireModel):
    group_states: Optional[List[str]] = Field(default=None, alias="groupStates")
    tags: Optional[str] = None
    monitor_tags: Optional[str] = Field(default=None, alias="monitorTags")
    limit: Optional[Limit] = DEFAULT_LIMIT


class GetMonitorParams(WireModel):
    monitor_id: int = Field(alias="monitorId")


def build_list(params: GetMonitorsParams) -> BackendRequest:
    return BackendRequest("GET", "/api/v1/monitor", params=compact(
        group_states=",".join(params.group_states) if params.group_states else None,
        tags=params.tags,
        monitor_tags=params.monitor_tags,
    ))


def build_get(params: GetMonitorParams) -> BackendRequest:
    return BackendRequest("GET", f"/api/v1/monitor/{params.monitor_id}")


def summarize(params: GetMonitorsParams, response: list) -> dict:
    """Truncate to the limit and count monitors per overall state."""
    monitors = response if isinstance(response, list) else []
    total = len(monitors)
    if params.limit:
        monitors = monitors[:params.limit]

    summary = {key: 0 for key in STATE_KEYS.values()}
    for monitor in monitors:
        key = STATE_KEYS.get(monitor.get("overall_state"))
        if key:
            summary[key] += 1

    logger.info(f"Monitors: returning {len(monitors)} of {total}")
    return {"monitors": monitors, "summary": summary}


def create_adapters(config: DatadogConfig) -> Dict[str, ToolAdapter]:
    return {
        "get-monitors": ToolAdapter(
            config, "get-monitors", domain="monitors", build_request=build_list,
            normalize=summarize, scope=SCOPE,
        ),
        "get-monitor": ToolAdapter(
            config, "get-monitor", domain="monitors", build_request=build_get,
            scope=SCOPE, required=[("monitor_id", "monitorId")],
        ),
    }


def register_tools(mcp: FastMCP, adapters: Dict[str, ToolAdapter]):
    """Register monitor tools with the MCP server."""

    @mcp.tool(
        name="get-monitors",
        description=(
            "Fetch monitors from Datadog with optional filtering. Use groupStates to filter by monitor "
            "status (e.g., 'alert', 'warn', 'no data'), tags or monitorTags to filter by tag criteria, "
            "and limit to control result size."
        ),
    )
    async def get_monitors(
        groupStates: Optional[List[str]] = None,
        tags: Optional[str] = None,
        monitorTags: Optional[str] = None,
        limit: Limit = DEFAULT_LIMIT,
    ) -> str:
        params = GetMonitorsParams(
            group_states=groupStates, tags=tags, monitor_tags=monitorTags, limit=limit
        )
        result = await adapters["get-monitors"].execute(params)
        return json.dumps(result)

    @mcp.tool(
        name="get-monitor",
        description=(
            "Get detailed information about a specific Datadog monitor by its ID. Use this to retrieve "
            "the complete configuration, status, and other details of a single monitor."
        ),
    )
    async def get_monitor(monitorId: int) -> str:
        result = await adapters["get-monitor"].execute(GetMonitorParams(monitor_id=monitorId))
        return json.dumps(result)
