"""Datadog dashboard tools."""

import json
from typing import Dict, Optional
from urllib.parse import quote

from fastmcp import FastMCP
from pydantic import Field

from ..client import BackendRequest
from ..config import DatadogConfig
from .adapter import ToolAdapter, compact, truncate
from .models import Limit, WireModel

SCOPE = "dashboards_read"
DEFAULT_LIMIT = 100


class GetDashboardsParams(WireModel):
    filter_configured: Optional[bool] = Field(default=None, alias="filterConfigured")
    limit: Optional[Limit] = DEFAULT_LIMIT


class GetDashboardParams(WireModel):
    dashboard_id: str = Field(alias="dashboardId")


def build_list(params: GetDashboardsParams) -> BackendRequest:
    return BackendRequest("GET", "/api/v1/dashboard", params=compact(
        **{"filter[shared]": params.filter_configured}
    ))


def build_get(params: GetDashboardParams) -> BackendRequest:
    return BackendRequest("GET", f"/api/v1/dashboard/{quote(params.dashboard_id, safe='')}")


def normalize_list(params: GetDashboardsParams, response: dict) -> dict:
    return truncate(response, "dashboards", params.limit)


def create_adapters(config: DatadogConfig) -> Dict[str, ToolAdapter]:
    return {
        "get-dashboards": ToolAdapter(
            config, "get-dashboards", domain="dashboards", build_request=build_list,
            normalize=normalize_list, scope=SCOPE,
        ),
        "get-dashboard": ToolAdapter(
            config, "get-dashboard", domain="dashboards", build_request=build_get,
            scope=SCOPE, required=[("dashboard_id", "dashboardId")],
        ),
    }


def register_tools(mcp: FastMCP, adapters: Dict[str, ToolAdapter]):
    """Register dashboard tools with the MCP server."""

    @mcp.tool(
        name="get-dashboards",
        description=(
            "Retrieve a list of all dashboards from Datadog. Useful for discovering available "
            "dashboards and their IDs for further exploration."
        ),
    )
    async def get_dashboards(filterConfigured: Optional[bool] = None, limit: Limit = DEFAULT_LIMIT) -> str:
        params = GetDashboardsParams(filter_configured=filterConfigured, limit=limit)
        result = await adapters["get-dashboards"].execute(params)
        return json.dumps(result)

    @mcp.tool(
        name="get-dashboard",
        description=(
            "Get the complete definition of a specific Datadog dashboard by its ID. Returns all "
            "widgets, layout, and configuration details."
        ),
    )
    async def get_dashboard(dashboardId: str) -> str:
        result = await adapters["get-dashboard"].execute(GetDashboardParams(dashboard_id=dashboardId))
        return json.dumps(result)
