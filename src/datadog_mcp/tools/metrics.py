"""Datadog metric discovery tools."""

import json
from typing import Dict, Optional
from urllib.parse import quote

from fastmcp import FastMCP
from pydantic import Field

from ..client import BackendRequest
from ..config import DatadogConfig
from .adapter import ToolAdapter
from .models import WireModel

SCOPE = "metrics_read"
# The search endpoint needs a query; this prefix matches every metric
DEFAULT_QUERY = "metrics:"


class GetMetricsParams(WireModel):
    q: Optional[str] = None


class GetMetricMetadataParams(WireModel):
    metric_name: str = Field(alias="metricName")


def build_search(params: GetMetricsParams) -> BackendRequest:
    return BackendRequest("GET", "/api/v1/search", params={"q": params.q or DEFAULT_QUERY})


def build_metadata(params: GetMetricMetadataParams) -> BackendRequest:
    return BackendRequest("GET", f"/api/v1/metrics/{quote(params.metric_name, safe='')}")


def create_adapters(config: DatadogConfig) -> Dict[str, ToolAdapter]:
    """Create the metric tool adapters (served from the metrics site)."""
    return {
        "get-metrics": ToolAdapter(
            config, "get-metrics", domain="metrics", build_request=build_search, scope=SCOPE,
        ),
        "get-metric-metadata": ToolAdapter(
            config, "get-metric-metadata", domain="metrics", build_request=build_metadata,
            scope=SCOPE, required=[("metric_name", "metricName")],
        ),
    }


def register_tools(mcp: FastMCP, adapters: Dict[str, ToolAdapter]):
    """Register metric tools with the MCP server."""

    @mcp.tool(
        name="get-metrics",
        description=(
            "List available metrics from Datadog. Optionally use the q parameter to search for specific "
            "metrics matching a pattern. Helpful for discovering metrics to use in monitors or dashboards."
        ),
    )
    async def get_metrics(q: Optional[str] = None) -> str:
        result = await adapters["get-metrics"].execute(GetMetricsParams(q=q))
        return json.dumps(result)

    @mcp.tool(
        name="get-metric-metadata",
        description=(
            "Retrieve detailed metadata about a specific metric, including its type, description, unit, "
            "and other attributes. Use this to understand a metric's meaning and proper usage."
        ),
    )
    async def get_metric_metadata(metricName: str) -> str:
        params = GetMetricMetadataParams(metric_name=metricName)
        result = await adapters["get-metric-metadata"].execute(params)
        return json.dumps(result)
