"""Datadog incident management tools."""

import json
import logging
from typing import Dict, Optional

from fastmcp import FastMCP
from pydantic import Field

from ..client import BackendRequest
from ..config import DatadogConfig
from .adapter import ToolAdapter, compact
from .models import Limit, WireModel

logger = logging.getLogger(__name__)

SCOPE = "incident_read"
DEFAULT_LIMIT = 100


class GetIncidentsParams(WireModel):
    include_archived: Optional[bool] = Field(default=None, alias="includeArchived")
    page_size: Optional[int] = Field(default=None, ge=1, alias="pageSize")
    page_offset: Optional[int] = Field(default=None, ge=0, alias="pageOffset")
    query: Optional[str] = None
    limit: Optional[Limit] = DEFAULT_LIMIT


def build_list(params: GetIncidentsParams) -> BackendRequest:
    return BackendRequest("GET", "/api/v2/incidents", params=compact(**{
        "page[size]": params.page_size,
        "page[offset]": params.page_offset,
    }))


def normalize_list(params: GetIncidentsParams, response: dict) -> dict:
    """Drop archived incidents, apply the title query and the limit."""
    incidents = response.get("data") or []
    fetched = len(incidents)

    if not params.include_archived:
        incidents = [i for i in incidents if not i.get("attributes", {}).get("archived")]

    if params.query:
        needle = params.query.lower()
        incidents = [
            i for i in incidents
            if needle in (i.get("attributes", {}).get("title") or "").lower()
        ]

    if params.limit:
        incidents = incidents[:params.limit]

    logger.info(f"Incidents: {len(incidents)} of {fetched} kept after filtering")
    return {**response, "data": incidents}


def create_adapters(config: DatadogConfig) -> Dict[str, ToolAdapter]:
    return {
        "get-incidents": ToolAdapter(
            config, "get-incidents", domain="incidents", build_request=build_list,
            normalize=normalize_list, scope=SCOPE,
        ),
    }


def register_tools(mcp: FastMCP, adapters: Dict[str, ToolAdapter]):
    """Register incident tools with the MCP server."""

    @mcp.tool(
        name="get-incidents",
        description=(
            "List incidents from Datadog's incident management system. Can filter by active/archived "
            "status and use query strings to find specific incidents. Helpful for reviewing current "
            "or past incidents."
        ),
    )
    async def get_incidents(
        includeArchived: Optional[bool] = None,
        pageSize: Optional[int] = None,
        pageOffset: Optional[int] = None,
        query: Optional[str] = None,
        limit: Limit = DEFAULT_LIMIT,
    ) -> str:
        params = GetIncidentsParams(
            include_archived=includeArchived,
            page_size=pageSize,
            page_offset=pageOffset,
            query=query,
            limit=limit,
        )
        result = await adapters["get-incidents"].execute(params)
        return json.dumps(result)
