"""Datadog MCP Server - Main entry point."""

import argparse
import logging
import os
import sys
from functools import partial
from typing import Dict, List, Optional, Tuple

from dotenv import load_dotenv
from fastmcp import FastMCP

from .base import create_mcp_server, create_starlette_app_with_rest, setup_logging
from .config import DatadogConfig
from .errors import ConfigurationError
from .tools import MODULES
from .tools.adapter import ToolAdapter

logger = logging.getLogger(__name__)

SERVER_NAME = "datadog"

INSTRUCTIONS = """MCP Server for the Datadog API (read-only).

Provides tools for:
- **Monitors**: get-monitors, get-monitor
- **Dashboards**: get-dashboards, get-dashboard
- **Metrics**: get-metrics, get-metric-metadata
- **Events**: get-events
- **Incidents**: get-incidents
- **Logs**: search-logs, aggregate-logs
- **APM**: search-spans, aggregate-spans, get-trace (300 requests/hour)

Time ranges accept relative values such as 'now-15m' and 'now'.
"""


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="datadog-mcp",
        description="MCP server for the Datadog API",
    )
    parser.add_argument("--apiKey", help="Datadog API key (env: DD_API_KEY)")
    parser.add_argument("--appKey", help="Datadog application key (env: DD_APP_KEY)")
    parser.add_argument("--site", help="Datadog site, e.g. datadoghq.eu (env: DD_SITE)")
    parser.add_argument("--logsSite", help="Site for log APIs (env: DD_LOGS_SITE)")
    parser.add_argument("--metricsSite", help="Site for metric APIs (env: DD_METRICS_SITE)")
    parser.add_argument(
        "--transport",
        choices=["stdio", "http"],
        default=os.environ.get("MCP_TRANSPORT", "stdio"),
        help="MCP transport (env: MCP_TRANSPORT)",
    )
    parser.add_argument("--host", default=os.environ.get("HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8000")))
    return parser.parse_args(argv)


def create_adapters(config: DatadogConfig) -> Dict[str, ToolAdapter]:
    """Create one adapter per tool, each with its own client handle."""
    adapters = {}
    for module in MODULES:
        adapters.update(module.create_adapters(config))
    return adapters


def build_server(config: DatadogConfig) -> Tuple[FastMCP, Dict[str, ToolAdapter]]:
    """Initialize every adapter and register its tool."""
    adapters = create_adapters(config)
    for adapter in adapters.values():
        adapter.initialize()

    mcp = create_mcp_server(SERVER_NAME, INSTRUCTIONS)
    for module in MODULES:
        module.register_tools(mcp, adapters)

    logger.info(f"Registered {len(adapters)} Datadog tools")
    return mcp, adapters


async def close_adapters(adapters: Dict[str, ToolAdapter]):
    """Release every client handle."""
    for adapter in adapters.values():
        await adapter.aclose()
    logger.info("Closed Datadog clients")


def main(argv: Optional[List[str]] = None):
    """Run the server."""
    load_dotenv()
    setup_logging(os.environ.get("LOG_LEVEL", "INFO"))
    args = parse_args(argv)

    try:
        config = DatadogConfig.resolve(vars(args))
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    mcp, adapters = build_server(config)

    if args.transport == "stdio":
        logger.info("Starting datadog MCP server on stdio")
        mcp.run(transport="stdio")
        return

    import uvicorn

    def readiness() -> Dict[str, str]:
        return {
            name: "initialized" if adapter.initialized else "uninitialized"
            for name, adapter in adapters.items()
        }

    app = create_starlette_app_with_rest(
        mcp,
        SERVER_NAME,
        readiness_fn=readiness,
        shutdown_fn=partial(close_adapters, adapters),
    )
    logger.info(f"Starting datadog MCP server on {args.host}:{args.port}")
    uvicorn.run(app, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
