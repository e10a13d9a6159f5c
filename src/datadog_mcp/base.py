"""MCP server setup: logging, FastMCP instance, HTTP app with health and REST bridge."""

import json
import logging
import os
from contextlib import asynccontextmanager
from typing import Awaitable, Callable, Dict, Optional

from fastmcp import Client, FastMCP
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from . import __version__

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure logging with standard format.

    basicConfig writes to stderr, which keeps the stdio transport clean.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured root logger
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
    return logging.getLogger()


def create_mcp_server(name: str, instructions: str) -> FastMCP:
    """Create the FastMCP server.

    Args:
        name: Server name (e.g., "datadog")
        instructions: Server instructions for the LLM
    """
    return FastMCP(name=name, instructions=instructions)


def _extract_output(result):
    """Extract JSON-safe output from CallToolResult."""
    if result.content:
        text = result.content[0].text if hasattr(result.content[0], "text") else str(result.content[0])
        try:
            return json.loads(text)
        except (json.JSONDecodeError, ValueError):
            return text
    return None


def create_rest_bridge(
    mcp: FastMCP,
    name: str,
    auth_token: Optional[str] = None,
) -> Callable[[Request], Awaitable[JSONResponse]]:
    """Create a REST bridge endpoint so agents can call tools with a plain POST.

    Args:
        mcp: FastMCP instance with registered tools
        name: Service name for logging
        auth_token: Bearer token required on each call (defaults to A2A_API_TOKEN)

    Usage:
        Route("/api/call", create_rest_bridge(mcp, "datadog"), methods=["POST"])
    """
    logger = logging.getLogger(f"{name}.rest_bridge")
    if auth_token is None:
        auth_token = os.environ.get("A2A_API_TOKEN", "")

    async def api_call(request: Request) -> JSONResponse:
        """Invoke an MCP tool.

        Request body:
            {"tool": "get-trace", "arguments": {"traceId": "..."}}

        Response:
            {"status": "success" | "error", "tool": ..., "output" | "error": ...}
        """
        if auth_token:
            auth_header = request.headers.get("Authorization", "")
            if not auth_header.startswith("Bearer "):
                return JSONResponse(
                    {"status": "error", "error": "Missing Bearer token"},
                    status_code=401
                )
            if auth_header[len("Bearer "):] != auth_token:
                return JSONResponse(
                    {"status": "error", "error": "Invalid token"},
                    status_code=403
                )

        try:
            body = await request.json()
        except ValueError as e:
            return JSONResponse(
                {"status": "error", "error": f"Invalid JSON: {e}"},
                status_code=400
            )

        if not isinstance(body, dict) or not body.get("tool"):
            return JSONResponse(
                {"status": "error", "error": "Missing 'tool' field"},
                status_code=400
            )

        tool_name = body["tool"]
        arguments = body.get("arguments") or {}

        logger.info(f"REST bridge call: {tool_name}({arguments})")

        async with Client(mcp) as client:
            result = await client.call_tool(tool_name, arguments, raise_on_error=False)

        if result.is_error:
            error_text = result.content[0].text if result.content else "Unknown error"
            if "Unknown tool" in error_text:
                logger.warning(f"Tool not found: {tool_name}")
                return JSONResponse(
                    {"status": "error", "tool": tool_name, "error": f"Tool not found: {tool_name}"},
                    status_code=404
                )
            logger.error(f"Tool call failed: {tool_name} - {error_text}")
            return JSONResponse(
                {"status": "error", "tool": tool_name, "error": error_text},
                status_code=500
            )

        return JSONResponse({
            "status": "success",
            "tool": tool_name,
            "output": _extract_output(result)
        })

    return api_call


def create_starlette_app_with_rest(
    mcp: FastMCP,
    name: str,
    readiness_fn: Optional[Callable[[], Dict[str, str]]] = None,
    auth_token: Optional[str] = None,
    shutdown_fn: Optional[Callable[[], Awaitable[None]]] = None,
) -> Starlette:
    """Create a Starlette app with MCP routes, health endpoints, and REST bridge.

    Args:
        mcp: FastMCP instance
        name: Service name for health response
        readiness_fn: Returns per-component status for /ready
        auth_token: Bearer token for the REST bridge
        shutdown_fn: Awaited after the MCP app stops (releases client handles)

    Returns:
        Configured Starlette application
    """

    async def health(request):
        """Basic health check endpoint."""
        return JSONResponse({"status": "healthy", "service": name, "version": __version__})

    async def ready(request):
        """Readiness probe endpoint."""
        components = readiness_fn() if readiness_fn else {}
        is_ready = all(status == "initialized" for status in components.values())
        return JSONResponse(
            {"ready": is_ready, "service": name, "components": components},
            status_code=200 if is_ready else 503
        )

    mcp_app = mcp.http_app(stateless_http=True)

    routes = [
        Route("/health", health, methods=["GET"]),
        Route("/ready", ready, methods=["GET"]),
        Route("/api/call", create_rest_bridge(mcp, name, auth_token), methods=["POST"]),
        Mount("/", app=mcp_app),
    ]

    @asynccontextmanager
    async def lifespan(app):
        try:
            async with mcp_app.lifespan(app):
                yield
        finally:
            if shutdown_fn:
                await shutdown_fn()

    return Starlette(routes=routes, lifespan=lifespan)
