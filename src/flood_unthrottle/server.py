"""MCP Server entry point for the Flood unthrottler.

Exposes 4 tools via the Model Context Protocol:
- start_automation, stop_automation, automation_status, update_speed_directions

The control service HTTP endpoints (aiohttp) are auto-started as part of
the MCP server lifecycle, so no separate process is needed.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from aiohttp import web
from mcp.server.fastmcp import FastMCP

from .config import SESSION_MANAGER_HOST, SESSION_MANAGER_PORT
from .tools.automation_tools import (
    automation_status,
    start_automation,
    stop_automation,
    update_speed_directions,
)

# Configure logging to stderr (stdout is reserved for MCP JSON-RPC)
logging.basicConfig(
    stream=sys.stderr,
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("flood-unthrottle")


# ── Lifespan: auto-start control service ─────────────────────────────────────


async def start_control_service(
    host: str = SESSION_MANAGER_HOST,
    port: int = SESSION_MANAGER_PORT,
    app: Optional[web.Application] = None,
) -> Optional[web.AppRunner]:
    """Serve the control endpoints on ``host:port``.

    Returns the runner to clean up on shutdown, or None when the port is
    already taken by a control service started on its own.
    """
    if app is None:
        from .session_manager.manager import create_app

        app = create_app()

    runner = web.AppRunner(app)
    await runner.setup()
    try:
        await web.TCPSite(runner, host, port).start()
    except OSError:
        logger.info("Control service already running on %s:%s", host, port)
        await runner.cleanup()
        return None

    logger.info("Control service auto-started on %s:%s", host, port)
    return runner


@asynccontextmanager
async def lifespan(server: FastMCP):
    """Run the control service for as long as the MCP server is up."""
    runner = await start_control_service()
    try:
        yield {}
    finally:
        if runner is not None:
            await runner.cleanup()
            logger.info("Control service stopped.")


# ── MCP Server ───────────────────────────────────────────────────────────────

mcp = FastMCP(
    "flood-unthrottle",
    lifespan=lifespan,
    instructions=(
        "Flood unthrottler - keeps the speed limits of a Flood torrent client "
        "reset to unlimited by driving its web UI in a browser. "
        "Call automation_status to see whether it is running. "
        "Use start_automation to log in and start resetting limits, "
        "update_speed_directions to choose upload and/or download, "
        "and stop_automation to end the browser session."
    ),
)


@mcp.tool()
async def tool_start_automation(up: bool = True, down: bool = True) -> str:
    """Start the unthrottling automation.

    Launches a browser, logs into Flood and keeps resetting the chosen
    speed limits. Does nothing if the automation is already running.

    Args:
        up: Reset the upload limit.
        down: Reset the download limit.
    """
    return await start_automation(up, down)


@mcp.tool()
async def tool_stop_automation() -> str:
    """Stop the automation after its current cycle and close the browser."""
    return await stop_automation()


@mcp.tool()
async def tool_automation_status() -> str:
    """Check whether the automation is running.

    Returns: status, uptime, start time and enabled directions.
    """
    return await automation_status()


@mcp.tool()
async def tool_update_speed_directions(up: bool, down: bool) -> str:
    """Choose which speed limits are reset, taking effect on the next cycle.

    Args:
        up: Reset the upload limit.
        down: Reset the download limit.
    """
    return await update_speed_directions(up, down)


# ── Entry Point ──────────────────────────────────────────────────────────────


def main():
    """Run the MCP server on STDIO transport."""
    logger.info("Starting Flood unthrottle MCP server...")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
