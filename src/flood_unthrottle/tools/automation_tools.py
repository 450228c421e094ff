"""MCP tools for driving the unthrottling automation."""

from __future__ import annotations

import json

import httpx

from ..config import SESSION_MANAGER_URL


async def _call_session_manager(method: str, path: str, json_body: dict | None = None) -> dict:
    """Make a request to the control service."""
    url = f"{SESSION_MANAGER_URL}{path}"
    try:
        async with httpx.AsyncClient(timeout=30.0) as client:
            if method == "GET":
                resp = await client.get(url)
            else:
                resp = await client.post(url, json=json_body or {})

            if resp.status_code >= 400:
                data = resp.json()
                return {"error": data.get("error", f"HTTP {resp.status_code}")}
            return resp.json()

    except httpx.ConnectError:
        return {
            "error": "Control service is not reachable at "
            f"{SESSION_MANAGER_URL}. It should auto-start with the MCP server. "
            "If running standalone: python -m flood_unthrottle.session_manager"
        }
    except httpx.TimeoutException:
        return {"error": "Control service timed out."}
    except Exception as e:
        return {"error": f"Failed to connect to control service: {e}"}


def _format_directions(directions: dict | None) -> str:
    if not directions:
        return "none"
    enabled = [name for name in ("up", "down") if directions.get(name)]
    return ", ".join(enabled) if enabled else "none"


async def start_automation(up: bool = True, down: bool = True) -> str:
    """Start keeping Flood's speed limits reset.

    Args:
        up: Reset the upload limit.
        down: Reset the download limit.

    Returns:
        Status message.
    """
    result = await _call_session_manager("POST", "/automate", {"up": up, "down": down})

    if "error" in result:
        return f"Error: {result['error']}"

    directions = _format_directions(result.get("directions"))
    if result.get("success"):
        return f"{result.get('message', 'Automation started')}. Directions: {directions}."
    return f"{result.get('message', 'Automation not started')}. Directions: {directions}."


async def stop_automation() -> str:
    """Ask the automation to stop after its current cycle."""
    result = await _call_session_manager("GET", "/stop")

    if "error" in result:
        return f"Error: {result['error']}"

    return result.get("message", "Stop requested.")


async def automation_status() -> str:
    """Report whether the automation is running, for how long, and on which directions.

    Returns:
        JSON-formatted status.
    """
    result = await _call_session_manager("GET", "/status")

    if "error" in result:
        return f"Error: {result['error']}"

    return json.dumps(result, indent=2)


async def update_speed_directions(up: bool, down: bool) -> str:
    """Change which limits are reset; applies from the next cycle."""
    result = await _call_session_manager("POST", "/settings", {"up": up, "down": down})

    if "error" in result:
        return f"Error: {result['error']}"

    return f"Directions updated: {_format_directions(result.get('directions'))}."
