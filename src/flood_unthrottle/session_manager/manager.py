"""Control service HTTP endpoints.

Runs as a lightweight web server that starts, stops and reports on the
unthrottling automation.

Endpoints:
    GET  /health            - Liveness check
    GET  /automate          - Start the automation (query: up, down)
    POST /automate          - Start the automation (JSON: {"up", "down"})
    GET  /stop              - Request a cooperative stop
    GET  /status            - Return automation state
    POST /settings          - Change the enabled directions
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Optional

from aiohttp import web
from pydantic import ValidationError

from .. import config
from ..errors import InvalidConfiguration
from ..models.automation import AutomationState, DirectionSettings
from .supervisor import AutomationSupervisor, StartResult, StopResult

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

SUPERVISOR_KEY = web.AppKey("supervisor", AutomationSupervisor)


async def _read_directions(request: web.Request, required: bool) -> Optional[DirectionSettings]:
    """Parse {"up", "down"} from the JSON body or, for GET, the query string.

    Raises:
        web.HTTPBadRequest: the body is not valid JSON or has wrong types.
    """
    try:
        if request.can_read_body:
            body = await request.json()
            if not isinstance(body, dict):
                raise ValueError("Request body must be a JSON object")
            return DirectionSettings.model_validate(body)
        if "up" in request.query or "down" in request.query:
            return DirectionSettings.model_validate(
                {key: request.query[key] for key in ("up", "down") if key in request.query}
            )
    except (json.JSONDecodeError, ValidationError, ValueError) as e:
        raise web.HTTPBadRequest(
            text=json.dumps({"error": f"Invalid direction settings: {e}"}),
            content_type="application/json",
        )

    if required:
        raise web.HTTPBadRequest(
            text=json.dumps({"error": "Direction settings are required."}),
            content_type="application/json",
        )
    return None


# ── HTTP Handlers ────────────────────────────────────────────────────────────


async def handle_health(request: web.Request) -> web.Response:
    logger.debug("Health check requested")
    return web.json_response({"status": "ok"})


async def handle_automate(request: web.Request) -> web.Response:
    supervisor = request.app[SUPERVISOR_KEY]
    logger.info(f"Automation requested via {request.method}")
    settings = await _read_directions(request, required=False)
    directions = settings.to_directions() if settings else None

    try:
        result = supervisor.start(config.FLOOD_LINK, directions)
    except InvalidConfiguration:
        return web.json_response({"error": "Invalid URL configuration"}, status=400)

    current = DirectionSettings.from_directions(supervisor.directions).model_dump()
    if result == StartResult.ALREADY_RUNNING:
        return web.json_response({
            "success": False,
            "message": "Automation is already running",
            "status": "running",
            "directions": current,
        })

    return web.json_response({
        "success": True,
        "message": "Automation started",
        "status": "running",
        "directions": current,
    })


async def handle_stop(request: web.Request) -> web.Response:
    supervisor = request.app[SUPERVISOR_KEY]
    if supervisor.stop() == StopResult.NOT_RUNNING:
        return web.json_response({"message": "Automation is not running"})
    return web.json_response({"message": "Automation will stop after the current cycle"})


async def handle_status(request: web.Request) -> web.Response:
    supervisor = request.app[SUPERVISOR_KEY]
    return web.json_response(supervisor.status().to_response())


async def handle_settings(request: web.Request) -> web.Response:
    supervisor = request.app[SUPERVISOR_KEY]
    settings = await _read_directions(request, required=True)
    directions = supervisor.update_directions(settings.to_directions())
    running = supervisor.state != AutomationState.IDLE
    logger.info(f"Settings updated (automation running={running})")
    return web.json_response({
        "success": True,
        "directions": DirectionSettings.from_directions(directions).model_dump(),
    })


# ── App Factory ──────────────────────────────────────────────────────────────


async def on_cleanup(app: web.Application):
    await app[SUPERVISOR_KEY].shutdown()
    logger.info("Control service stopped.")


def create_app(supervisor: Optional[AutomationSupervisor] = None) -> web.Application:
    app = web.Application()
    app[SUPERVISOR_KEY] = supervisor or AutomationSupervisor()
    app.on_cleanup.append(on_cleanup)

    app.router.add_get("/health", handle_health)
    app.router.add_get("/automate", handle_automate)
    app.router.add_post("/automate", handle_automate)
    app.router.add_get("/stop", handle_stop)
    app.router.add_get("/status", handle_status)
    app.router.add_post("/settings", handle_settings)

    return app


def main():
    """Run the control service as a standalone HTTP service."""
    logging.basicConfig(
        stream=sys.stderr,
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    app = create_app()
    logger.info(
        f"Visit http://localhost:{config.SESSION_MANAGER_PORT}/automate to run the automation"
    )
    web.run_app(app, host=config.SESSION_MANAGER_HOST, port=config.SESSION_MANAGER_PORT)


if __name__ == "__main__":
    main()
