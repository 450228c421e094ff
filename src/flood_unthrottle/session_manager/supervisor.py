"""Process-wide idle/running/stopping state machine around one workflow."""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional
from urllib.parse import urlparse

from ..config import FLOOD_PWD, FLOOD_USER, SHUTDOWN_TIMEOUT_SECONDS
from ..errors import InvalidConfiguration
from ..models.automation import (
    ALL_DIRECTIONS,
    AutomationState,
    AutomationStatus,
    Direction,
    DirectionSettings,
    SessionMetadata,
)
from .workflow import SessionWorkflow

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


class StartResult(str, Enum):
    ACCEPTED = "accepted"
    ALREADY_RUNNING = "already_running"


class StopResult(str, Enum):
    ACCEPTED = "accepted"
    NOT_RUNNING = "not_running"


def is_valid_url(url: Optional[str]) -> bool:
    """Accept absolute http(s) URLs with a host."""
    if not url:
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class AutomationSupervisor:
    """Owns the automation state and at most one running workflow task.

    The Idle -> Running transition is a check-and-set with no ``await`` in
    between, so concurrent start requests on the event loop cannot both
    launch a workflow.
    """

    def __init__(
        self,
        workflow_factory: Optional[Callable[..., SessionWorkflow]] = None,
        username: str = FLOOD_USER,
        password: str = FLOOD_PWD,
    ):
        self._workflow_factory = workflow_factory or SessionWorkflow
        self._username = username
        self._password = password
        self._state = AutomationState.IDLE
        self._metadata: Optional[SessionMetadata] = None
        self._directions: frozenset[Direction] = ALL_DIRECTIONS
        self._workflow: Optional[SessionWorkflow] = None
        self._task: Optional[asyncio.Task] = None
        self.last_error: Optional[str] = None

    @property
    def state(self) -> AutomationState:
        return self._state

    @property
    def directions(self) -> frozenset[Direction]:
        return self._directions

    @property
    def task(self) -> Optional[asyncio.Task]:
        return self._task

    def start(self, url: Optional[str], directions: Optional[frozenset[Direction]] = None) -> StartResult:
        """Launch the workflow in the background unless one is already active.

        Raises:
            InvalidConfiguration: ``url`` is missing or not an absolute URL.
        """
        if self._state != AutomationState.IDLE:
            logger.info("Start requested while automation is already running")
            return StartResult.ALREADY_RUNNING

        if not is_valid_url(url):
            logger.error(f"Invalid URL: {url!r}")
            raise InvalidConfiguration("Invalid URL configuration")

        self._state = AutomationState.RUNNING
        if directions is not None:
            self._directions = frozenset(directions)
        self._metadata = SessionMetadata(
            started_at=datetime.now(timezone.utc),
            directions=self._directions,
        )
        self.last_error = None

        self._workflow = self._workflow_factory(
            url=url,
            get_directions=lambda: self._directions,
            should_continue=lambda: self._state == AutomationState.RUNNING,
            username=self._username,
            password=self._password,
        )
        self._task = asyncio.create_task(self._run(self._workflow))
        logger.info(
            f"Automation started for {url} "
            f"(directions={sorted(d.value for d in self._directions)})"
        )
        return StartResult.ACCEPTED

    async def _run(self, workflow: SessionWorkflow) -> None:
        """Run the workflow and turn any outcome into a reset to Idle."""
        try:
            await workflow.run()
            logger.info("Automation stopped.")
        except asyncio.CancelledError:
            logger.info("Automation task cancelled.")
            raise
        except Exception as e:
            self.last_error = str(e)
            logger.error(f"Automation failed: {e}", exc_info=True)
        finally:
            self._state = AutomationState.IDLE
            self._metadata = None
            self._workflow = None

    def stop(self) -> StopResult:
        """Ask the running workflow to leave at its next cycle boundary."""
        if self._state == AutomationState.IDLE:
            return StopResult.NOT_RUNNING
        self._state = AutomationState.STOPPING
        logger.info("Stop requested")
        return StopResult.ACCEPTED

    def status(self) -> AutomationStatus:
        if self._state == AutomationState.IDLE or self._metadata is None:
            return AutomationStatus(state=AutomationState.IDLE)

        uptime = (datetime.now(timezone.utc) - self._metadata.started_at).total_seconds()
        return AutomationStatus(
            state=self._state,
            started_at=self._metadata.started_at,
            uptime=round(uptime, 3),
            directions=DirectionSettings.from_directions(self._directions),
            cycles=self._workflow.cycles if self._workflow else 0,
        )

    def update_directions(self, directions: frozenset[Direction]) -> frozenset[Direction]:
        """Replace the direction set read by the next cycle."""
        self._directions = frozenset(directions)
        if self._metadata is not None:
            self._metadata = self._metadata.model_copy(update={"directions": self._directions})
        logger.info(f"Directions updated to {sorted(d.value for d in self._directions)}")
        return self._directions

    async def shutdown(self, timeout: float = SHUTDOWN_TIMEOUT_SECONDS) -> None:
        """Stop the workflow and wait for it, cancelling it past ``timeout``."""
        task = self._task
        if task is None or task.done():
            return

        self.stop()
        try:
            await asyncio.wait_for(asyncio.shield(task), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning("Automation did not stop in time, cancelling it")
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
