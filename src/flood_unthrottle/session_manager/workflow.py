"""The login-then-cycle procedure bound to one browser session."""

from __future__ import annotations

import asyncio
import logging
import sys
from enum import Enum
from typing import Callable, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..config import (
    BROWSER_TIMEOUT,
    CYCLE_INTERVAL_SECONDS,
    DOWN_LIMIT_TEXT,
    IDLE_POLL_SECONDS,
    LOGIN_FORM_TIMEOUT_MS,
    SETTLE_SECONDS,
    UP_LIMIT_TEXT,
)
from ..constants import (
    DROPDOWN_LIST,
    MENU_ATTEMPT_TIMEOUT_MS,
    MENU_DELAY_MS,
    MENU_MAX_ATTEMPTS,
    PASSWORD_INPUT,
    SPEED_LIMITS_BUTTON,
    SUBMIT_BUTTON,
    USERNAME_INPUT,
)
from ..errors import LoginFormNotFound
from ..models.automation import Direction, RetryPolicy, ordered
from .browser import BrowserSession
from .locator import locate_and_act
from .menu import select_option

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

MENU_POLICY = RetryPolicy(
    max_attempts=MENU_MAX_ATTEMPTS,
    delay_ms=MENU_DELAY_MS,
    attempt_timeout_ms=MENU_ATTEMPT_TIMEOUT_MS,
    wait_for_selector=DROPDOWN_LIST,
)


class WorkflowPhase(str, Enum):
    NOT_STARTED = "not_started"
    AUTHENTICATING = "authenticating"
    CYCLING = "cycling"
    TERMINATED = "terminated"


class SessionWorkflow:
    """Logs into Flood and keeps resetting the speed limits until told to stop.

    The workflow never touches supervisor state directly. It polls
    ``should_continue`` once per cycle and reads the enabled directions
    through ``get_directions`` at the start of every cycle.
    """

    def __init__(
        self,
        url: str,
        get_directions: Callable[[], frozenset[Direction]],
        should_continue: Callable[[], bool],
        username: str = "",
        password: str = "",
        session_factory: Callable[[], BrowserSession] = BrowserSession,
        targets: Optional[dict[Direction, str]] = None,
        menu_policy: RetryPolicy = MENU_POLICY,
        login_timeout_ms: int = LOGIN_FORM_TIMEOUT_MS,
        settle_seconds: float = SETTLE_SECONDS,
        idle_poll_seconds: float = IDLE_POLL_SECONDS,
        cycle_interval_seconds: float = CYCLE_INTERVAL_SECONDS,
    ):
        self.url = url
        self._get_directions = get_directions
        self._should_continue = should_continue
        self._username = username or ""
        self._password = password or ""
        self._session_factory = session_factory
        self._targets = targets or {Direction.UP: UP_LIMIT_TEXT, Direction.DOWN: DOWN_LIMIT_TEXT}
        self._menu_policy = menu_policy
        self._login_timeout_ms = login_timeout_ms
        self._settle_seconds = settle_seconds
        self._idle_poll_seconds = idle_poll_seconds
        self._cycle_interval_seconds = cycle_interval_seconds
        self.phase = WorkflowPhase.NOT_STARTED
        self.cycles = 0

    async def run(self) -> None:
        """Acquire a browser, log in and cycle; always release the browser."""
        session = self._session_factory()
        try:
            page = await session.start()
            await self.authenticate(page)
            await self.cycle(page)
        finally:
            self.phase = WorkflowPhase.TERMINATED
            await session.stop()

    async def authenticate(self, page: Page) -> None:
        """Fill and submit the Flood login form.

        Raises:
            LoginFormNotFound: the page could not be opened, or the username
                or password input never rendered.
        """
        self.phase = WorkflowPhase.AUTHENTICATING
        logger.info(f"Navigating to {self.url}")
        try:
            await page.goto(self.url, wait_until="domcontentloaded", timeout=BROWSER_TIMEOUT)
        except PlaywrightError as e:
            logger.error(f"Could not open {self.url}: {e}")
            raise LoginFormNotFound(self.url) from e

        try:
            await page.wait_for_selector(USERNAME_INPUT, timeout=self._login_timeout_ms)
            await page.wait_for_selector(PASSWORD_INPUT, timeout=self._login_timeout_ms)
        except PlaywrightTimeoutError as e:
            raise LoginFormNotFound(self.url) from e

        logger.info("Filling login form...")
        await page.type(USERNAME_INPUT, self._username)
        await page.type(PASSWORD_INPUT, self._password)

        logger.info("Submitting login form...")
        await page.focus(SUBMIT_BUTTON)
        await page.keyboard.press("Enter")

    async def cycle(self, page: Page) -> None:
        """Reset every enabled direction, forever, until cancelled."""
        self.phase = WorkflowPhase.CYCLING
        while self._should_continue():
            directions = ordered(self._get_directions())
            if not directions:
                logger.debug("No direction enabled, waiting...")
                await asyncio.sleep(self._idle_poll_seconds)
                continue

            for direction in directions:
                await self.toggle(page, direction)
                await asyncio.sleep(self._settle_seconds)

            self.cycles += 1
            await asyncio.sleep(self._cycle_interval_seconds)

        logger.info(f"Stop requested, leaving cycle after {self.cycles} cycles")

    async def toggle(self, page: Page, direction: Direction) -> None:
        """Open the speed limit dropdown and pick the direction's target option."""
        label = self._targets[direction]
        logger.info(f"Looking for speed limits button ({direction.value})...")
        await locate_and_act(page, SPEED_LIMITS_BUTTON, self._menu_policy)
        logger.info(f"Clicking {label} option...")
        await select_option(page, label)
