"""Playwright browser automation: launch and teardown of the Flood tab."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from ..config import BROWSER_EXECUTABLE_PATH, BROWSER_HEADLESS, BROWSER_TIMEOUT
from ..errors import BrowserLaunchError

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

BROWSER_ARGS = [
    "--disable-blink-features=AutomationControlled",
    "--disable-dev-shm-usage",
    "--no-sandbox",
]


class BrowserSession:
    """One Chromium instance with a single page, owned by one workflow run."""

    def __init__(
        self,
        headless: Optional[bool] = None,
        executable_path: Optional[str] = None,
    ):
        self._headless = BROWSER_HEADLESS if headless is None else headless
        self._executable_path = executable_path or BROWSER_EXECUTABLE_PATH
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def is_running(self) -> bool:
        return self._page is not None

    @property
    def page(self) -> Optional[Page]:
        return self._page

    async def start(self) -> Page:
        """Launch the browser and open the page the workflow drives.

        Raises:
            BrowserLaunchError: Playwright or the browser failed to come up.
                Partially created resources stay attached so ``stop`` can
                release them.
        """
        if self.is_running:
            return self._page

        try:
            logger.info(
                f"Launching Chromium (headless={self._headless}, "
                f"executable={self._executable_path or 'bundled'})..."
            )
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                executable_path=self._executable_path,
                args=BROWSER_ARGS,
            )
            self._context = await self._browser.new_context(
                viewport={"width": 1366, "height": 768},
            )
            self._page = await self._context.new_page()
            self._page.set_default_timeout(BROWSER_TIMEOUT)
        except Exception as e:
            logger.error(f"Failed to start browser: {e}")
            raise BrowserLaunchError(f"Failed to start browser: {e}") from e

        return self._page

    async def stop(self):
        """Close the page, the browser and the Playwright driver."""
        logger.info("Stopping browser session...")

        try:
            if self._context:
                await self._context.close()
        except Exception as e:
            logger.warning(f"Error closing context: {e}")
        finally:
            self._context = None
            self._page = None

        try:
            if self._browser:
                await self._browser.close()
        except Exception as e:
            logger.warning(f"Error closing browser: {e}")
        finally:
            self._browser = None

        try:
            if self._playwright:
                await self._playwright.stop()
        except Exception as e:
            logger.warning(f"Error stopping playwright: {e}")
        finally:
            self._playwright = None

        logger.info("Browser session stopped.")
