"""Bounded retry wrapper around locating, clicking and checking an element."""

from __future__ import annotations

import asyncio
import logging
import sys

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..errors import ElementNotFound, NoBoundingBox, RetryExhausted
from ..models.automation import RetryPolicy
from .interaction import human_like_click

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)


async def _postcondition_met(page: Page, selector: str, policy: RetryPolicy) -> bool:
    """Check the policy's success condition after a click."""
    try:
        if policy.should_disappear:
            await page.wait_for_selector(
                selector, state="hidden", timeout=policy.attempt_timeout_ms
            )
        elif policy.wait_for_selector:
            await page.wait_for_selector(
                policy.wait_for_selector, timeout=policy.attempt_timeout_ms
            )
    except PlaywrightTimeoutError:
        if policy.should_disappear:
            logger.info(f"Element {selector} did not disappear, retrying...")
        else:
            logger.info(f"Target selector {policy.wait_for_selector} not found, retrying...")
        return False
    return True


async def locate_and_act(page: Page, selector: str, policy: RetryPolicy | None = None) -> bool:
    """Locate ``selector``, optionally click it, and verify the outcome.

    Makes at most ``policy.max_attempts`` attempts. A locate timeout, a
    missing element, an unrendered element or an unmet postcondition all
    count as one failed attempt and are followed by ``policy.delay_ms`` of
    sleep when attempts remain.

    Returns:
        True once the policy's success condition holds.

    Raises:
        RetryExhausted: every attempt failed.
    """
    policy = policy or RetryPolicy()

    for attempt in range(1, policy.max_attempts + 1):
        try:
            await page.wait_for_selector(selector, timeout=policy.attempt_timeout_ms)

            if not policy.click_on_found:
                logger.info(f"Found {selector} but did not click")
                return True

            await human_like_click(page, selector)
            logger.info(f"Found and clicked {selector}")

            if await _postcondition_met(page, selector, policy):
                return True
        except (PlaywrightTimeoutError, ElementNotFound, NoBoundingBox) as e:
            logger.info(f"Attempt {attempt}/{policy.max_attempts} for {selector} failed: {e}")

        if attempt < policy.max_attempts:
            await asyncio.sleep(policy.delay_ms / 1000)

    raise RetryExhausted(selector, policy.max_attempts)
