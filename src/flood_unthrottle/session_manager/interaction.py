"""Pointer-level clicks that look human to the page."""

from __future__ import annotations

import asyncio
import random

from playwright.async_api import Page

from ..constants import CLICK_HOLD_MS, CLICK_JITTER_PX
from ..errors import ElementNotFound, NoBoundingBox


def jittered_point(box: dict, jitter: float = CLICK_JITTER_PX) -> tuple[float, float]:
    """Pick a point within ±jitter of the centre of a bounding box."""
    x = box["x"] + box["width"] / 2 + random.uniform(-jitter, jitter)
    y = box["y"] + box["height"] / 2 + random.uniform(-jitter, jitter)
    return x, y


async def human_like_click(page: Page, selector: str) -> None:
    """Move to the element, press, hold briefly and release.

    Raises:
        ElementNotFound: nothing matches ``selector``.
        NoBoundingBox: the element is not currently rendered.
    """
    element = await page.query_selector(selector)
    if element is None:
        raise ElementNotFound(selector)

    box = await element.bounding_box()
    if box is None:
        raise NoBoundingBox(selector)

    x, y = jittered_point(box)
    await page.mouse.move(x, y)
    await page.mouse.down()
    await asyncio.sleep(CLICK_HOLD_MS / 1000)
    await page.mouse.up()
