"""Dropdown option scanning and selection by visible label."""

from __future__ import annotations

import logging
import sys
from typing import Iterable, Optional

from playwright.async_api import Page

from ..constants import DROPDOWN_OPTION
from ..errors import OptionNotFound
from ..models.automation import MenuOption

logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s"))
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)

_SCAN_OPTIONS_JS = """
(selector) => Array.from(document.querySelectorAll(selector)).map(
    (el) => (el.textContent || "").trim()
)
"""

_CLICK_OPTION_JS = """
([selector, index, label]) => {
    const el = document.querySelectorAll(selector)[index];
    if (!el || (el.textContent || "").trim() !== label) return false;
    el.click();
    return true;
}
"""


def find_option(options: Iterable[MenuOption], label: str) -> Optional[MenuOption]:
    """Return the first option whose trimmed label equals ``label``."""
    wanted = label.strip()
    for option in options:
        if option.label.strip() == wanted:
            return option
    return None


async def scan_options(page: Page, selector: str = DROPDOWN_OPTION) -> list[MenuOption]:
    """Read the labels of every currently rendered dropdown option."""
    labels = await page.evaluate(_SCAN_OPTIONS_JS, selector)
    return [MenuOption(index=i, label=text) for i, text in enumerate(labels or [])]


async def select_option(page: Page, label: str, selector: str = DROPDOWN_OPTION) -> MenuOption:
    """Click the rendered option labelled ``label``.

    Raises:
        OptionNotFound: no option matches, or the option at the scanned
            position no longer carries the label when clicked.
    """
    options = await scan_options(page, selector)
    option = find_option(options, label)
    if option is None:
        logger.warning(f"No option labelled '{label}' among {[o.label for o in options]}")
        raise OptionNotFound(label)

    clicked = await page.evaluate(_CLICK_OPTION_JS, [selector, option.index, option.label.strip()])
    if not clicked:
        logger.warning(f"Option '{label}' changed before it could be clicked")
        raise OptionNotFound(label)

    logger.info(f"Clicked {label} option")
    return option
