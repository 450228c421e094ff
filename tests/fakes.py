"""In-memory stand-ins for a Playwright page and the browser session."""

from __future__ import annotations

from typing import Callable, Optional

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from flood_unthrottle.constants import (
    DROPDOWN_LIST,
    PASSWORD_INPUT,
    SPEED_LIMITS_BUTTON,
    SUBMIT_BUTTON,
    USERNAME_INPUT,
)
from flood_unthrottle.errors import BrowserLaunchError

DEFAULT_BOX = {"x": 100.0, "y": 200.0, "width": 40.0, "height": 20.0}
FLOOD_OPTIONS = ["1 kB/s", "1 MB/s", "10 MB/s", "Unlimited"]


class FakeElement:
    def __init__(self, box: Optional[dict]):
        self._box = box

    async def bounding_box(self) -> Optional[dict]:
        return self._box


class FakeMouse:
    def __init__(self, page: FakePage):
        self._page = page
        self.moves: list[tuple[float, float]] = []
        self.downs = 0
        self.ups = 0

    async def move(self, x: float, y: float):
        self.moves.append((x, y))

    async def down(self):
        self.downs += 1

    async def up(self):
        self.ups += 1
        self._page._clicked(self._page.last_queried)


class FakeKeyboard:
    def __init__(self):
        self.pressed: list[str] = []

    async def press(self, key: str):
        self.pressed.append(key)


class FakePage:
    """Page whose DOM is a set of present selectors.

    ``on_click`` maps a selector to a callback run after it is clicked
    through the mouse; ``on_option`` runs after a dropdown option is chosen
    and ``on_scan`` right after the option labels are read.
    """

    def __init__(
        self,
        present: Optional[set[str]] = None,
        options: Optional[list[str]] = None,
        boxes: Optional[dict[str, Optional[dict]]] = None,
    ):
        self.present = set(present or ())
        self.options = list(FLOOD_OPTIONS if options is None else options)
        self.boxes = boxes or {}
        self.mouse = FakeMouse(self)
        self.keyboard = FakeKeyboard()
        self.on_click: dict[str, Callable[[], None]] = {}
        self.on_option: Optional[Callable[[str], None]] = None
        self.on_scan: Optional[Callable[[], None]] = None
        self.last_queried: Optional[str] = None
        self.waits: list[tuple[str, str]] = []
        self.clicks: list[str] = []
        self.chosen: list[str] = []
        self.typed: list[tuple[str, str]] = []
        self.focused: list[str] = []
        self.visited: list[str] = []
        self.goto_error: Optional[Exception] = None

    def wait_count(self, selector: str, state: str = "visible") -> int:
        return self.waits.count((selector, state))

    async def goto(self, url: str, **kwargs):
        if self.goto_error:
            raise self.goto_error
        self.visited.append(url)

    async def wait_for_selector(self, selector: str, state: str = "visible", timeout: float = 0):
        self.waits.append((selector, state))
        if state == "hidden":
            if selector in self.present:
                raise PlaywrightTimeoutError(f"Timeout {timeout}ms waiting for {selector} to hide")
            return None
        if selector not in self.present:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms waiting for {selector}")
        return FakeElement(self.boxes.get(selector, DEFAULT_BOX))

    async def query_selector(self, selector: str):
        self.last_queried = selector
        if selector not in self.present:
            return None
        return FakeElement(self.boxes.get(selector, DEFAULT_BOX))

    async def evaluate(self, script: str, arg=None):
        if isinstance(arg, str):
            labels = list(self.options)
            if self.on_scan:
                self.on_scan()
            return labels
        selector, index, expected = arg
        if index >= len(self.options) or self.options[index].strip() != expected:
            return False
        label = self.options[index]
        self.chosen.append(label)
        if self.on_option:
            self.on_option(label)
        return True

    async def type(self, selector: str, text: str):
        self.typed.append((selector, text))

    async def focus(self, selector: str):
        self.focused.append(selector)

    def _clicked(self, selector: Optional[str]):
        self.clicks.append(selector)
        callback = self.on_click.get(selector)
        if callback:
            callback()


def flood_page(**kwargs) -> FakePage:
    """A logged-out Flood page whose speed limit dropdown always opens."""
    present = {USERNAME_INPUT, PASSWORD_INPUT, SUBMIT_BUTTON, SPEED_LIMITS_BUTTON, DROPDOWN_LIST}
    return FakePage(present=present, **kwargs)


class FakeSession:
    """Browser session that hands out a fake page and counts releases."""

    def __init__(self, page: Optional[FakePage] = None, fail_on_start: bool = False):
        self.page = page or flood_page()
        self.fail_on_start = fail_on_start
        self.starts = 0
        self.stops = 0

    async def start(self):
        self.starts += 1
        if self.fail_on_start:
            raise BrowserLaunchError("Failed to start browser: no executable")
        return self.page

    async def stop(self):
        self.stops += 1


class SessionFactory:
    """Records every session the workflow asks for."""

    def __init__(self, page: Optional[FakePage] = None, fail_on_start: bool = False):
        self._page = page
        self._fail_on_start = fail_on_start
        self.sessions: list[FakeSession] = []

    def __call__(self) -> FakeSession:
        session = FakeSession(self._page, self._fail_on_start)
        self.sessions.append(session)
        return session
