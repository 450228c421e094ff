"""
Automation Exceptions

Failures raised by the browser workflow and its supervisor.
"""


class AutomationError(Exception):
    """Base class for every failure of the unthrottling automation."""


class InvalidConfiguration(AutomationError):
    """Raised when the target URL is missing or not an absolute http(s) URL."""


class ElementNotFound(AutomationError):
    """Raised when a selector matches nothing on the page."""

    def __init__(self, selector: str):
        super().__init__(f"Element {selector} not found")
        self.selector = selector


class NoBoundingBox(AutomationError):
    """Raised when an element exists but is not rendered."""

    def __init__(self, selector: str):
        super().__init__(f"Cannot get bounding box for {selector}")
        self.selector = selector


class RetryExhausted(AutomationError):
    """Raised when the locator gives up on a selector."""

    def __init__(self, selector: str, attempts: int):
        super().__init__(
            f"Could not find {selector} or complete the requested operation "
            f"after {attempts} attempts"
        )
        self.selector = selector
        self.attempts = attempts


class LoginFormNotFound(AutomationError):
    """Raised when the login inputs never render."""

    def __init__(self, url: str):
        super().__init__(f"Login form not found at {url}")
        self.url = url


class OptionNotFound(AutomationError):
    """Raised when no dropdown option carries the expected label."""

    def __init__(self, label: str):
        super().__init__(f"Could not find {label} option")
        self.label = label


class BrowserLaunchError(AutomationError):
    """Raised when the browser session cannot be created."""
