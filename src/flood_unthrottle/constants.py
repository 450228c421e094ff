"""Flood web UI selectors and interaction tuning."""

# ── Login form ───────────────────────────────────────────────────────────────

USERNAME_INPUT = 'input[type="text"]'
PASSWORD_INPUT = 'input[type="password"]'
SUBMIT_BUTTON = "button"

# ── Speed limit dropdown ─────────────────────────────────────────────────────

SPEED_LIMITS_BUTTON = "svg.icon--limits"
DROPDOWN_LIST = ".dropdown__list"
DROPDOWN_OPTION = "li.dropdown__item.menu__item.is-selectable"

# ── Pointer emulation ────────────────────────────────────────────────────────

CLICK_JITTER_PX = 5
CLICK_HOLD_MS = 20

# ── Retry policies ───────────────────────────────────────────────────────────

DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_DELAY_MS = 1000
DEFAULT_ATTEMPT_TIMEOUT_MS = 750

MENU_MAX_ATTEMPTS = 10
MENU_DELAY_MS = 1500
MENU_ATTEMPT_TIMEOUT_MS = 1000
