"""Application configuration loaded from environment variables."""

import os

from dotenv import load_dotenv

load_dotenv()

# Flood target
FLOOD_LINK = os.getenv("FLOOD_LINK", "")
FLOOD_USER = os.getenv("FLOOD_USER", "")
FLOOD_PWD = os.getenv("FLOOD_PWD", "")

# Control service
SESSION_MANAGER_HOST = os.getenv("HOST", "0.0.0.0")
SESSION_MANAGER_PORT = int(os.getenv("PORT", "3000"))
_CLIENT_HOST = "127.0.0.1" if SESSION_MANAGER_HOST == "0.0.0.0" else SESSION_MANAGER_HOST
SESSION_MANAGER_URL = os.getenv(
    "SESSION_MANAGER_URL", f"http://{_CLIENT_HOST}:{SESSION_MANAGER_PORT}"
)

# Browser
BROWSER_EXECUTABLE_PATH = os.getenv("BROWSER_EXECUTABLE_PATH") or None
BROWSER_HEADLESS = os.getenv("BROWSER_HEADLESS", "false").lower() == "true"
BROWSER_TIMEOUT = int(os.getenv("BROWSER_TIMEOUT", "30000"))

# Option labels picked in the speed limit dropdown
UP_LIMIT_TEXT = os.getenv("FLOOD_UP_LIMIT_TEXT", "Unlimited")
DOWN_LIMIT_TEXT = os.getenv("FLOOD_DOWN_LIMIT_TEXT", "10 MB/s")

# Timings
LOGIN_FORM_TIMEOUT_MS = int(os.getenv("LOGIN_FORM_TIMEOUT_MS", "30000"))
SETTLE_SECONDS = 1.0
IDLE_POLL_SECONDS = 1.0
CYCLE_INTERVAL_SECONDS = float(os.getenv("CYCLE_INTERVAL_SECONDS", "5"))
SHUTDOWN_TIMEOUT_SECONDS = 30.0
