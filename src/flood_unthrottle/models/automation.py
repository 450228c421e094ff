"""Pydantic models for the automation state, directions and retry policies."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..constants import DEFAULT_ATTEMPT_TIMEOUT_MS, DEFAULT_DELAY_MS, DEFAULT_MAX_ATTEMPTS


class AutomationState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    STOPPING = "stopping"


class Direction(str, Enum):
    """Throttling axis kept reset by the cycle. Declaration order is toggle order."""

    UP = "up"
    DOWN = "down"


ALL_DIRECTIONS: frozenset[Direction] = frozenset(Direction)


def ordered(directions: frozenset[Direction]) -> list[Direction]:
    """Return the enabled directions in toggle order (up before down)."""
    return [d for d in Direction if d in directions]


class DirectionSettings(BaseModel):
    """Wire form of a direction set: {"up": bool, "down": bool}."""

    model_config = ConfigDict(extra="ignore")

    up: bool = True
    down: bool = True

    def to_directions(self) -> frozenset[Direction]:
        enabled = set()
        if self.up:
            enabled.add(Direction.UP)
        if self.down:
            enabled.add(Direction.DOWN)
        return frozenset(enabled)

    @classmethod
    def from_directions(cls, directions: frozenset[Direction]) -> DirectionSettings:
        return cls(up=Direction.UP in directions, down=Direction.DOWN in directions)


class RetryPolicy(BaseModel):
    """Parameters for one locate-and-act call.

    ``wait_for_selector`` makes success require a secondary element to
    appear; ``should_disappear`` makes it require the located element to
    vanish. With neither, locating (and clicking) is enough.
    """

    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=DEFAULT_MAX_ATTEMPTS, ge=1)
    delay_ms: int = Field(default=DEFAULT_DELAY_MS, ge=0)
    attempt_timeout_ms: int = Field(default=DEFAULT_ATTEMPT_TIMEOUT_MS, gt=0)
    click_on_found: bool = True
    wait_for_selector: Optional[str] = None
    should_disappear: bool = False

    @model_validator(mode="after")
    def _check_bounds(self) -> RetryPolicy:
        if self.wait_for_selector and self.should_disappear:
            raise ValueError("wait_for_selector and should_disappear are exclusive")
        if self.attempt_timeout_ms >= self.delay_ms:
            raise ValueError("attempt_timeout_ms must be shorter than delay_ms")
        return self


class SessionMetadata(BaseModel):
    """Recorded when a start request is accepted."""

    started_at: datetime
    directions: frozenset[Direction] = ALL_DIRECTIONS


class MenuOption(BaseModel):
    """One rendered option of the speed limit dropdown."""

    index: int
    label: str


class AutomationStatus(BaseModel):
    """Snapshot returned by the supervisor's status query."""

    state: AutomationState = AutomationState.IDLE
    started_at: Optional[datetime] = None
    uptime: Optional[float] = None
    directions: Optional[DirectionSettings] = None
    cycles: int = 0

    def to_response(self) -> dict:
        """Render the /status JSON body."""
        if self.state == AutomationState.IDLE:
            return {"status": "stopped"}
        body = {
            "status": "running",
            "uptime": self.uptime,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "directions": self.directions.model_dump() if self.directions else None,
            "cycles": self.cycles,
        }
        if self.state == AutomationState.STOPPING:
            body["stopRequested"] = True
        return body
