"""Pytest configuration and fixtures."""

import functools

import pytest

from flood_unthrottle.constants import DROPDOWN_LIST
from flood_unthrottle.models.automation import RetryPolicy
from flood_unthrottle.session_manager.supervisor import AutomationSupervisor
from flood_unthrottle.session_manager.workflow import SessionWorkflow
from tests.fakes import SessionFactory


@pytest.fixture
def fast_policy():
    """Menu policy with millisecond-scale waits."""
    return RetryPolicy(
        max_attempts=3,
        delay_ms=2,
        attempt_timeout_ms=1,
        wait_for_selector=DROPDOWN_LIST,
    )


@pytest.fixture
def fast_workflow(fast_policy):
    """Build a SessionWorkflow with no settle, idle or cycle delays worth waiting on."""

    def build(session_factory, **kwargs):
        options = {
            "session_factory": session_factory,
            "menu_policy": fast_policy,
            "login_timeout_ms": 1,
            "settle_seconds": 0,
            "idle_poll_seconds": 0.005,
            "cycle_interval_seconds": 0.001,
        }
        options.update(kwargs)
        return functools.partial(SessionWorkflow, **options)

    return build


@pytest.fixture
def sessions():
    return SessionFactory()


@pytest.fixture
def supervisor(fast_workflow, sessions):
    return AutomationSupervisor(
        workflow_factory=fast_workflow(sessions),
        username="admin",
        password="secret",
    )
