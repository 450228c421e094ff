"""Tests for the bounded retry locator."""

from unittest.mock import AsyncMock, call, patch

import pytest

from flood_unthrottle.errors import RetryExhausted
from flood_unthrottle.models.automation import RetryPolicy
from flood_unthrottle.session_manager.locator import locate_and_act
from tests.fakes import FakePage

BUTTON = "svg.icon--limits"
MENU = ".dropdown__list"


def policy(**kwargs) -> RetryPolicy:
    return RetryPolicy(delay_ms=2, attempt_timeout_ms=1, **kwargs)


class TestRetryBound:
    @pytest.mark.asyncio
    async def test_never_resolving_selector_makes_exactly_max_attempts(self) -> None:
        page = FakePage()
        with pytest.raises(RetryExhausted) as exc_info:
            await locate_and_act(page, BUTTON, policy(max_attempts=3))

        assert page.wait_count(BUTTON) == 3
        assert exc_info.value.selector == BUTTON
        assert exc_info.value.attempts == 3

    @pytest.mark.asyncio
    async def test_sleeps_between_attempts_but_not_after_the_last(self) -> None:
        page = FakePage()
        with patch(
            "flood_unthrottle.session_manager.locator.asyncio.sleep", new_callable=AsyncMock
        ) as sleep:
            with pytest.raises(RetryExhausted):
                await locate_and_act(
                    page, BUTTON, RetryPolicy(max_attempts=4, delay_ms=250, attempt_timeout_ms=1)
                )

        assert sleep.await_count == 3
        assert sleep.await_args_list == [call(0.25)] * 3

    @pytest.mark.asyncio
    async def test_unrendered_element_counts_as_failed_attempt(self) -> None:
        page = FakePage(present={BUTTON}, boxes={BUTTON: None})
        with pytest.raises(RetryExhausted):
            await locate_and_act(page, BUTTON, policy(max_attempts=2))
        assert page.wait_count(BUTTON) == 2
        assert page.clicks == []

    @pytest.mark.asyncio
    async def test_element_appearing_late_succeeds(self) -> None:
        page = FakePage()
        original_wait = page.wait_for_selector

        async def wait_then_render(selector, state="visible", timeout=0):
            if page.wait_count(BUTTON) == 1:
                page.present.add(BUTTON)
            return await original_wait(selector, state=state, timeout=timeout)

        page.wait_for_selector = wait_then_render
        assert await locate_and_act(page, BUTTON, policy(max_attempts=3)) is True
        assert page.clicks == [BUTTON]


class TestSuccessConditions:
    @pytest.mark.asyncio
    async def test_no_condition_succeeds_after_click(self) -> None:
        page = FakePage(present={BUTTON})
        assert await locate_and_act(page, BUTTON, policy()) is True
        assert page.clicks == [BUTTON]

    @pytest.mark.asyncio
    async def test_locate_only_does_not_click(self) -> None:
        page = FakePage(present={BUTTON})
        assert await locate_and_act(page, BUTTON, policy(click_on_found=False)) is True
        assert page.clicks == []

    @pytest.mark.asyncio
    async def test_secondary_element_appears(self) -> None:
        page = FakePage(present={BUTTON})
        page.on_click[BUTTON] = lambda: page.present.add(MENU)

        assert await locate_and_act(page, BUTTON, policy(wait_for_selector=MENU)) is True
        assert page.clicks == [BUTTON]

    @pytest.mark.asyncio
    async def test_click_is_reissued_until_menu_opens(self) -> None:
        page = FakePage(present={BUTTON})

        def open_on_second_click():
            if len(page.clicks) == 2:
                page.present.add(MENU)

        page.on_click[BUTTON] = open_on_second_click

        assert await locate_and_act(page, BUTTON, policy(max_attempts=3, wait_for_selector=MENU))
        assert page.clicks == [BUTTON, BUTTON]

    @pytest.mark.asyncio
    async def test_secondary_element_never_appears(self) -> None:
        page = FakePage(present={BUTTON})
        with pytest.raises(RetryExhausted):
            await locate_and_act(page, BUTTON, policy(max_attempts=3, wait_for_selector=MENU))
        assert page.clicks == [BUTTON] * 3

    @pytest.mark.asyncio
    async def test_element_disappears(self) -> None:
        page = FakePage(present={BUTTON})
        page.on_click[BUTTON] = lambda: page.present.discard(BUTTON)

        assert await locate_and_act(page, BUTTON, policy(should_disappear=True)) is True
        assert page.wait_count(BUTTON, "hidden") == 1

    @pytest.mark.asyncio
    async def test_element_that_never_disappears_exhausts_retries(self) -> None:
        page = FakePage(present={BUTTON})
        with pytest.raises(RetryExhausted):
            await locate_and_act(page, BUTTON, policy(max_attempts=4, should_disappear=True))
        assert page.clicks == [BUTTON] * 4
        assert page.wait_count(BUTTON, "hidden") == 4
