"""Tests for the growable feed window."""

from __future__ import annotations

import anyio
import pytest

from conftest import make_event

from marketplace_feed.application.use_cases.activity import FeedWindowController


def _events(count: int):
    return [make_event(index) for index in range(count)]


def test_initial_window_is_capped_by_total():
    controller = FeedWindowController(initial=20, increment=20, delay=0)
    controller.replace(_events(5))

    assert controller.display_count == 5
    assert controller.has_more is False
    assert len(controller.visible()) == 5


@pytest.mark.parametrize("initial, increment, delay", [(0, 20, 0), (20, 0, 0), (20, 20, -1)])
def test_invalid_configuration_is_rejected(initial, increment, delay):
    with pytest.raises(ValueError):
        FeedWindowController(initial=initial, increment=increment, delay=delay)


@pytest.mark.anyio
async def test_load_more_grows_by_increment_until_exhausted():
    controller = FeedWindowController(initial=20, increment=20, delay=0.01)
    controller.replace(_events(45))

    assert (controller.display_count, controller.has_more) == (20, True)
    assert await controller.load_more() is True
    assert (controller.display_count, controller.has_more) == (40, True)
    assert await controller.load_more() is True
    assert (controller.display_count, controller.has_more) == (45, False)
    assert await controller.load_more() is False
    assert controller.display_count == 45


@pytest.mark.anyio
async def test_concurrent_load_more_advances_once():
    controller = FeedWindowController(initial=20, increment=20, delay=0.05)
    controller.replace(_events(100))
    outcomes: list[bool] = []

    async def _load() -> None:
        outcomes.append(await controller.load_more())

    async with anyio.create_task_group() as group:
        group.start_soon(_load)
        group.start_soon(_load)

    assert sorted(outcomes) == [False, True]
    assert controller.display_count == 40
    assert controller.loading_more is False


@pytest.mark.anyio
async def test_load_more_applies_to_the_list_current_at_completion():
    controller = FeedWindowController(initial=20, increment=20, delay=0.05)
    controller.replace(_events(30))

    async with anyio.create_task_group() as group:
        group.start_soon(controller.load_more)
        await anyio.sleep(0.01)
        assert controller.loading_more is True
        controller.replace(_events(80))

    assert controller.display_count == 40
    assert controller.total_count == 80


@pytest.mark.anyio
async def test_replace_keeps_requested_display_count():
    controller = FeedWindowController(initial=20, increment=20, delay=0)
    controller.replace(_events(50))
    await controller.load_more()

    controller.replace(_events(60))

    assert controller.display_count == 40


@pytest.mark.anyio
async def test_reset_discards_pending_load_more():
    controller = FeedWindowController(initial=20, increment=20, delay=0.05)
    controller.replace(_events(100))

    async with anyio.create_task_group() as group:
        group.start_soon(controller.load_more)
        await anyio.sleep(0.01)
        controller.reset()
        assert controller.visible() == []
        controller.replace(_events(100))

    assert controller.display_count == 20
