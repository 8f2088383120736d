"""Event bus dispatch tests."""

from __future__ import annotations

import asyncio
from typing import Any

from core.event_bus import EventBus


def test_sync_handlers_run_inline() -> None:
    bus = EventBus()
    seen: list[dict[str, Any]] = []
    bus.subscribe("window_focused", seen.append)

    bus.emit("window_focused", {"app": "Editor"})
    bus.emit("window_unfocused", {"app": "Editor"})

    assert seen == [{"app": "Editor"}]


def test_async_handlers_run_to_completion_outside_a_loop() -> None:
    bus = EventBus()
    seen: list[str] = []

    async def handler(payload: dict[str, Any]) -> None:
        await asyncio.sleep(0)
        seen.append(payload["app"])

    bus.subscribe("window_unfocused", handler)
    bus.emit("window_unfocused", {"app": "Browser"})

    assert seen == ["Browser"]
    assert bus.pending == 0


def test_async_handlers_are_scheduled_inside_a_loop() -> None:
    bus = EventBus()
    seen: list[str] = []

    async def handler(payload: dict[str, Any]) -> None:
        await asyncio.sleep(0)
        seen.append(payload["app"])

    bus.subscribe("window_unfocused", handler)

    async def scenario() -> None:
        bus.emit("window_unfocused", {"app": "Browser"})
        assert seen == []
        assert bus.pending == 1
        await bus.drain()

    asyncio.run(scenario())
    assert seen == ["Browser"]
    assert bus.pending == 0


def test_failing_handler_does_not_break_drain() -> None:
    bus = EventBus()

    async def broken(_payload: dict[str, Any]) -> None:
        raise RuntimeError("boom")

    bus.subscribe("window_unfocused", broken)

    async def scenario() -> None:
        bus.emit("window_unfocused", {"app": "Browser"})
        await bus.drain()

    asyncio.run(scenario())
    assert bus.pending == 0


def test_cancel_pending() -> None:
    bus = EventBus()

    async def slow(_payload: dict[str, Any]) -> None:
        await asyncio.sleep(30)

    bus.subscribe("window_unfocused", slow)

    async def scenario() -> None:
        bus.emit("window_unfocused", {"app": "Browser"})
        await asyncio.sleep(0)
        bus.cancel_pending()
        await bus.drain()

    asyncio.run(scenario())
    assert bus.pending == 0
