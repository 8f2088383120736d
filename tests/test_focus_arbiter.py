"""Focus arbitration tests with stubbed window hosts."""

from __future__ import annotations

import asyncio
import json
import random
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from core.diagnostics import FocusDiagnostics
from core.focus_arbiter import (
    FOCUSED,
    NO_FOCUS,
    NO_FOCUS_MESSAGES,
    STILL_VISIBLE,
    SUPERSEDED,
    FocusArbiter,
)
from governance.audit_logger import AuditLogger
from os_controller.base_controller import BaseController
from world_model.exclusion import ExclusionPolicy
from world_model.mru_registry import MruRegistry


def _host(visible: dict[str, list[str]], focused: dict[str, str | None]) -> MagicMock:
    host = MagicMock(spec=BaseController)
    host.visible_windows.side_effect = lambda app: list(visible.get(app, []))
    host.focused_window.side_effect = lambda app: focused.get(app)
    host.set_frontmost.return_value = True
    host.is_frontmost.return_value = False
    host.is_hidden.return_value = False
    host.active_app.return_value = None
    return host


async def _no_sleep(_delay: float) -> None:
    return None


def _registry(*apps: str, exclusion: ExclusionPolicy | None = None) -> MruRegistry:
    registry = MruRegistry(exclusion=exclusion)
    for app in reversed(apps):
        registry.promote(app)
    return registry


def test_still_visible_app_keeps_focus_and_list() -> None:
    host = _host(visible={"Editor": ["main.py"]}, focused={"Editor": "main.py"})
    registry = _registry("Editor", "Terminal")
    arbiter = FocusArbiter(registry, host, sleep=_no_sleep)

    outcome = asyncio.run(arbiter.on_focus_lost("Editor", "windowUnfocused"))

    assert outcome.kind == STILL_VISIBLE
    assert registry.snapshot() == ["Editor", "Terminal"]
    host.set_frontmost.assert_not_called()
    host.alert.assert_not_called()


def test_skips_stale_and_excluded_candidates() -> None:
    host = _host(
        visible={"Z": ["z"]},
        focused={"X": None, "Y": "y", "Z": "z"},
    )
    registry = _registry("Active", "X", "Y", "Z", "W", exclusion=ExclusionPolicy(include_defaults=False))
    registry.exclusion = ExclusionPolicy(extra=["Y"])
    arbiter = FocusArbiter(registry, host, sleep=_no_sleep)

    outcome = asyncio.run(arbiter.on_focus_lost("Active"))

    assert outcome.kind == FOCUSED
    assert outcome.selected == "Z"
    assert outcome.evicted == ["X", "Y"]
    assert registry.snapshot() == ["Z", "W"]
    host.set_frontmost.assert_called_once_with("Z")


def test_empty_registry_shows_no_focus_message() -> None:
    host = _host(visible={}, focused={})
    registry = MruRegistry()
    arbiter = FocusArbiter(registry, host, sleep=_no_sleep, rng=random.Random(3))

    outcome = asyncio.run(arbiter.on_focus_lost("Browser"))

    assert outcome.kind == NO_FOCUS
    assert outcome.message in NO_FOCUS_MESSAGES
    host.alert.assert_called_once_with(outcome.message)
    host.set_frontmost.assert_not_called()


def test_fully_stale_registry_is_exhausted() -> None:
    host = _host(visible={}, focused={})
    registry = _registry("Browser", "Terminal", "Editor")
    arbiter = FocusArbiter(registry, host, sleep=_no_sleep, messages=["nothing here"])

    outcome = asyncio.run(arbiter.on_focus_lost("Browser"))

    assert outcome.kind == NO_FOCUS
    assert outcome.evicted == ["Terminal", "Editor"]
    assert registry.snapshot() == []
    host.alert.assert_called_once_with("nothing here")
    host.set_frontmost.assert_not_called()


def test_excluded_app_is_always_arbitrated() -> None:
    host = _host(
        visible={"Hammerspoon": ["console", "x", "y"], "Editor": ["main.py"]},
        focused={"Editor": "main.py"},
    )
    registry = _registry("Editor")
    arbiter = FocusArbiter(registry, host, sleep=_no_sleep)

    outcome = asyncio.run(arbiter.on_focus_lost("Hammerspoon"))

    assert outcome.kind == FOCUSED
    assert outcome.selected == "Editor"
    host.set_frontmost.assert_called_once_with("Editor")


def test_settle_delay_is_awaited_before_rechecking() -> None:
    delays: list[float] = []
    host = _host(visible={"Editor": ["main.py"]}, focused={"Editor": "main.py"})

    async def fake_sleep(delay: float) -> None:
        delays.append(delay)
        # Window closes while the event settles.
        host.visible_windows.side_effect = lambda app: []

    registry = _registry("Editor")
    arbiter = FocusArbiter(registry, host, settle_delay=0.35, sleep=fake_sleep)

    outcome = asyncio.run(arbiter.on_focus_lost("Editor"))

    assert delays == [0.35]
    assert outcome.kind == NO_FOCUS
    assert registry.snapshot() == []


def test_failing_queries_are_treated_as_no_focus() -> None:
    host = _host(visible={}, focused={"Editor": "main.py"})
    host.visible_windows.side_effect = RuntimeError("app is gone")

    def focused(app: str) -> str | None:
        if app == "Crashed":
            raise RuntimeError("no such app")
        return {"Editor": "main.py"}.get(app)

    host.focused_window.side_effect = focused
    registry = _registry("Browser", "Crashed", "Editor")
    arbiter = FocusArbiter(registry, host, sleep=_no_sleep)

    outcome = asyncio.run(arbiter.on_focus_lost("Browser"))

    assert outcome.kind == FOCUSED
    assert outcome.selected == "Editor"
    assert outcome.evicted == ["Crashed"]


def test_refocus_during_settle_supersedes_unfocus() -> None:
    host = _host(visible={}, focused={"Terminal": "zsh"})
    registry = _registry("Browser", "Terminal")
    arbiter = FocusArbiter(registry, host)

    async def refocus(_delay: float) -> None:
        arbiter.on_focus_gained("Browser")

    arbiter.sleep = refocus
    outcome = asyncio.run(arbiter.on_focus_lost("Browser"))

    assert outcome.kind == SUPERSEDED
    assert registry.snapshot() == ["Browser", "Terminal"]
    host.set_frontmost.assert_not_called()


def test_unfocus_events_for_one_app_are_serialized() -> None:
    host = _host(visible={"A": ["a"], "B": ["b"]}, focused={})
    registry = _registry("A", "B")
    active = 0
    peak = 0

    async def slow_sleep(_delay: float) -> None:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        for _ in range(3):
            await asyncio.sleep(0)
        active -= 1

    arbiter = FocusArbiter(registry, host, sleep=slow_sleep)

    async def same_app() -> list:
        return await asyncio.gather(arbiter.on_focus_lost("A"), arbiter.on_focus_lost("A"))

    outcomes = asyncio.run(same_app())
    assert [o.kind for o in outcomes] == [STILL_VISIBLE, STILL_VISIBLE]
    assert peak == 1

    peak = 0

    async def two_apps() -> list:
        return await asyncio.gather(arbiter.on_focus_lost("A"), arbiter.on_focus_lost("B"))

    asyncio.run(two_apps())
    assert peak == 2


def test_shutdown_cancels_settling_handlers() -> None:
    host = _host(visible={}, focused={})
    registry = _registry("Browser", "Editor")
    arbiter = FocusArbiter(registry, host, settle_delay=30)

    async def scenario() -> None:
        task = asyncio.create_task(arbiter.on_focus_lost("Browser"))
        await asyncio.sleep(0)
        arbiter.shutdown()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())
    assert registry.snapshot() == ["Browser", "Editor"]
    host.set_frontmost.assert_not_called()


def test_outcomes_are_written_to_audit_log(tmp_path: Path) -> None:
    host = _host(visible={}, focused={"Terminal": "zsh"})
    registry = _registry("Browser", "Terminal")
    audit = AuditLogger(tmp_path / "logs" / "decisions.jsonl")
    arbiter = FocusArbiter(registry, host, sleep=_no_sleep, audit_logger=audit)

    asyncio.run(arbiter.on_focus_lost("Browser"))

    lines = (tmp_path / "logs" / "decisions.jsonl").read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["kind"] == FOCUSED
    assert record["app"] == "Browser"
    assert record["selected"] == "Terminal"


def test_requires_at_least_one_message() -> None:
    with pytest.raises(ValueError):
        FocusArbiter(MruRegistry(), _host({}, {}), messages=[])


def test_failing_alerts_do_not_change_tracking() -> None:
    host = _host(visible={"Editor": ["main.py"]}, focused={"Editor": "main.py"})
    host.alert.side_effect = RuntimeError("notifier down")
    registry = MruRegistry()
    arbiter = FocusArbiter(
        registry, host, sleep=_no_sleep, diagnostics=FocusDiagnostics(host, trace=True)
    )

    arbiter.on_focus_gained("Editor")

    assert registry.snapshot() == ["Editor"]


def test_failing_alerts_do_not_stop_candidate_search() -> None:
    host = _host(
        visible={"X": ["x"], "Z": ["z"]},
        focused={"X": None, "Z": "z"},
    )
    host.alert.side_effect = RuntimeError("notifier down")
    registry = _registry("B", "X", "Z")
    arbiter = FocusArbiter(
        registry, host, sleep=_no_sleep, diagnostics=FocusDiagnostics(host, trace=True)
    )

    outcome = asyncio.run(arbiter.on_focus_lost("B"))

    assert outcome.kind == FOCUSED
    assert outcome.selected == "Z"
    assert outcome.evicted == ["X"]
    assert registry.snapshot() == ["Z"]
    host.set_frontmost.assert_called_once_with("Z")
