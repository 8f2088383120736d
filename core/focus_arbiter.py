"""Focus arbitration: hand focus to the next usable app when one goes away.

When an app loses focus the arbiter waits for window state to settle, checks
whether the app still has visible windows, and if not walks the MRU registry
from the front, discarding stale or excluded candidates until one with a
focused window turns up. That app is made frontmost; with nothing left, the
user gets a short "no focus" notification instead.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import defaultdict
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from core.diagnostics import FocusDiagnostics
from core.event_bus import WINDOW_FOCUSED, WINDOW_UNFOCUSED, EventBus
from governance.audit_logger import AuditLogger
from os_controller.base_controller import BaseController
from world_model.mru_registry import MruRegistry

logger = logging.getLogger("nlf.arbiter")

NO_FOCUS_MESSAGES: tuple[str, ...] = (
    "You have no focus!",
    "Clarity affords focus",
    "Never lose focus",
    "If you're going through hell, keep going.",
)

DEFAULT_SETTLE_DELAY = 0.2

STILL_VISIBLE = "still_visible"
FOCUSED = "focused"
NO_FOCUS = "no_focus"
SUPERSEDED = "superseded"

SleepFn = Callable[[float], Awaitable[Any]]


@dataclass
class ArbitrationOutcome:
    """Result of handling one unfocus event."""

    kind: str
    app: str
    selected: str | None = None
    evicted: list[str] = field(default_factory=list)
    message: str = ""


class FocusArbiter:
    """Reacts to focus events and keeps some app focused."""

    def __init__(
        self,
        registry: MruRegistry,
        host: BaseController,
        settle_delay: float = DEFAULT_SETTLE_DELAY,
        sleep: SleepFn | None = None,
        diagnostics: FocusDiagnostics | None = None,
        audit_logger: AuditLogger | None = None,
        messages: Sequence[str] = NO_FOCUS_MESSAGES,
        rng: random.Random | None = None,
    ) -> None:
        if not messages:
            raise ValueError("At least one no-focus message is required.")
        self.registry = registry
        self.host = host
        self.settle_delay = settle_delay
        self.sleep: SleepFn = sleep or asyncio.sleep
        self.diagnostics = diagnostics or FocusDiagnostics(host)
        self.audit_logger = audit_logger
        self.messages = tuple(messages)
        self.rng = rng or random.Random()
        # Bumped on every focus gain; an unfocus that sees a newer value
        # after its settle delay is stale.
        self._generations: dict[str, int] = defaultdict(int)
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = defaultdict(int)
        self._settling: set[asyncio.Task[Any]] = set()

    # ── Wiring ───────────────────────────────────────────────────────

    def attach(self, event_bus: EventBus) -> None:
        """Subscribe to the bus's window focus events."""
        event_bus.subscribe(WINDOW_FOCUSED, self._handle_focused_event)
        event_bus.subscribe(WINDOW_UNFOCUSED, self._handle_unfocused_event)

    def _handle_focused_event(self, payload: dict[str, Any]) -> None:
        self.on_focus_gained(str(payload["app"]))

    def _handle_unfocused_event(self, payload: dict[str, Any]) -> Awaitable[ArbitrationOutcome]:
        return self.on_focus_lost(str(payload["app"]), str(payload.get("event", "")))

    # ── Event handlers ───────────────────────────────────────────────

    def on_focus_gained(self, app_name: str) -> None:
        """Make ``app_name`` the most recently used app."""
        self.diagnostics.debug(f"INFOCUS: {app_name}")
        self._generations[app_name] += 1
        self.registry.promote(app_name)

    async def on_focus_lost(self, app_name: str, event_label: str = "") -> ArbitrationOutcome:
        """Handle an unfocus: settle, re-check, and refocus if needed.

        Unfocus events for the same app are handled one at a time. A focus
        gain for the app during the settle delay makes this handling a no-op.
        """
        self._lock_users[app_name] += 1
        lock = self._locks.setdefault(app_name, asyncio.Lock())
        try:
            async with lock:
                generation = self._generations[app_name]
                self.diagnostics.report_app("UNFOCUS", app_name, event_label)
                await self._settle()
                if self._generations[app_name] != generation:
                    self.diagnostics.debug(f"- {app_name} regained focus while settling")
                    outcome = ArbitrationOutcome(kind=SUPERSEDED, app=app_name)
                else:
                    self.diagnostics.report_app(
                        "UNFOCUS", app_name, f"{int(self.settle_delay * 1000)}ms later"
                    )
                    outcome = self.arbitrate(app_name)
        finally:
            self._lock_users[app_name] -= 1
            if self._lock_users[app_name] <= 0:
                self._lock_users.pop(app_name, None)
                self._locks.pop(app_name, None)

        self._record(outcome)
        return outcome

    async def _settle(self) -> None:
        task = asyncio.current_task()
        if task is not None:
            self._settling.add(task)
        try:
            await self.sleep(self.settle_delay)
        finally:
            if task is not None:
                self._settling.discard(task)

    def shutdown(self) -> None:
        """Cancel every unfocus handling still waiting for state to settle."""
        for task in list(self._settling):
            task.cancel()

    # ── Arbitration ──────────────────────────────────────────────────

    def arbitrate(self, app_name: str) -> ArbitrationOutcome:
        """Decide who gets focus now that ``app_name`` lost it.

        Runs without suspending, so the registry is read and updated in one
        step relative to other handlers on the loop.
        """
        excluded = self.registry.exclusion.is_excluded(app_name)
        if self._visible_count(app_name) > 0 and not excluded:
            self.diagnostics.debug("- App still has visible windows")
            return ArbitrationOutcome(kind=STILL_VISIBLE, app=app_name)

        self.registry.evict_if_present(app_name)

        evicted: list[str] = []
        candidate = self.registry.front()
        while candidate is not None:
            self.diagnostics.report_app("PROBING", candidate, indent="  ")
            focused = self._focused_window(candidate)
            self.diagnostics.compare_visible_and_focused(candidate)
            if focused is not None and not self.registry.exclusion.is_excluded(candidate):
                break
            self.registry.evict_front()
            evicted.append(candidate)
            candidate = self.registry.front()

        if candidate is not None:
            self.diagnostics.debug(f"- Focusing: {candidate}")
            self._set_frontmost(candidate)
            return ArbitrationOutcome(kind=FOCUSED, app=app_name, selected=candidate, evicted=evicted)

        self.diagnostics.debug("- Nothing to focus")
        message = self.rng.choice(self.messages)
        self._alert(message)
        return ArbitrationOutcome(kind=NO_FOCUS, app=app_name, evicted=evicted, message=message)

    # ── Host access ──────────────────────────────────────────────────

    def _visible_count(self, app_name: str) -> int:
        try:
            return len(self.host.visible_windows(app_name) or [])
        except Exception as exc:
            logger.warning("visible_windows failed for %s, treating as none: %s", app_name, exc)
            return 0

    def _focused_window(self, app_name: str) -> str | None:
        try:
            return self.host.focused_window(app_name)
        except Exception as exc:
            logger.warning("focused_window failed for %s, treating as none: %s", app_name, exc)
            return None

    def _set_frontmost(self, app_name: str) -> None:
        try:
            accepted = self.host.set_frontmost(app_name)
        except Exception as exc:
            logger.warning("set_frontmost failed for %s: %s", app_name, exc)
            return
        if accepted is False:
            logger.info("Host declined to make %s frontmost", app_name)

    def _alert(self, message: str) -> None:
        try:
            self.host.alert(message)
        except Exception as exc:
            logger.warning("Could not show alert %r: %s", message, exc)

    def _record(self, outcome: ArbitrationOutcome) -> None:
        logger.info(
            "Unfocus %s -> %s%s",
            outcome.app,
            outcome.kind,
            f" ({outcome.selected})" if outcome.selected else "",
        )
        if self.audit_logger is not None:
            self.audit_logger.log(
                kind=outcome.kind,
                app=outcome.app,
                selected=outcome.selected,
                evicted=outcome.evicted,
                message=outcome.message,
            )
