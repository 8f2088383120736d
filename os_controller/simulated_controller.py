"""In-memory desktop used for scripted simulations and offline runs."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from core.event_bus import WINDOW_FOCUSED, WINDOW_UNFOCUSED, EventBus
from os_controller.base_controller import BaseController


@dataclass
class SimWindow:
    """Single window of a simulated app."""

    title: str
    minimized: bool = False


@dataclass
class SimApp:
    """Simulated app; windows are ordered by focus recency, most recent last."""

    name: str
    windows: list[SimWindow] = field(default_factory=list)
    hidden: bool = False

    def visible(self) -> list[SimWindow]:
        if self.hidden:
            return []
        return [w for w in self.windows if not w.minimized]

    def find(self, title: str) -> SimWindow | None:
        for window in self.windows:
            if window.title == title:
                return window
        return None


class SimulatedController(BaseController):
    """Deterministic host that publishes focus events like a real desktop.

    Closing or minimizing the active window leaves its app active without a
    focused window when it was the app's last visible one, so another app
    only gains focus when something asks for it.
    """

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self.event_bus = event_bus
        self.logger = logging.getLogger("nlf.host.simulated")
        self.apps: dict[str, SimApp] = {}
        self.frontmost_requests: list[str] = []
        self.alerts: list[str] = []
        self._active: str | None = None

    # ── Host queries ─────────────────────────────────────────────────

    def visible_windows(self, app_name: str) -> list[str]:
        app = self.apps.get(app_name)
        if app is None:
            return []
        return [w.title for w in app.visible()]

    def focused_window(self, app_name: str) -> str | None:
        app = self.apps.get(app_name)
        if app is None:
            return None
        visible = app.visible()
        return visible[-1].title if visible else None

    def set_frontmost(self, app_name: str) -> bool:
        self.frontmost_requests.append(app_name)
        app = self.apps.get(app_name)
        if app is None:
            return False
        app.hidden = False
        self._active = app_name
        if app.visible():
            self._emit(WINDOW_FOCUSED, app_name, "windowFocused")
        return True

    def active_app(self) -> str | None:
        return self._active

    def is_hidden(self, app_name: str) -> bool:
        app = self.apps.get(app_name)
        return bool(app and app.hidden)

    def alert(self, message: str) -> None:
        self.alerts.append(message)
        self.logger.info("ALERT: %s", message)

    # ── Desktop mutations ────────────────────────────────────────────

    def open(self, app_name: str, title: str | None = None) -> None:
        """Open a new window and give it focus."""
        app = self.apps.setdefault(app_name, SimApp(name=app_name))
        title = title or f"{app_name} {len(app.windows) + 1}"
        app.windows.append(SimWindow(title=title))
        self._switch_to(app_name)

    def focus(self, app_name: str, title: str | None = None) -> None:
        """Focus a window (the app's most recent one when no title is given)."""
        app = self.apps.get(app_name)
        if app is None:
            raise KeyError(f"Unknown app: {app_name}")
        window = app.find(title) if title else (app.windows[-1] if app.windows else None)
        if window is None:
            raise KeyError(f"No window {title!r} for app {app_name}")
        window.minimized = False
        app.hidden = False
        app.windows.remove(window)
        app.windows.append(window)
        self._switch_to(app_name)

    def close(self, app_name: str, title: str | None = None) -> None:
        """Close a window (the app's most recent one when no title is given)."""
        app = self.apps.get(app_name)
        window = self._pick(app, title)
        if app is None or window is None:
            return
        app.windows.remove(window)
        self._after_window_lost(app_name)

    def minimize(self, app_name: str, title: str | None = None) -> None:
        app = self.apps.get(app_name)
        window = self._pick(app, title)
        if app is None or window is None:
            return
        window.minimized = True
        self._after_window_lost(app_name)

    def hide(self, app_name: str) -> None:
        app = self.apps.get(app_name)
        if app is None:
            return
        app.hidden = True
        self._after_window_lost(app_name)

    def quit(self, app_name: str) -> None:
        if self.apps.pop(app_name, None) is None:
            return
        if self._active == app_name:
            self._active = None
            self._emit(WINDOW_UNFOCUSED, app_name, "windowDestroyed")

    # ── Internals ────────────────────────────────────────────────────

    @staticmethod
    def _pick(app: SimApp | None, title: str | None) -> SimWindow | None:
        if app is None:
            return None
        if title:
            return app.find(title)
        visible = app.visible()
        return visible[-1] if visible else None

    def _switch_to(self, app_name: str) -> None:
        previous = self._active
        self._active = app_name
        if previous is not None and previous in self.apps:
            self._emit(WINDOW_UNFOCUSED, previous, "windowUnfocused")
        self._emit(WINDOW_FOCUSED, app_name, "windowFocused")

    def _after_window_lost(self, app_name: str) -> None:
        if self._active != app_name:
            return
        self._emit(WINDOW_UNFOCUSED, app_name, "windowUnfocused")
        if self.visible_windows(app_name):
            self._emit(WINDOW_FOCUSED, app_name, "windowFocused")

    def _emit(self, event_name: str, app_name: str, label: str) -> None:
        self.logger.debug("%s: %s (%s)", event_name, app_name, label)
        if self.event_bus is not None:
            self.event_bus.emit(event_name, {"app": app_name, "event": label})
