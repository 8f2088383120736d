"""Windows host built on PyGetWindow."""

from __future__ import annotations

import logging
from typing import Any

try:
    import pygetwindow as gw
except (ImportError, NotImplementedError):
    gw = None

from os_controller.base_controller import BaseController


def app_name_from_title(title: str) -> str:
    """Derive an app identifier from a title like ``notes.txt - Notepad``."""
    return title.rsplit(" - ", 1)[-1].strip()


class WindowManager(BaseController):
    """Window host for Windows desktops.

    PyGetWindow only exposes titles, so windows are grouped into apps by
    the trailing segment of their title.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger("nlf.host.windows")
        if not gw:
            self.logger.warning("pygetwindow is not installed.")

    def _check_available(self) -> None:
        if not gw:
            raise RuntimeError("Cannot execute window operation: pygetwindow missing.")

    def _app_windows(self, app_name: str) -> list[Any]:
        self._check_available()
        try:
            windows = gw.getAllWindows()
        except Exception as e:
            self.logger.warning("Failed to list windows: %s", e)
            return []
        return [
            w for w in windows
            if w.title.strip()
            and app_name_from_title(w.title) == app_name
            and getattr(w, "visible", True)
            and not w.isMinimized
        ]

    def visible_windows(self, app_name: str) -> list[str]:
        return [w.title for w in self._app_windows(app_name)]

    def focused_window(self, app_name: str) -> str | None:
        windows = self._app_windows(app_name)
        for w in windows:
            if w.isActive:
                return w.title
        # getAllWindows lists windows in z-order, topmost first.
        return windows[0].title if windows else None

    def set_frontmost(self, app_name: str) -> bool:
        windows = self._app_windows(app_name)
        if not windows:
            return False
        window = windows[0]
        try:
            if not window.isActive:
                window.activate()
            return True
        except Exception as e:
            self.logger.warning("Failed to focus window of '%s': %s", app_name, e)
            return False

    def active_app(self) -> str | None:
        self._check_available()
        try:
            window = gw.getActiveWindow()
        except Exception as e:
            self.logger.warning("Failed to get active window: %s", e)
            return None
        if not window or not window.title.strip():
            return None
        return app_name_from_title(window.title)

    def alert(self, message: str) -> None:
        self.logger.info("ALERT: %s", message)
