"""Focus diagnostics: app state reports and visible/focused mismatch checks."""

from __future__ import annotations

import logging

from os_controller.base_controller import BaseController


class FocusDiagnostics:
    """Writes diagnostic lines to the log, and to on-screen alerts when tracing.

    Host queries made here are for observability only; a failing query is
    reported and never affects arbitration.
    """

    def __init__(self, host: BaseController, trace: bool = False) -> None:
        self.host = host
        self.trace = trace
        self.logger = logging.getLogger("nlf.diagnostics")

    def _alert(self, message: str) -> None:
        try:
            self.host.alert(message)
        except Exception as exc:
            self.logger.warning("Could not show alert %r: %s", message, exc)

    def debug(self, message: str, force: bool = False) -> None:
        if self.trace or force:
            self._alert(message)
            self.logger.info(message)
        else:
            self.logger.debug(message)

    def report_app(self, context: str, app_name: str, event: str = "", indent: str = "") -> None:
        """Describe the live window state of one app."""
        if not (self.trace or self.logger.isEnabledFor(logging.DEBUG)):
            return
        try:
            visible = self.host.visible_windows(app_name)
            frontmost = self.host.is_frontmost(app_name)
            hidden = self.host.is_hidden(app_name)
            focused = self.host.focused_window(app_name)
        except Exception as exc:
            self.logger.warning("Could not inspect %s: %s", app_name, exc)
            return

        suffix = f" ({event})" if event else ""
        self.debug(f"{indent}{context}: {app_name}{suffix}")
        self.debug(f"{indent}- #viz_wins:     {len(visible)}")
        self.debug(f"{indent}- isFrontmost:   {frontmost}")
        self.debug(f"{indent}- isHidden:      {hidden}")
        self.debug(f"{indent}- focusedWindow: {focused if focused is not None else 'nil'}")

    def compare_visible_and_focused(self, app_name: str) -> bool:
        """Report when the two window queries disagree; return True on mismatch."""
        try:
            visible = self.host.visible_windows(app_name)
            focused = self.host.focused_window(app_name)
        except Exception as exc:
            self.logger.warning("Could not compare window state for %s: %s", app_name, exc)
            return False

        if (not visible and focused is not None) or (visible and focused is None):
            self.logger.warning(
                "focusedWindow and visibleWindows mismatch for %s: focused=%s visible=%s",
                app_name,
                focused,
                visible,
            )
            if self.trace:
                self._alert(f"GAFFE: focusedWindow and visibleWindows mismatch: {app_name}")
            return True
        return False
