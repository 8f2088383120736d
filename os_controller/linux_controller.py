"""Linux (X11) window host driven through xdotool."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess

from os_controller.base_controller import BaseController

_STACKING_RE = re.compile(r"0x[0-9a-fA-F]+")


class LinuxController(BaseController):
    """X11 host; apps are identified by their WM_CLASS class name."""

    def __init__(self, timeout: float = 1.0) -> None:
        self.logger = logging.getLogger("nlf.host.linux")
        self.timeout = timeout
        self.xdotool = shutil.which("xdotool")
        if not self.xdotool:
            raise RuntimeError("Cannot watch focus on Linux: xdotool is not installed.")
        self.xprop = shutil.which("xprop")
        self.notify_send = shutil.which("notify-send")

    def _run(self, args: list[str]) -> str | None:
        try:
            res = subprocess.run(args, capture_output=True, text=True, timeout=self.timeout)
        except (OSError, subprocess.SubprocessError) as exc:
            self.logger.warning("Command failed %s: %s", args[:2], exc)
            return None
        if res.returncode != 0:
            return None
        return res.stdout.strip()

    def _xdo(self, *args: str) -> str | None:
        return self._run([str(self.xdotool), *args])

    def _window_ids(self, app_name: str) -> list[str]:
        out = self._xdo("search", "--onlyvisible", "--class", f"^{re.escape(app_name)}$")
        if not out:
            return []
        return [line.strip() for line in out.splitlines() if line.strip()]

    def _stacking_order(self) -> list[int]:
        """Window ids from bottom to top, when xprop is available."""
        if not self.xprop:
            return []
        out = self._run([self.xprop, "-root", "_NET_CLIENT_LIST_STACKING"])
        if not out:
            return []
        return [int(match, 16) for match in _STACKING_RE.findall(out)]

    def visible_windows(self, app_name: str) -> list[str]:
        return [self._xdo("getwindowname", wid) or "" for wid in self._window_ids(app_name)]

    def focused_window(self, app_name: str) -> str | None:
        wid = self._top_window(app_name)
        if wid is None:
            return None
        return self._xdo("getwindowname", wid) or ""

    def _top_window(self, app_name: str) -> str | None:
        wids = self._window_ids(app_name)
        if not wids:
            return None
        stacking = self._stacking_order()
        if stacking:
            ranked = [w for w in wids if w.isdigit() and int(w) in stacking]
            if ranked:
                return max(ranked, key=lambda w: stacking.index(int(w)))
        return wids[-1]

    def set_frontmost(self, app_name: str) -> bool:
        wid = self._top_window(app_name)
        if wid is None:
            return False
        return self._xdo("windowactivate", wid) is not None

    def active_app(self) -> str | None:
        wid = self._xdo("getactivewindow")
        if not wid:
            return None
        return self._xdo("getwindowclassname", wid) or None

    def alert(self, message: str) -> None:
        if self.notify_send:
            self._run([self.notify_send, "--expire-time=2000", "Never Lose Focus", message])
        self.logger.info("ALERT: %s", message)
