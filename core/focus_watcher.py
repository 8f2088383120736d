"""Polls a host for the active app and publishes focus change events."""

from __future__ import annotations

import asyncio
import logging

from core.event_bus import WINDOW_FOCUSED, WINDOW_UNFOCUSED, EventBus
from os_controller.base_controller import BaseController


class FocusWatcher:
    """Turns "which app is active" polls into focused/unfocused events."""

    def __init__(
        self,
        host: BaseController,
        event_bus: EventBus,
        poll_interval: float = 0.25,
    ) -> None:
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive.")
        self.host = host
        self.event_bus = event_bus
        self.poll_interval = poll_interval
        self.logger = logging.getLogger("nlf.watcher")
        self.current: str | None = None
        self._stopped = asyncio.Event()

    def poll_once(self) -> bool:
        """Check the active app once; return True when it changed."""
        try:
            active = self.host.active_app()
        except Exception as exc:
            self.logger.warning("Failed to query active app: %s", exc)
            return False

        if active == self.current:
            return False

        previous, self.current = self.current, active
        self.logger.debug("Active app changed: %s -> %s", previous, active)
        if previous is not None:
            self.event_bus.emit(WINDOW_UNFOCUSED, {"app": previous, "event": "windowUnfocused"})
        if active is not None:
            self.event_bus.emit(WINDOW_FOCUSED, {"app": active, "event": "windowFocused"})
        return True

    async def run(self) -> None:
        """Poll until ``stop`` is called or the task is cancelled."""
        self._stopped.clear()
        self.logger.info("Watching focus every %.0fms", self.poll_interval * 1000)
        while not self._stopped.is_set():
            self.poll_once()
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.poll_interval)
            except TimeoutError:
                pass
        self.logger.info("Focus watcher stopped")

    def stop(self) -> None:
        self._stopped.set()
