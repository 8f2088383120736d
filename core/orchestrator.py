"""Top-level wiring of the focus keeper."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from core.diagnostics import FocusDiagnostics
from core.event_bus import EventBus
from core.focus_arbiter import FocusArbiter
from core.focus_watcher import FocusWatcher
from core.policy_runtime import load_settings, resolve_path
from core.settings import AppSettings
from governance.audit_logger import AuditLogger
from os_controller.base_controller import BaseController
from world_model.exclusion import ExclusionPolicy
from world_model.mru_registry import MruRegistry

logger = logging.getLogger("nlf.orchestrator")


@dataclass
class RuntimeBundle:
    """Holds initialized runtime components."""

    settings: AppSettings
    event_bus: EventBus
    host: BaseController
    registry: MruRegistry
    arbiter: FocusArbiter
    watcher: FocusWatcher


def resolve_backend(backend: str) -> str:
    """Map ``auto`` to the backend for the running platform."""
    if backend != "auto":
        return backend
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "win32":
        return "windows"
    raise RuntimeError(f"No desktop backend for platform {sys.platform!r}.")


def build_host(backend: str, event_bus: EventBus) -> BaseController:
    """Create the desktop backend named by ``backend``."""
    backend = resolve_backend(backend)

    if backend == "linux":
        from os_controller.linux_controller import LinuxController

        return LinuxController()
    if backend == "windows":
        from os_controller.window_manager import WindowManager

        return WindowManager()
    if backend == "simulated":
        from os_controller.simulated_controller import SimulatedController

        return SimulatedController(event_bus=event_bus)
    raise ValueError(f"Unknown backend: {backend}")


class Orchestrator:
    """Creates and wires runtime components for CLI use."""

    def __init__(
        self,
        root: Path | None = None,
        config_path: Path | None = None,
        settings: AppSettings | None = None,
    ) -> None:
        default_root = Path(__file__).resolve().parents[1]
        self.root = (root or default_root).resolve()
        self.config_path = config_path
        self._settings = settings

    @property
    def settings(self) -> AppSettings:
        if self._settings is None:
            self._settings = load_settings(self.root, self.config_path)
        return self._settings

    def build(self, host: BaseController | None = None, event_bus: EventBus | None = None) -> RuntimeBundle:
        settings = self.settings
        event_bus = event_bus or EventBus()
        backend = resolve_backend(settings.host.backend)
        host = host or build_host(backend, event_bus)

        exclusion = ExclusionPolicy(
            extra=settings.focus.excluded_apps,
            include_defaults=settings.focus.include_default_exclusions,
            backend=backend,
        )
        registry = MruRegistry(exclusion=exclusion)

        audit_path = resolve_path(self.root, settings.paths.decision_log_path)
        arbiter = FocusArbiter(
            registry=registry,
            host=host,
            settle_delay=settings.focus.settle_delay_ms / 1000,
            diagnostics=FocusDiagnostics(host, trace=settings.focus.trace),
            audit_logger=AuditLogger(audit_path) if audit_path else None,
            messages=settings.focus.no_focus_messages,
        )
        arbiter.attach(event_bus)

        watcher = FocusWatcher(
            host=host,
            event_bus=event_bus,
            poll_interval=settings.host.poll_interval_ms / 1000,
        )
        logger.debug("Runtime built with host %s", type(host).__name__)
        return RuntimeBundle(
            settings=settings,
            event_bus=event_bus,
            host=host,
            registry=registry,
            arbiter=arbiter,
            watcher=watcher,
        )


async def run_forever(bundle: RuntimeBundle) -> None:
    """Watch focus until cancelled, then cancel in-flight arbitration."""
    try:
        await bundle.watcher.run()
    finally:
        bundle.watcher.stop()
        bundle.arbiter.shutdown()
        bundle.event_bus.cancel_pending()
        await bundle.event_bus.drain()
