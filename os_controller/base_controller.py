"""Base interface for desktop hosts that report and change window focus."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseController(ABC):
    """Abstract window host.

    Queries for an app that is no longer running return empty results
    rather than raising.
    """

    @abstractmethod
    def visible_windows(self, app_name: str) -> list[str]:
        """Return titles of the app's visible windows."""
        pass

    @abstractmethod
    def focused_window(self, app_name: str) -> str | None:
        """Return the title of the app's focused window, if any."""
        pass

    @abstractmethod
    def set_frontmost(self, app_name: str) -> bool:
        """Ask the host to make the app frontmost."""
        pass

    @abstractmethod
    def active_app(self) -> str | None:
        """Return the app owning the active window."""
        pass

    def is_frontmost(self, app_name: str) -> bool:
        return self.active_app() == app_name

    def is_hidden(self, app_name: str) -> bool:
        _ = app_name
        return False

    @abstractmethod
    def alert(self, message: str) -> None:
        """Show a transient on-screen notification."""
        pass
