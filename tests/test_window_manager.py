"""Windows host tests with a stubbed pygetwindow module."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from os_controller import window_manager
from os_controller.window_manager import WindowManager, app_name_from_title


def _window(title: str, active: bool = False, minimized: bool = False) -> MagicMock:
    return MagicMock(title=title, isActive=active, isMinimized=minimized, visible=True)


@pytest.fixture
def windows(monkeypatch: pytest.MonkeyPatch) -> list[MagicMock]:
    listed = [
        _window("notes.txt - Notepad", active=True),
        _window("Inbox - Outlook"),
        _window("todo.txt - Notepad"),
        _window("Calendar - Outlook", minimized=True),
        _window("   "),
    ]
    fake_gw = SimpleNamespace(
        getAllWindows=lambda: listed,
        getActiveWindow=lambda: listed[0],
    )
    monkeypatch.setattr(window_manager, "gw", fake_gw)
    return listed


def test_app_name_from_title() -> None:
    assert app_name_from_title("notes.txt - Notepad") == "Notepad"
    assert app_name_from_title("a - b - Visual Studio Code") == "Visual Studio Code"
    assert app_name_from_title("Spotify") == "Spotify"


def test_visible_and_focused_windows(windows: list[MagicMock]) -> None:
    host = WindowManager()

    assert host.visible_windows("Notepad") == ["notes.txt - Notepad", "todo.txt - Notepad"]
    assert host.visible_windows("Outlook") == ["Inbox - Outlook"]
    assert host.focused_window("Notepad") == "notes.txt - Notepad"
    assert host.focused_window("Outlook") == "Inbox - Outlook"
    assert host.focused_window("Paint") is None
    assert host.active_app() == "Notepad"


def test_set_frontmost_activates_top_window(windows: list[MagicMock]) -> None:
    host = WindowManager()

    assert host.set_frontmost("Outlook") is True
    windows[1].activate.assert_called_once()
    assert host.set_frontmost("Paint") is False


def test_missing_pygetwindow(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(window_manager, "gw", None)
    host = WindowManager()
    with pytest.raises(RuntimeError, match="pygetwindow"):
        host.active_app()
