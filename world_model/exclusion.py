"""Static exclusion policy for focus candidates."""

from __future__ import annotations

from collections.abc import Iterable

# The automation host itself reports phantom windows, and the notification
# surface reports windows that are never focusable.
DEFAULT_EXCLUDED_APPS: frozenset[str] = frozenset({"Hammerspoon", "Notification Center"})

# Desktop, panel and dock surfaces that can take focus but hold no work.
# Linux names are WM_CLASS class names; Windows names come from window titles.
BACKEND_EXCLUDED_APPS: dict[str, frozenset[str]] = {
    "linux": frozenset({
        "Xfdesktop",
        "Xfce4-panel",
        "Plank",
        "Desktop_window",
        "Nautilus-desktop",
        "Lxpanel",
        "Polybar",
    }),
    "windows": frozenset({"Program Manager"}),
}


class ExclusionPolicy:
    """Membership test for apps that are never tracked as focus candidates."""

    def __init__(
        self,
        extra: Iterable[str] = (),
        include_defaults: bool = True,
        backend: str | None = None,
    ) -> None:
        base: frozenset[str] = frozenset()
        if include_defaults:
            base = DEFAULT_EXCLUDED_APPS | BACKEND_EXCLUDED_APPS.get(backend or "", frozenset())
        self._excluded: frozenset[str] = base | frozenset(extra)

    def is_excluded(self, app_name: str) -> bool:
        return app_name in self._excluded

    @property
    def apps(self) -> frozenset[str]:
        return self._excluded
