"""Most-recently-used ordering of focusable applications."""

from __future__ import annotations

from world_model.exclusion import ExclusionPolicy


class MruRegistry:
    """Tracks applications by recency of focus gain, most recent first.

    The list is duplicate-free. Excluded apps are never inserted, but a
    promotion still removes any stale entry for them.
    """

    def __init__(self, exclusion: ExclusionPolicy | None = None) -> None:
        self.exclusion = exclusion or ExclusionPolicy()
        self._apps: list[str] = []

    def promote(self, app_name: str) -> None:
        """Move ``app_name`` to the front, or just drop it when excluded."""
        self.evict_if_present(app_name)
        if not self.exclusion.is_excluded(app_name):
            self._apps.insert(0, app_name)

    def evict_if_present(self, app_name: str) -> None:
        if app_name in self._apps:
            self._apps.remove(app_name)

    def front(self) -> str | None:
        return self._apps[0] if self._apps else None

    def evict_front(self) -> None:
        if self._apps:
            del self._apps[0]

    def snapshot(self) -> list[str]:
        return list(self._apps)

    def __len__(self) -> int:
        return len(self._apps)

    def __contains__(self, app_name: object) -> bool:
        return app_name in self._apps
