"""
Navigation tracker for single-page-app path changes.

Routing integrations call ``notify(path)`` after a history push,
replace or back/forward navigation.  Only a path different from the
current one runs the change callback; repeated notifications for the
same path are no-ops.
"""

from __future__ import annotations

from collections.abc import Callable

from search_tracker.utils import logger

log = logger.create_logger("Navigation")


class NavigationTracker:
    """Holds the current path and reacts to changes of it."""

    def __init__(self, current_path: str, on_change: Callable[[str, str], None]) -> None:
        self.current_path = current_path
        self._on_change = on_change

    def notify(self, path: str) -> bool:
        """Move to *path*.

        Returns:
            True when the path changed and the callback ran.
        """
        if path == self.current_path:
            return False
        previous = self.current_path
        self.current_path = path
        log.debug("Path changed", {"from": previous, "to": path})
        self._on_change(previous, path)
        return True
