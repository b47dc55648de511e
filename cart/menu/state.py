"""
Menu State

Holds the published menu snapshot. A snapshot is an immutable, name-sorted,
de-duplicated tuple of Coffee. Writers replace the reference under a lock;
readers take the reference without locking and always see a complete
snapshot.
"""

import threading
from collections.abc import Iterable

from cart.core.logging.logger import get_logger
from cart.menu.models import Coffee

logger = get_logger(__name__)


class MenuState:
    """Atomically swapped menu snapshot."""

    def __init__(self):
        self._snapshot: tuple[Coffee, ...] = ()
        self._version = 0
        self._write_lock = threading.Lock()

    def snapshot(self) -> tuple[Coffee, ...]:
        """Return the currently published snapshot."""
        return self._snapshot

    @property
    def version(self) -> int:
        """Number of installs so far; 0 means nothing was installed yet."""
        return self._version

    @property
    def installed(self) -> bool:
        return self._version > 0

    def names(self) -> list[str]:
        return [coffee.name for coffee in self._snapshot]

    def install(self, coffees: Iterable[Coffee]) -> tuple[Coffee, ...]:
        """Publish a new snapshot built from `coffees` and return it."""
        new_snapshot = tuple(sorted(set(coffees)))
        with self._write_lock:
            self._snapshot = new_snapshot
            self._version += 1
            version = self._version

        logger.info("menu_snapshot_installed", version=version, coffees=[c.name for c in new_snapshot])
        return new_snapshot

    def attach_ids(self, version: int, coffees: Iterable[Coffee]) -> bool:
        """
        Replace the snapshot of `version` with the same coffees carrying
        their stored ids.

        The version does not change. Returns False, leaving the state alone,
        when a newer snapshot was installed meanwhile or the names differ.
        """
        with_ids = tuple(sorted(set(coffees)))
        with self._write_lock:
            if self._version != version or with_ids != self._snapshot:
                return False
            self._snapshot = with_ids
        return True
