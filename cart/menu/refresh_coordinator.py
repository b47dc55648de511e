"""
Menu Refresh Coordinator

Listens for APPLICATION_READY and CONFIG_REFRESHED and rebuilds the menu:

1. Read the coffee configuration value
2. Missing or blank -> MenuConfigMissingError, current snapshot kept
3. Parse (split on ';', trim, drop empties, de-duplicate, sort by name)
4. Install the new snapshot into MenuState
5. When a CoffeeStore is configured, mirror the menu into the `cafe` table in
   the background: delete everything, then insert the new set. Syncs run one
   at a time in refresh order, and the ids assigned by the table are attached
   to the snapshot if it is still the current one

Refreshes are serialized; a refresh never raises into the event channel.
"""

import asyncio
from collections.abc import Callable

from cart.core.config.constants import Stage
from cart.core.config.settings import get_settings
from cart.core.events import RefreshEvent, RefreshEventBus
from cart.core.exceptions import MenuConfigMissingError
from cart.core.logging.logger import get_logger, log_stage
from cart.core.tasks import BackgroundTaskRegistry
from cart.infrastructure.database.coffee_store import CoffeeStore
from cart.infrastructure.monitoring.metrics_collector import get_metrics_collector
from cart.menu.models import Coffee, parse_coffees
from cart.menu.state import MenuState

logger = get_logger(__name__)


def read_coffees_setting() -> str | None:
    """Default configuration source: the current settings singleton."""
    return get_settings().cart.CART_COFFEES


class RefreshCoordinator:
    """Turns refresh events into menu snapshots."""

    def __init__(
        self,
        menu_state: MenuState,
        config_source: Callable[[], str | None] = read_coffees_setting,
        coffee_store: CoffeeStore | None = None,
        tasks: BackgroundTaskRegistry | None = None,
    ):
        self.menu_state = menu_state
        self._config_source = config_source
        self._coffee_store = coffee_store
        self._tasks = tasks or BackgroundTaskRegistry()
        self._lock = asyncio.Lock()
        self._sync_lock = asyncio.Lock()
        self._metrics = get_metrics_collector()

    def register(self, bus: RefreshEventBus) -> None:
        bus.subscribe(self.on_event, RefreshEvent.APPLICATION_READY, RefreshEvent.CONFIG_REFRESHED)

    async def on_event(self, event: RefreshEvent) -> None:
        """Event listener: refresh, logging instead of raising."""
        try:
            await self.refresh()
        except MenuConfigMissingError as e:
            self._metrics.record_menu_refresh("config_missing")
            log_stage(
                logger,
                Stage.MENU_REFRESH,
                "menu_refresh_skipped",
                level="warning",
                refresh_event=event.value,
                reason=e.message,
                kept_coffees=self.menu_state.names(),
            )
        except Exception as e:
            self._metrics.record_menu_refresh("failed")
            logger.error(
                "menu_refresh_failed", refresh_event=event.value, error=str(e), exc_info=True
            )

    async def refresh(self) -> tuple[Coffee, ...]:
        """
        Re-read configuration and install a new menu snapshot.

        Raises:
            MenuConfigMissingError: if the coffee list is missing or blank
        """
        async with self._lock:
            raw = self._config_source()
            log_stage(logger, Stage.MENU_REFRESH, "menu_refresh_started", coffees_setting=raw)

            if raw is None or not raw.strip():
                raise MenuConfigMissingError(
                    "Coffee configuration (cart.coffees) is missing or blank",
                    details={"value": raw},
                )

            snapshot = self.menu_state.install(parse_coffees(raw))
            self._metrics.record_menu_refresh("installed")
            self._metrics.set_menu_size(len(snapshot))

            if self._coffee_store is not None:
                version = self.menu_state.version
                self._tasks.spawn(
                    self._sync_store(snapshot, version),
                    name=f"menu-store-sync-v{version}",
                )

            return snapshot

    async def _sync_store(self, snapshot: tuple[Coffee, ...], version: int) -> None:
        """Replace the cafe table contents; deletes finish before inserts start."""
        try:
            async with self._sync_lock:
                deleted = await self._coffee_store.delete_all()
                saved = await self._coffee_store.save_all(snapshot)
        except Exception as e:
            log_stage(
                logger,
                Stage.MENU_STORE_SYNC,
                "menu_store_sync_failed",
                level="error",
                error_type=type(e).__name__,
                error=str(e),
            )
            return

        for coffee in saved:
            log_stage(logger, Stage.MENU_STORE_SYNC, "coffee_added", coffee_id=coffee.id, name=coffee.name)
        log_stage(logger, Stage.MENU_STORE_SYNC, "menu_store_synced", deleted=deleted, inserted=len(saved))

        if self.menu_state.attach_ids(version, saved):
            logger.debug("menu_ids_attached", version=version)
