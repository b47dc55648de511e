"""
Order Service
=============

Glue behind POST /cart/orders:

1. Persist the order (the only step whose failure reaches the client)
2. Spawn the points notification as a tracked background task
3. Wait for it under `asyncio.shield`, so a client that disconnects after
   persistence does not cancel an outbound call that is already running

With AWAIT_POINTS_SYNC disabled the handler returns right after step 2 and
the notification completes in the background.
"""

import asyncio

from cart.core.logging.logger import get_logger
from cart.core.tasks import BackgroundTaskRegistry
from cart.orders.models import Order
from cart.orders.outbound_pipeline import OutboundPipeline

logger = get_logger(__name__)


class OrderService:
    """Places orders; never fails for reasons originating downstream."""

    def __init__(
        self,
        pipeline: OutboundPipeline,
        tasks: BackgroundTaskRegistry,
        await_points_sync: bool = True,
    ):
        self.pipeline = pipeline
        self._tasks = tasks
        self._await_points_sync = await_points_sync

    async def place_order(self, order: Order) -> Order:
        """
        Persist `order` and forward its loyalty points.

        Returns:
            The stored order (with id)

        Raises:
            PersistenceError: if the order could not be stored
        """
        saved = await self.pipeline.persist(order)

        task = self._tasks.spawn(self.pipeline.send(saved), name=f"points-sync-order-{saved.id}")
        if self._await_points_sync:
            # Result element is discarded; the response only reports persistence
            await asyncio.shield(task)

        return saved
