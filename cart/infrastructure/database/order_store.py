"""
Order Store

Persists orders into `cafe_orders`. Every failure surfaces as
PersistenceError, the only error the order endpoint reports to clients.
"""

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from cart.core.exceptions import PersistenceError
from cart.core.logging.logger import get_logger
from cart.infrastructure.database.tables import cafe_orders
from cart.orders.models import Order

logger = get_logger(__name__)


class OrderStore:
    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    async def save(self, order: Order) -> Order:
        """Insert the order and return a copy carrying the assigned id."""
        stmt = insert(cafe_orders).values(
            coffee=order.coffee,
            username=order.username,
            quantity=order.quantity,
        )
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(stmt)
                order_id = result.inserted_primary_key[0]
        except SQLAlchemyError as e:
            raise PersistenceError.from_exception(
                e, message="Failed to save order", table="cafe_orders"
            ) from e

        logger.debug("order_saved", order_id=order_id, coffee=order.coffee)
        return order.model_copy(update={"id": order_id})

    async def find_all(self) -> list[Order]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(select(cafe_orders).order_by(cafe_orders.c.id))
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            raise PersistenceError.from_exception(
                e, message="Failed to load orders", table="cafe_orders"
            ) from e
        return [Order(**row) for row in rows]
