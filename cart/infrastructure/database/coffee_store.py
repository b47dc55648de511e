"""
Coffee Store

Mirrors the menu into the `cafe` table.
"""

from collections.abc import Iterable

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from cart.core.exceptions import PersistenceError
from cart.infrastructure.database.tables import cafe
from cart.menu.models import Coffee


class CoffeeStore:
    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    async def delete_all(self) -> int:
        """Remove every row; returns the number of deleted rows."""
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(delete(cafe))
        except SQLAlchemyError as e:
            raise PersistenceError.from_exception(e, message="Failed to clear coffees", table="cafe") from e
        return result.rowcount

    async def save_all(self, coffees: Iterable[Coffee]) -> list[Coffee]:
        """Insert the coffees in one transaction; returns them with ids."""
        saved = []
        try:
            async with self._engine.begin() as conn:
                for coffee in coffees:
                    result = await conn.execute(insert(cafe).values(name=coffee.name))
                    saved.append(Coffee(name=coffee.name, id=result.inserted_primary_key[0]))
        except SQLAlchemyError as e:
            raise PersistenceError.from_exception(e, message="Failed to save coffees", table="cafe") from e
        return saved

    async def find_all(self) -> list[Coffee]:
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(select(cafe).order_by(cafe.c.name))
                rows = result.mappings().all()
        except SQLAlchemyError as e:
            raise PersistenceError.from_exception(e, message="Failed to load coffees", table="cafe") from e
        return [Coffee(name=row["name"], id=row["id"]) for row in rows]


