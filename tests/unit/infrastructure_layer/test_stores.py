"""
Unit Tests for the SQLAlchemy stores (SQLite)
"""

import pytest

from cart.core.exceptions import PersistenceError
from cart.infrastructure.database.engine import Database
from cart.infrastructure.database.order_store import OrderStore
from cart.menu.models import Coffee, parse_coffees


@pytest.mark.unit
class TestOrderStore:
    @pytest.mark.asyncio
    async def test_save_assigns_increasing_ids(self, order_store, order_factory):
        first = await order_store.save(order_factory.basic(username="alice"))
        second = await order_store.save(order_factory.basic(username="bob"))

        assert first.id is not None
        assert second.id > first.id

    @pytest.mark.asyncio
    async def test_save_does_not_mutate_input(self, order_store, order_factory):
        order = order_factory.basic()

        saved = await order_store.save(order)

        assert order.id is None
        assert saved.model_dump(exclude={"id"}) == order.model_dump(exclude={"id"})

    @pytest.mark.asyncio
    async def test_find_all_returns_saved_orders(self, order_store, order_factory):
        for order in order_factory.batch(3):
            await order_store.save(order)

        stored = await order_store.find_all()

        assert [o.username for o in stored] == ["user-0", "user-1", "user-2"]

    @pytest.mark.asyncio
    async def test_failure_raises_persistence_error(self, tmp_path, order_factory):
        database = Database(f"sqlite+aiosqlite:///{tmp_path}/no-schema.db")
        store = OrderStore(database.engine)

        try:
            with pytest.raises(PersistenceError) as exc_info:
                await store.save(order_factory.basic())
        finally:
            await database.dispose()

        assert exc_info.value.details["table"] == "cafe_orders"


@pytest.mark.unit
class TestCoffeeStore:
    @pytest.mark.asyncio
    async def test_save_all_assigns_ids(self, coffee_store):
        saved = await coffee_store.save_all(parse_coffees("latte;mocha"))

        assert [c.name for c in saved] == ["latte", "mocha"]
        assert all(c.id is not None for c in saved)

    @pytest.mark.asyncio
    async def test_delete_all_returns_count(self, coffee_store):
        await coffee_store.save_all([Coffee("latte"), Coffee("mocha")])

        assert await coffee_store.delete_all() == 2
        assert await coffee_store.find_all() == []

    @pytest.mark.asyncio
    async def test_find_all_is_sorted_by_name(self, coffee_store):
        await coffee_store.save_all([Coffee("mocha"), Coffee("espresso")])

        assert [c.name for c in await coffee_store.find_all()] == ["espresso", "mocha"]


@pytest.mark.unit
class TestDatabase:
    @pytest.mark.asyncio
    async def test_ping(self, database):
        assert await database.ping() is True

    @pytest.mark.asyncio
    async def test_from_settings(self, settings):
        database = Database.from_settings(settings)
        try:
            assert database.url == settings.DATABASE_URL
        finally:
            await database.dispose()
