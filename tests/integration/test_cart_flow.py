"""
Integration Tests for the Cart Flow

Runs the whole application through startup, traffic and shutdown, then
inspects the SQLite file it left behind.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from cart.application.app import create_app
from cart.infrastructure.database.coffee_store import CoffeeStore
from cart.infrastructure.database.engine import Database
from cart.infrastructure.database.order_store import OrderStore


async def read_tables(database_url):
    db = Database(database_url)
    try:
        coffees = await CoffeeStore(db.engine).find_all()
        orders = await OrderStore(db.engine).find_all()
    finally:
        await db.dispose()
    return coffees, orders


@pytest.mark.integration
class TestCartFlow:
    def test_orders_and_menu_survive_shutdown(self, settings, database_url, scripted_sink):
        sink = scripted_sink(200)

        with TestClient(create_app(settings=settings, http_transport=sink.transport())) as client:
            for username, quantity in [("alice", 1), ("bob", 3)]:
                response = client.post(
                    "/cart/orders", json={"coffee": "mocha", "username": username, "quantity": quantity}
                )
                assert response.status_code == 200

        coffees, orders = asyncio.run(read_tables(database_url))

        assert [c.name for c in coffees] == ["espresso", "latte", "mocha"]
        assert [(o.username, o.quantity) for o in orders] == [("alice", 1), ("bob", 3)]
        assert sink.bodies() == [{"username": "alice", "amount": 1}, {"username": "bob", "amount": 3}]

    def test_points_outage_does_not_lose_orders(self, settings, database_url, scripted_sink):
        sink = scripted_sink(503)
        settings = settings.model_copy(update={"CB_WAIT_DURATION_IN_OPEN_STATE": 60.0})

        with TestClient(create_app(settings=settings, http_transport=sink.transport())) as client:
            statuses = [
                client.post("/cart/orders", json={"coffee": "latte", "username": "dave", "quantity": 2}).status_code
                for _ in range(3)
            ]
            breaker = client.get("/cart/admin/resilience").json()["circuit_breaker"]

        _, orders = asyncio.run(read_tables(database_url))

        assert statuses == [200, 200, 200]
        assert len(orders) == 3
        # First order exhausts its retries and opens the circuit
        assert sink.calls == 5
        assert breaker["state"] == "open"
