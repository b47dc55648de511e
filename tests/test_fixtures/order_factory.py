"""
Order Factory for Test Data

Creates consistent Order objects for testing with various scenarios.
"""


from cart.orders.models import Order


class OrderFactory:
    """Factory for creating valid Order objects."""

    @staticmethod
    def basic(coffee: str = "latte", username: str = "alice", quantity: int = 2) -> Order:
        """Create an order that has not been persisted yet."""
        return Order(coffee=coffee, username=username, quantity=quantity)

    @staticmethod
    def persisted(order_id: int = 1, quantity: int = 2) -> Order:
        """Create an order as returned by the order store."""
        return Order(id=order_id, coffee="latte", username="alice", quantity=quantity)

    @staticmethod
    def batch(count: int = 5) -> list[Order]:
        return [
            Order(coffee=f"coffee-{i}", username=f"user-{i}", quantity=i)
            for i in range(count)
        ]
