"""
Cart API Models
===============

Request and response bodies for the cart endpoints.
"""

from pydantic import BaseModel, Field

from cart.menu.models import Coffee
from cart.orders.models import Order


class CoffeeResponse(BaseModel):
    """One menu entry."""

    id: int | None = Field(default=None, description="Database id, when known")
    name: str = Field(..., description="Coffee name")

    @classmethod
    def from_coffee(cls, coffee: Coffee) -> "CoffeeResponse":
        return cls(id=coffee.id, name=coffee.name)


class OrderRequest(BaseModel):
    """Body of POST /cart/orders."""

    coffee: str = Field(..., min_length=1, description="Coffee name")
    username: str = Field(..., min_length=1, description="Customer receiving the points")
    quantity: int = Field(..., ge=0, description="Number of cups")

    def to_order(self) -> Order:
        return Order(coffee=self.coffee, username=self.username, quantity=self.quantity)
