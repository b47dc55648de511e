"""
Order Domain Models

Order is the request body of POST /cart/orders and the row stored in
`cafe_orders`. It is immutable; the store returns a copy carrying the id.

PointsPayload is the wire body sent to the points sink. Quantity maps to
points one to one.
"""

from pydantic import BaseModel, ConfigDict, Field


class Order(BaseModel):
    """A coffee order."""

    model_config = ConfigDict(frozen=True)

    id: int | None = Field(default=None, description="Assigned by the order store")
    coffee: str = Field(..., description="Coffee name")
    username: str = Field(..., description="Customer receiving the loyalty points")
    quantity: int = Field(..., ge=0, description="Number of cups")


class PointsPayload(BaseModel):
    """Body of the points sink notification."""

    model_config = ConfigDict(frozen=True)

    username: str
    amount: int

    @classmethod
    def from_order(cls, order: Order) -> "PointsPayload":
        return cls(username=order.username, amount=order.quantity)
