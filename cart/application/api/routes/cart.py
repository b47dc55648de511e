"""
Cart Routes
===========

Customer-facing endpoints:

- GET  /coffees   current menu snapshot
- POST /orders    place an order; 200 once persisted, whatever happens to
                  the loyalty points notification afterwards
"""

from fastapi import APIRouter, Response, status

from cart.application.api.dependencies import MenuStateDep, OrderServiceDep
from cart.application.api.models.cart import CoffeeResponse, OrderRequest
from cart.core.logging.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Cart"])


@router.get("/coffees", response_model=list[CoffeeResponse])
async def list_coffees(menu_state: MenuStateDep):
    """
    Return the published menu, sorted by name.

    Reads a single snapshot reference, so a concurrent refresh is observed
    either entirely or not at all.
    """
    return [CoffeeResponse.from_coffee(coffee) for coffee in menu_state.snapshot()]


@router.post("/orders", status_code=status.HTTP_200_OK, response_class=Response)
async def place_order(request: OrderRequest, order_service: OrderServiceDep):
    """
    Persist an order and forward its loyalty points.

    Downstream failures (circuit open, rate limited, sink errors) are
    swallowed by the pipeline; only a persistence failure produces a 5xx,
    via the PersistenceError handler.
    """
    saved = await order_service.place_order(request.to_order())
    logger.info("order_placed", order_id=saved.id, coffee=saved.coffee, username=saved.username)
    return Response(status_code=status.HTTP_200_OK)
