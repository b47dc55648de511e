"""
FastAPI Dependencies
====================

Accessors for the application singletons built in the lifespan and stored on
`app.state`. Routes declare them with the Annotated aliases at the bottom.
"""

from typing import Annotated

from fastapi import Depends, Request

from cart.application.services.order_service import OrderService
from cart.core.events import RefreshEventBus
from cart.core.tasks import BackgroundTaskRegistry
from cart.infrastructure.database.engine import Database
from cart.menu.state import MenuState
from cart.orders.outbound_pipeline import OutboundPipeline


def get_menu_state(request: Request) -> MenuState:
    return request.app.state.menu_state


def get_order_service(request: Request) -> OrderService:
    return request.app.state.order_service


def get_pipeline(request: Request) -> OutboundPipeline:
    return request.app.state.pipeline


def get_event_bus(request: Request) -> RefreshEventBus:
    return request.app.state.event_bus


def get_tasks(request: Request) -> BackgroundTaskRegistry:
    return request.app.state.tasks


def get_database(request: Request) -> Database:
    return request.app.state.database


MenuStateDep = Annotated[MenuState, Depends(get_menu_state)]
OrderServiceDep = Annotated[OrderService, Depends(get_order_service)]
PipelineDep = Annotated[OutboundPipeline, Depends(get_pipeline)]
EventBusDep = Annotated[RefreshEventBus, Depends(get_event_bus)]
TasksDep = Annotated[BackgroundTaskRegistry, Depends(get_tasks)]
DatabaseDep = Annotated[Database, Depends(get_database)]
