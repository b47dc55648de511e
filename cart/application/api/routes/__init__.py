from cart.application.api.routes.admin import router as admin_router
from cart.application.api.routes.cart import router as cart_router
from cart.application.api.routes.health import router as health_router

__all__ = ["admin_router", "cart_router", "health_router"]
