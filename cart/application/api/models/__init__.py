from cart.application.api.models.admin import RefreshResponse, ResilienceResponse
from cart.application.api.models.cart import CoffeeResponse, OrderRequest

__all__ = ["CoffeeResponse", "OrderRequest", "RefreshResponse", "ResilienceResponse"]
