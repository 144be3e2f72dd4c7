"""Services attached to the default shared application."""

from .restaurant_service import RestaurantService

__all__ = ["RestaurantService"]
