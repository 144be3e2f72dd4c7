from __future__ import annotations

import logging
from typing import Any, Dict, List

from ..extensions import db
from ..models import Restaurant

logger = logging.getLogger(__name__)


class RestaurantService:
    """Persistence helpers for restaurants.

    Must be used inside an application context; setup callbacks registered
    with :func:`shared_app.register_fixture` already run inside one.
    """

    def create(self, name: str) -> Dict[str, Any]:
        name = (name or "").strip()
        if not name:
            raise ValueError("Restaurant name is required")

        restaurant = Restaurant(name=name)
        db.session.add(restaurant)
        db.session.commit()
        logger.debug("restaurant_service.created id=%s", restaurant.id)
        return restaurant.to_dict()

    def list(self) -> List[Dict[str, Any]]:
        rows = db.session.scalars(db.select(Restaurant).order_by(Restaurant.id)).all()
        return [row.to_dict() for row in rows]
