from __future__ import annotations

import logging

from flask import Blueprint, abort, current_app, jsonify, request

main_bp = Blueprint("main", __name__)

logger = logging.getLogger(__name__)


@main_bp.route("/healthz")
def healthz():
    """Health-check endpoint used by smoke tests."""

    return jsonify({"status": "ok"})


@main_bp.route("/restaurants", methods=["GET"])
def list_restaurants():
    return jsonify(current_app.restaurant_service.list())


@main_bp.route("/restaurants", methods=["POST"])
def create_restaurant():
    payload = request.get_json(silent=True) or {}
    try:
        restaurant = current_app.restaurant_service.create(payload.get("name", ""))
    except ValueError as exc:
        logger.info("restaurants.create_rejected: %s", exc)
        abort(400, description=str(exc))
    return jsonify(restaurant), 201
