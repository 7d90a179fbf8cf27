# Overview: Flask API routes for orders; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g, current_app

from ..decorators import require_auth
from ..services import order_service
from ..services.order_service import InvalidRequest, OrderError, TransactionFailure


orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


@orders_bp.post("")
@require_auth
def create_order_route():
    """
    Place an order for the authenticated cashier.

    Body: {"payment_method": "Cash"|"Visa", "items": [{"product_id", "quantity", "note"?}]}
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify(InvalidRequest("Invalid JSON payload").to_dict()), 400

    try:
        order = order_service.place_order(
            g.cashier_id,
            data.get("payment_method"),
            data.get("items"),
        )
    except TransactionFailure as e:
        current_app.logger.error("Order transaction failed: %r", e.cause)
        return jsonify(e.to_dict()), e.status_code
    except OrderError as e:
        return jsonify(e.to_dict()), e.status_code

    return jsonify({"order": order.to_dict()}), 201


@orders_bp.get("/<int(max=2147483647):order_id>")
@require_auth
def get_order_route(order_id: int):
    order = order_service.get_order(order_id)
    if not order:
        return jsonify({"error": "Order not found"}), 404

    return jsonify({
        "order": order.to_dict(),
        "items": [item.to_dict() for item in order.items],
    }), 200
