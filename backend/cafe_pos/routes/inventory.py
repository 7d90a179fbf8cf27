# backend/cafe_pos/routes/inventory.py
"""
Snack inventory routes.

Only snack products carry stock. Adjustments are signed deltas and may
never take a product below zero.
"""
from flask import Blueprint, request, current_app

from ..validation import ValidationError, parse_inventory_adjustment
from ..decorators import require_auth
from ..services.inventory_service import InventoryError, adjust_inventory, list_snack_inventory


inventory_bp = Blueprint("inventory", __name__, url_prefix="/api/inventory")


@inventory_bp.get("")
@require_auth
def list_inventory_route():
    return {"items": list_snack_inventory()}, 200


@inventory_bp.post("/adjust")
@require_auth
def adjust_inventory_route():
    payload = request.get_json(silent=True) or {}

    try:
        product_id, delta = parse_inventory_adjustment(payload)
    except ValidationError as e:
        return {"error": str(e)}, 400

    try:
        record = adjust_inventory(product_id=product_id, delta=delta)
    except InventoryError as e:
        return {"error": str(e), "details": e.details}, e.status_code
    except Exception:
        current_app.logger.exception("Failed to adjust inventory")
        return {"error": "Internal server error"}, 500

    return {"inventory": record.to_dict()}, 200
