# Overview: Flask API routes for the menu; parses input and returns JSON responses.

"""
Menu management routes. All routes require an identified cashier.
"""
from flask import Blueprint, request

from ..decorators import require_auth
from ..models import Product
from ..services import products_service
from ..validation import (
    ConflictError,
    FieldPolicy,
    ValidationError,
    clean_model_payload,
    normalize_category,
)

PRODUCT_FIELDS = FieldPolicy(
    writable=frozenset({"name", "price_omr", "category", "is_active"}),
    required=frozenset({"name", "price_omr", "category"}),
)

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


def _product_patch(*, partial: bool) -> dict:
    patch = clean_model_payload(Product, request.get_json(silent=True), PRODUCT_FIELDS, partial=partial)
    normalize_category(patch)
    return patch


@products_bp.get("")
@require_auth
def list_all():
    """All products, ordered by category then id."""
    return products_service.list_products()


@products_bp.get("/active")
@require_auth
def list_active():
    """Products that can be sold right now."""
    return products_service.list_products(active_only=True)


@products_bp.post("")
@require_auth
def create():
    try:
        patch = _product_patch(partial=False)
    except ValidationError as e:
        return {"error": str(e)}, 400

    return {"product": products_service.create_product(patch=patch)}, 201


@products_bp.put("/<int(max=2147483647):product_id>")
@require_auth
def update(product_id: int):
    try:
        patch = _product_patch(partial=True)
    except ValidationError as e:
        return {"error": str(e)}, 400

    product = products_service.update_product(product_id=product_id, patch=patch)
    if product is None:
        return {"error": "Product not found"}, 404
    return {"product": product}, 200


@products_bp.delete("/<int(max=2147483647):product_id>")
@require_auth
def delete(product_id: int):
    try:
        found = products_service.delete_product(product_id=product_id)
    except ConflictError as e:
        return {"error": str(e)}, 409

    if not found:
        return {"error": "Product not found"}, 404
    return {"message": "Deleted"}, 200
