# backend/cafe_pos/services/products_service.py
"""
Catalog service.

Products are read by the order coordinator through get_products_by_ids();
everything else here is the menu CRUD used by the products routes.
"""
from __future__ import annotations

from typing import Iterable

from ..extensions import db
from ..models import Product, OrderItem
from ..validation import ConflictError

EDITABLE_COLUMNS = ("name", "price_omr", "category", "is_active")


def _apply(product: Product, patch: dict) -> None:
    for column in EDITABLE_COLUMNS:
        if column in patch:
            setattr(product, column, patch[column])


def list_products(*, active_only: bool = False) -> dict:
    query = db.session.query(Product)
    if active_only:
        query = query.filter(Product.is_active.is_(True))
    products = query.order_by(Product.category.asc(), Product.id.asc()).all()
    return {
        "products": [p.to_dict() for p in products],
        "count": len(products),
    }


def get_products_by_ids(product_ids: Iterable[int]) -> list[Product]:
    """
    Catalog reader: one query for every requested id.

    Missing ids are simply absent from the result.
    """
    ids = sorted(set(product_ids))
    if not ids:
        return []
    return (
        db.session.query(Product)
        .filter(Product.id.in_(ids))
        .order_by(Product.id.asc())
        .all()
    )


def create_product(*, patch: dict) -> dict:
    """Create product using a validated patch dict. New products start active."""
    p = Product(is_active=True)
    _apply(p, patch)

    db.session.add(p)
    db.session.commit()
    return p.to_dict()


def update_product(*, product_id: int, patch: dict) -> dict | None:
    """
    Update a product.

    Price changes only affect future orders; committed items keep their
    price_at_sale_omr.
    """
    p = db.session.get(Product, product_id)
    if not p:
        return None

    _apply(p, patch)
    db.session.commit()
    return p.to_dict()


def delete_product(*, product_id: int) -> bool:
    """
    Delete a product (and its inventory record).

    Products that appear on any order are kept for the sales history;
    deactivate those instead.
    """
    p = db.session.get(Product, product_id)
    if not p:
        return False

    sold = db.session.query(OrderItem.id).filter(OrderItem.product_id == product_id).first()
    if sold:
        raise ConflictError("Product has sales history; deactivate it instead")

    db.session.delete(p)
    db.session.commit()
    return True
