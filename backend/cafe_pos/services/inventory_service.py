# Overview: Service-layer operations for inventory; encapsulates business logic and database work.

# backend/cafe_pos/services/inventory_service.py
"""
Snack inventory invariants (authoritative)

- Only products with category 'snack' have stock. Other categories are
  unlimited and never get an InventoryRecord.
- InventoryRecord.quantity is stored (not derived) and is never negative.
- Records are created lazily with quantity 0 (insert-if-absent), either by
  a manual adjustment or by the first order that reserves the product.
- Every writer (orders and adjustments) reads the quantity under a row lock
  inside transaction_scope() and writes it back in the same transaction.
- Multiple records are always locked in ascending product_id order so two
  transactions reserving the same snacks cannot deadlock.
"""
from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

from ..extensions import db
from ..models import Product, InventoryRecord
from ..validation import MAX_INT, SNACK_CATEGORY
from ..time_utils import utcnow, to_utc_z
from .concurrency import lock_for_update, transaction_scope

_logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """Raised for stock adjustment errors."""
    def __init__(self, message: str, details: dict | None = None, status_code: int = 400):
        super().__init__(message)
        self.details = details or {}
        self.status_code = status_code


def ensure_inventory_record(product_id: int) -> None:
    """INSERT ... ON CONFLICT DO NOTHING for a zero-quantity record."""
    dialect = db.engine.dialect.name
    if dialect in ("sqlite", "postgresql"):
        insert = sqlite_insert if dialect == "sqlite" else pg_insert
        stmt = (
            insert(InventoryRecord)
            .values(product_id=product_id, quantity=0, updated_at=utcnow())
            .on_conflict_do_nothing(index_elements=["product_id"])
        )
        db.session.execute(stmt)
        return

    if db.session.get(InventoryRecord, product_id) is None:
        db.session.add(InventoryRecord(product_id=product_id, quantity=0, updated_at=utcnow()))
        db.session.flush()


def lock_inventory_records(product_ids: Iterable[int]) -> dict[int, InventoryRecord]:
    """
    Ensure and lock one record per product id, ascending.

    Must run inside transaction_scope(); the locks are held until it exits.
    """
    locked: dict[int, InventoryRecord] = {}
    for product_id in sorted(set(product_ids)):
        ensure_inventory_record(product_id)
        record = (
            lock_for_update(db.session.query(InventoryRecord).filter_by(product_id=product_id))
            .populate_existing()
            .one()
        )
        locked[product_id] = record
    return locked


def list_snack_inventory() -> list[dict]:
    """All snack products with their stock; products without a record show 0."""
    rows = (
        db.session.query(Product, InventoryRecord)
        .outerjoin(InventoryRecord, InventoryRecord.product_id == Product.id)
        .filter(Product.category == SNACK_CATEGORY)
        .order_by(Product.id.asc())
        .all()
    )
    return [
        {
            "product_id": product.id,
            "name": product.name,
            "is_active": product.is_active,
            "quantity": record.quantity if record else 0,
            "updated_at": to_utc_z(record.updated_at) if record else None,
        }
        for product, record in rows
    ]


def adjust_inventory(*, product_id: int, delta: int, timeout: float | None = None) -> InventoryRecord:
    """
    Stock correction: add (delta > 0) or remove (delta < 0) units.

    Same locking discipline as order placement; the result may not go
    below zero.
    """
    with transaction_scope(timeout=timeout):
        product = db.session.get(Product, product_id)
        if product is None:
            raise InventoryError("Product not found", status_code=404)
        if product.category != SNACK_CATEGORY:
            raise InventoryError("Only snacks have inventory")

        record = lock_inventory_records([product_id])[product_id]
        current = record.quantity
        new_quantity = current + delta
        if new_quantity < 0:
            raise InventoryError(
                f"Insufficient stock. Current={current}",
                details={"product_id": product_id, "current": current, "delta": delta},
            )
        if new_quantity > MAX_INT:
            raise InventoryError(
                f"Stock cannot exceed {MAX_INT}",
                details={"product_id": product_id, "current": current, "delta": delta},
            )

        record.quantity = new_quantity
        record.updated_at = utcnow()

    _logger.info(
        "Inventory adjusted | product_id=%s delta=%s quantity=%s->%s",
        product_id, delta, current, new_quantity,
    )
    return record
