# Overview: Service-layer operations for orders; encapsulates business logic and database work.

"""
Order placement

An order is validated, priced, reserved against snack stock and written in
one transaction:

1. The raw request is turned into an OrderRequest (shape, payment method,
   quantities) before any database work.
2. All referenced products are read in one query; unknown or inactive
   products abort the order.
3. The total is accumulated in Decimal, half-up to 3 places.
4. Snack needs are summed per product and their inventory records locked in
   ascending product_id order. Every shortfall is reported, not just the
   first.
5. Order, items (with the price snapshot) and stock decrements are written
   and committed together.

Any failure rolls the whole transaction back. Known failures surface as
their own OrderError subclass; anything else (store errors, the transaction
timeout) surfaces as TransactionFailure with the original exception chained.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from flask import current_app

from ..extensions import db
from ..models import Order, OrderItem
from ..money import quantize_money
from ..validation import SNACK_CATEGORY, ValidationError, parse_strict_int
from ..time_utils import utcnow
from .concurrency import Deadline, transaction_scope
from .inventory_service import lock_inventory_records
from .products_service import get_products_by_ids

_logger = logging.getLogger(__name__)

MAX_NOTE_LENGTH = 255
MAX_LINE_QUANTITY = 10_000


class PaymentMethod(str, Enum):
    CASH = "Cash"
    VISA = "Visa"

    @classmethod
    def parse(cls, value) -> "PaymentMethod":
        if isinstance(value, str):
            wanted = value.strip().lower()
            for member in cls:
                if member.value.lower() == wanted:
                    return member
        raise InvalidRequest(
            f"payment_method must be one of: {', '.join(m.value for m in cls)}"
        )


@dataclass(frozen=True)
class OrderLine:
    product_id: int
    quantity: int
    note: str = ""


@dataclass(frozen=True)
class OrderRequest:
    payment_method: PaymentMethod
    lines: tuple[OrderLine, ...]

    @property
    def product_ids(self) -> list[int]:
        """Distinct product ids, ascending."""
        return sorted({line.product_id for line in self.lines})


@dataclass(frozen=True)
class Shortfall:
    product_id: int
    name: str
    need: int
    available: int

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "need": self.need,
            "available": self.available,
        }


class OrderError(Exception):
    """Base class for order placement failures. Nothing was persisted."""
    kind = "OrderError"
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> dict:
        return {"error": self.detail, "kind": self.kind}


class InvalidRequest(OrderError):
    kind = "InvalidRequest"


class InvalidQuantity(OrderError):
    kind = "InvalidQuantity"

    def __init__(self, detail: str, line_index: int | None = None):
        super().__init__(detail)
        self.line_index = line_index

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["line_index"] = self.line_index
        return data


class ProductNotFound(OrderError):
    kind = "ProductNotFound"

    def __init__(self, missing_ids: list[int]):
        super().__init__("One or more products not found")
        self.missing_ids = list(missing_ids)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["missing_product_ids"] = self.missing_ids
        return data


class InactiveProduct(OrderError):
    kind = "InactiveProduct"

    def __init__(self, product_id: int, name: str):
        super().__init__(f"Inactive product: {name}")
        self.product_id = product_id
        self.name = name

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["product"] = {"product_id": self.product_id, "name": self.name}
        return data


class InsufficientInventory(OrderError):
    kind = "InsufficientInventory"

    def __init__(self, shortfalls: list[Shortfall]):
        super().__init__("Insufficient snack inventory")
        self.shortfalls = list(shortfalls)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["insufficient_items"] = [s.to_dict() for s in self.shortfalls]
        return data


class TransactionFailure(OrderError):
    kind = "TransactionFailure"
    status_code = 500

    def __init__(self, detail: str, cause: BaseException | None = None):
        super().__init__(detail)
        self.cause = cause


def _parse_quantity(raw, index: int) -> int:
    if raw is None:
        raise InvalidQuantity(f"items[{index}].quantity is required", line_index=index)
    try:
        quantity = parse_strict_int(raw, f"items[{index}].quantity")
    except ValidationError as e:
        raise InvalidQuantity(str(e), line_index=index)
    if quantity <= 0:
        raise InvalidQuantity(f"items[{index}].quantity must be > 0", line_index=index)
    if quantity > MAX_LINE_QUANTITY:
        raise InvalidQuantity(
            f"items[{index}].quantity cannot exceed {MAX_LINE_QUANTITY}", line_index=index
        )
    return quantity


def _parse_line(raw, index: int) -> OrderLine:
    if not isinstance(raw, dict):
        raise InvalidRequest(f"items[{index}] must be an object")

    if raw.get("product_id") is None:
        raise InvalidRequest(f"items[{index}].product_id is required")
    try:
        product_id = parse_strict_int(raw["product_id"], f"items[{index}].product_id")
    except ValidationError as e:
        raise InvalidRequest(str(e))

    quantity = _parse_quantity(raw.get("quantity"), index)

    note = raw.get("note")
    note = "" if note is None else str(note).strip()
    if len(note) > MAX_NOTE_LENGTH:
        raise InvalidRequest(f"items[{index}].note exceeds max length {MAX_NOTE_LENGTH}")

    return OrderLine(product_id=product_id, quantity=quantity, note=note)


def build_order_request(payment_method, items) -> OrderRequest:
    """Validate an untyped request body. Any bad line rejects the whole order."""
    if not isinstance(items, list) or not items:
        raise InvalidRequest("Order items required")
    if payment_method is None:
        raise InvalidRequest("payment_method is required")

    method = PaymentMethod.parse(payment_method)
    lines = tuple(_parse_line(raw, i) for i, raw in enumerate(items))
    return OrderRequest(payment_method=method, lines=lines)


def _place_order_locked(cashier_id: int, request: OrderRequest, deadline: Deadline) -> Order:
    products = get_products_by_ids(request.product_ids)
    deadline.check()

    by_id = {p.id: p for p in products}
    missing = [pid for pid in request.product_ids if pid not in by_id]
    if missing:
        raise ProductNotFound(missing)

    for product in products:
        if not product.is_active:
            raise InactiveProduct(product.id, product.name)

    total = Decimal("0.000")
    snack_needs: dict[int, int] = {}
    for line in request.lines:
        product = by_id[line.product_id]
        total = quantize_money(total + quantize_money(product.price_omr) * line.quantity)
        if product.category == SNACK_CATEGORY:
            snack_needs[product.id] = snack_needs.get(product.id, 0) + line.quantity

    records = lock_inventory_records(snack_needs)
    deadline.check()

    shortfalls = [
        Shortfall(
            product_id=pid,
            name=by_id[pid].name,
            need=need,
            available=records[pid].quantity,
        )
        for pid, need in sorted(snack_needs.items())
        if records[pid].quantity < need
    ]
    if shortfalls:
        raise InsufficientInventory(shortfalls)

    order = Order(
        cashier_id=cashier_id,
        payment_method=request.payment_method.value,
        total_amount_omr=total,
        created_at=utcnow(),
    )
    db.session.add(order)
    db.session.flush()

    for line in request.lines:
        product = by_id[line.product_id]
        db.session.add(OrderItem(
            order_id=order.id,
            product_id=product.id,
            quantity=line.quantity,
            price_at_sale_omr=product.price_omr,
            note=line.note,
        ))

    now = utcnow()
    for pid, need in snack_needs.items():
        records[pid].quantity -= need
        records[pid].updated_at = now

    db.session.flush()
    return order


def place_order(
    cashier_id: int,
    payment_method,
    items,
    *,
    timeout: float | None = None,
) -> Order:
    """
    Validate, price, reserve and commit one order, or change nothing.

    cashier_id is trusted (it comes from the auth gate). timeout bounds the
    whole transaction and defaults to ORDER_TRANSACTION_TIMEOUT_SECONDS.

    Raises an OrderError subclass on every failure path.
    """
    order_request = build_order_request(payment_method, items)

    if timeout is None:
        timeout = current_app.config.get("ORDER_TRANSACTION_TIMEOUT_SECONDS")

    try:
        with transaction_scope(timeout=timeout) as deadline:
            order = _place_order_locked(cashier_id, order_request, deadline)
    except OrderError as e:
        _logger.info("Order rejected | cashier_id=%s kind=%s detail=%s", cashier_id, e.kind, e.detail)
        raise
    except Exception as e:
        _logger.warning("Order transaction rolled back | cashier_id=%s cause=%r", cashier_id, e)
        raise TransactionFailure(f"Order transaction failed: {e}", cause=e) from e

    _logger.info(
        "Order committed | order_id=%s cashier_id=%s total=%s lines=%s",
        order.id, cashier_id, order.total_amount_omr, len(order_request.lines),
    )
    return order


def get_order(order_id: int) -> Order | None:
    """Committed order with its items loaded."""
    return db.session.get(Order, order_id)
