# Overview: Request body parsing shared by the routes (menu writes, stock adjustments, order lines).

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy import Boolean, Integer, Numeric, String

from .money import MAX_PRICE_OMR, MONEY_PLACES, to_decimal


# Fixed set of menu categories; only "snack" is stock-tracked
PRODUCT_CATEGORIES = ("coffee", "tea", "cold_drink", "bakery", "snack")
SNACK_CATEGORY = "snack"

# Integer column range (32-bit on PostgreSQL)
MAX_INT = 2**31 - 1


class ValidationError(ValueError):
    """400-level input problem."""


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., deleting a product that has sales)."""


@dataclass(frozen=True)
class FieldPolicy:
    """
    Which columns a client may write, and which a create must supply.
    Anything outside `writable` is rejected rather than ignored.
    """
    writable: frozenset[str]
    required: frozenset[str] = frozenset()


def parse_strict_int(value: Any, field: str) -> int:
    """
    Integer input, strict: rejects bools, floats with a fraction, scientific
    notation, decimal strings and anything outside the Integer column range.
    """
    number = _parse_int(value, field)
    if not -MAX_INT - 1 <= number <= MAX_INT:
        raise ValidationError(f"{field} is out of range")
    return number


def _parse_int(value: Any, field: str) -> int:
    # bool is a subclass of int
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{field} must be an integer, not a decimal")
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be an integer")
        if "e" in stripped.lower():
            raise ValidationError(f"{field} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{field} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer")
    raise ValidationError(f"{field} must be an integer")


def parse_price(value: Any, field: str = "price_omr") -> Decimal:
    price = to_decimal(value)
    if price is None:
        raise ValidationError(f"{field} must be a number")
    if price < 0:
        raise ValidationError(f"{field} must be >= 0")
    if price != price.quantize(MONEY_PLACES):
        raise ValidationError(f"{field} allows at most 3 decimal places")
    if price > MAX_PRICE_OMR:
        raise ValidationError(f"{field} cannot exceed {MAX_PRICE_OMR}")
    return price.quantize(MONEY_PLACES)


def _parse_bool(value: Any, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValidationError(f"{key} must be a boolean")


def _clean_field(column, raw: Any):
    """Coerce one raw JSON value to the column's Python type."""
    key = column.key
    if raw is None:
        if not column.nullable:
            raise ValidationError(f"{key} cannot be null")
        return None

    kind = column.type
    if isinstance(kind, Boolean):
        return _parse_bool(raw, key)
    if isinstance(kind, Numeric):
        return parse_price(raw, key)
    if isinstance(kind, Integer):
        return parse_strict_int(raw, key)
    if not isinstance(kind, String):
        return raw

    text = str(raw).strip()
    if not text and not column.nullable:
        raise ValidationError(f"{key} cannot be blank")
    if kind.length and len(text) > kind.length:
        raise ValidationError(f"{key} exceeds max length {kind.length}")
    return text


def clean_model_payload(model, payload: Any, policy: FieldPolicy, *, partial: bool) -> dict:
    """
    Turn a JSON body into a patch dict for `model`, typed by its columns.

    partial=False is a create: every policy.required field must be present.
    partial=True is an update: only the keys that were sent are checked.
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(policy.required - payload.keys())
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    columns = {c.key: c for c in model.__mapper__.columns}
    patch: dict = {}
    for key, raw in payload.items():
        if key not in policy.writable or key not in columns:
            raise ValidationError(f"Field not allowed: {key}")
        patch[key] = _clean_field(columns[key], raw)
    return patch


def normalize_category(patch: dict) -> None:
    """Lowercase and check `category` in place; the set of categories is fixed."""
    if "category" not in patch:
        return
    category = (patch["category"] or "").lower()
    if category not in PRODUCT_CATEGORIES:
        raise ValidationError(f"category must be one of: {', '.join(PRODUCT_CATEGORIES)}")
    patch["category"] = category


def parse_inventory_adjustment(payload: Any) -> tuple[int, int]:
    """Returns (product_id, delta). Delta may be negative but never zero."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    if payload.get("product_id") is None:
        raise ValidationError("product_id is required")
    if payload.get("delta") is None:
        raise ValidationError("delta is required")

    product_id = parse_strict_int(payload["product_id"], "product_id")
    delta = parse_strict_int(payload["delta"], "delta")
    if delta == 0:
        raise ValidationError("delta must be non-zero")
    return product_id, delta
