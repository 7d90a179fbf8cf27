from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

class InventoryRecord(db.Model):
    """
    Stock on hand for one snack product.

    Created lazily (quantity 0) by the first adjustment or the first order
    that reserves the product. quantity never goes below zero: every writer
    holds the row lock while it checks and decrements, and the CHECK
    constraint backs that up at the database level.
    """
    __tablename__ = "inventory"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),
    )

    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), primary_key=True, autoincrement=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    product = db.relationship("Product", back_populates="inventory")

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "quantity": self.quantity,
            "updated_at": to_utc_z(self.updated_at),
        }
