from __future__ import annotations

from ..extensions import db
from ..money import money_str
from ..time_utils import to_utc_z, utcnow

class Order(db.Model):
    """
    A committed sale. Written once, together with its items, and never
    updated afterwards.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.CheckConstraint("payment_method IN ('Cash', 'Visa')", name="ck_orders_payment_method"),
        db.Index("ix_orders_created_at", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    cashier_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False, index=True)
    payment_method = db.Column(db.String(16), nullable=False)
    total_amount_omr = db.Column(db.Numeric(12, 3, asdecimal=True), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    cashier = db.relationship("User")
    items = db.relationship(
        "OrderItem",
        back_populates="order",
        order_by="OrderItem.id",
        lazy="selectin",
    )

    def to_dict(self) -> dict:
        return {
            "order_id": self.id,
            "cashier_id": self.cashier_id,
            "payment_method": self.payment_method,
            "total_amount_omr": money_str(self.total_amount_omr),
            "created_at": to_utc_z(self.created_at),
        }

class OrderItem(db.Model):
    """One line of an order; price_at_sale_omr is the catalog price when it was rung up."""
    __tablename__ = "order_items"
    __table_args__ = (
        db.CheckConstraint("quantity > 0", name="ck_order_items_quantity_positive"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)

    quantity = db.Column(db.Integer, nullable=False)
    price_at_sale_omr = db.Column(db.Numeric(10, 3, asdecimal=True), nullable=False)
    note = db.Column(db.String(255), nullable=False, default="")

    order = db.relationship("Order", back_populates="items")
    product = db.relationship("Product")

    def to_dict(self) -> dict:
        return {
            "order_item_id": self.id,
            "order_id": self.order_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "price_at_sale_omr": money_str(self.price_at_sale_omr),
            "note": self.note,
        }
