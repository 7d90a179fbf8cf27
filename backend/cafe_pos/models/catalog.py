from __future__ import annotations

from ..extensions import db
from ..money import money_str
from ..time_utils import to_utc_z, utcnow

class Product(db.Model):
    """
    Menu item.

    Prices are fixed-point OMR with 3 decimals. Only products in the
    "snack" category have an InventoryRecord; everything else is made to
    order and never runs out.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_category_active", "category", "is_active"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False)
    category = db.Column(db.String(32), nullable=False, index=True)
    price_omr = db.Column(db.Numeric(10, 3, asdecimal=True), nullable=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    inventory = db.relationship(
        "InventoryRecord",
        uselist=False,
        back_populates="product",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} category={self.category!r}>"

    def to_dict(self) -> dict:
        return {
            "product_id": self.id,
            "name": self.name,
            "category": self.category,
            "price_omr": money_str(self.price_omr),
            "is_active": self.is_active,
            "created_at": to_utc_z(self.created_at),
        }
