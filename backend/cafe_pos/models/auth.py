from __future__ import annotations

from ..extensions import db
from ..time_utils import to_utc_z, utcnow

class User(db.Model):
    """
    Cashier accounts.

    Every order carries the id of the cashier who rang it up.
    """
    __tablename__ = "users"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(120), nullable=False)
    email = db.Column(db.String(255), nullable=False, unique=True, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"

    def to_dict(self) -> dict:
        return {
            "user_id": self.id,
            "full_name": self.full_name,
            "email": self.email,
            "created_at": to_utc_z(self.created_at),
        }
