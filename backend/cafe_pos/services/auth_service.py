# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Cashier authentication.

Passwords are hashed with bcrypt. There are no sessions: after login the
client sends the cashier's id in the X-User-Id header, and resolve_cashier()
is the gate every protected route goes through.
"""

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import User
from ..validation import MAX_INT


DEFAULT_CASHIER_NAME = "Default Cashier"
DEFAULT_CASHIER_EMAIL = "cashier@coffee.com"
DEFAULT_CASHIER_PASSWORD = "123456"


class AuthError(Exception):
    """Raised for login failures and invalid account data."""
    pass


def hash_password(password: str) -> str:
    """Hash password using bcrypt; cost comes from BCRYPT_ROUNDS."""
    if not password:
        raise AuthError("Password is required")
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise.
    """
    if not isinstance(password, str) or not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        # Malformed hash in the database
        return False


def _normalize_email(email: str | None) -> str:
    if not isinstance(email, str):
        return ""
    return email.strip().lower()


def create_cashier(full_name: str, email: str, password: str) -> User:
    full_name = (full_name or "").strip()
    email = _normalize_email(email)
    if not full_name:
        raise AuthError("full_name is required")
    if not email:
        raise AuthError("email is required")

    if db.session.query(User).filter_by(email=email).first():
        raise AuthError(f"User with email {email} already exists")

    user = User(full_name=full_name, email=email, password_hash=hash_password(password))
    db.session.add(user)
    db.session.commit()
    return user


def seed_default_cashier() -> tuple[User, bool]:
    """
    Create the default cashier if missing.

    Safe to call repeatedly; returns (user, created).
    """
    existing = db.session.query(User).filter_by(email=DEFAULT_CASHIER_EMAIL).first()
    if existing:
        return existing, False

    user = create_cashier(DEFAULT_CASHIER_NAME, DEFAULT_CASHIER_EMAIL, DEFAULT_CASHIER_PASSWORD)
    return user, True


def authenticate(email: str, password: str) -> User:
    """
    Return the user for a valid email/password pair.

    Unknown email and wrong password fail identically.
    """
    user = db.session.query(User).filter_by(email=_normalize_email(email)).first()
    if user is None or not verify_password(password, user.password_hash):
        raise AuthError("Invalid credentials")
    return user


def resolve_cashier(raw_user_id) -> User | None:
    """Map an X-User-Id header value to a User, or None."""
    if raw_user_id is None:
        return None
    try:
        user_id = int(str(raw_user_id).strip())
    except ValueError:
        return None
    if not 0 < user_id <= MAX_INT:
        return None
    return db.session.get(User, user_id)
