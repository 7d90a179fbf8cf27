# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, current_app

from ..services import auth_service
from ..services.auth_service import AuthError


auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.post("/seed")
def seed_cashier_route():
    """
    Create the default cashier (safe to call multiple times).

    Returns the login to use so a fresh install can sign in immediately.
    """
    try:
        user, created = auth_service.seed_default_cashier()
    except Exception:
        current_app.logger.exception("Failed to seed cashier")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "message": "Cashier seeded" if created else "Cashier already exists",
        "user": user.to_dict(),
        "login": {
            "email": auth_service.DEFAULT_CASHIER_EMAIL,
            "password": auth_service.DEFAULT_CASHIER_PASSWORD,
        },
    }), 201 if created else 200


@auth_bp.post("/login")
def login_route():
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify({"error": "Invalid JSON payload"}), 400

    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "email and password required"}), 400
    if not isinstance(email, str) or not isinstance(password, str):
        return jsonify({"error": "email and password must be strings"}), 400

    try:
        user = auth_service.authenticate(email, password)
    except AuthError:
        return jsonify({"error": "Invalid credentials"}), 401

    return jsonify({"user": user.to_dict()}), 200
