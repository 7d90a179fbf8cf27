# Overview: Request decorators for API routes.

from functools import wraps
from flask import request, jsonify, g

from .services import auth_service


USER_HEADER = "X-User-Id"


def require_auth(f):
    """
    Require an identified cashier.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.cashier_id: its id, used as Order.cashier_id

    Returns 401 if the X-User-Id header is missing or does not name a user.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        raw_user_id = request.headers.get(USER_HEADER)

        if not raw_user_id:
            return jsonify({"error": "Missing x-user-id header"}), 401

        user = auth_service.resolve_cashier(raw_user_id)
        if user is None:
            return jsonify({"error": "Invalid user"}), 401

        g.current_user = user
        g.cashier_id = user.id

        return f(*args, **kwargs)

    return decorated_function
