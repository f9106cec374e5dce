from __future__ import annotations

from functools import wraps

from flask import request, g, current_app, jsonify

from utils.errors import UnauthorizedError
from utils.security import ACCESS


def jwt_required():
    """
    Require a bearer access token. The token is checked by signature and
    expiry only; its claims land in g.current_user without a DB lookup.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            scheme, _, token = request.headers.get("Authorization", "").partition(" ")
            if scheme.lower() != "bearer":
                raise UnauthorizedError("Access token is required")
            token = token.strip()
            if not token:
                raise UnauthorizedError("Access token is required")

            tokens = current_app.extensions["token_issuer"]
            decoded = tokens.verify(token, ACCESS)

            g.current_user = {
                "id": decoded["sub"],
                "email": decoded.get("email"),
                "role": decoded.get("role"),
            }
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def require_body(fn):
    """Reject POST/PUT/PATCH requests whose JSON body is missing, empty or unreadable."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        if request.method in ("POST", "PUT", "PATCH"):
            payload = request.get_json(silent=True)
            if payload is None and request.get_data(cache=True):
                return jsonify(
                    {"success": False, "message": "Invalid JSON format in request body"}
                ), 400
            if not payload:
                return jsonify(
                    {
                        "success": False,
                        "message": "Request body is required",
                        "errors": [{"field": "body", "message": "Request body cannot be empty"}],
                    }
                ), 400
        return fn(*args, **kwargs)

    return wrapper
