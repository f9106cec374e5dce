"""
Authentication blueprint:
- POST /auth/signup
- POST /auth/login
- POST /auth/refresh-token
- POST /auth/logout
- GET  /auth/profile
- PUT  /auth/profile

Views only validate input (marshmallow) and format the envelope; the work
is done by the AuthService stored on the app.
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify, g, current_app

from models.schemas.user import (
    SignupSchema,
    LoginSchema,
    RefreshTokenSchema,
    UpdateProfileSchema,
    UserOutSchema,
    ProfileOutSchema,
)
from services.auth_service import AuthService
from utils.decorators import jwt_required, require_body

bp = Blueprint("auth", __name__)

signup_schema = SignupSchema()
login_schema = LoginSchema()
refresh_token_schema = RefreshTokenSchema()
update_profile_schema = UpdateProfileSchema()
user_out_schema = UserOutSchema()
profile_out_schema = ProfileOutSchema()


def auth_service() -> AuthService:
    return current_app.extensions["auth_service"]


def _session_payload(result: dict) -> dict:
    return {
        "user": user_out_schema.dump(result["user"]),
        "accessToken": result["accessToken"],
        "refreshToken": result["refreshToken"],
    }


@bp.post("/signup")
@require_body
def signup():
    """
    Register a new customer account.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          required: [email, password, firstName, lastName]
          properties:
            email: { type: string, format: email }
            password: { type: string, minLength: 8, description: "upper, lower and a digit" }
            firstName: { type: string }
            lastName: { type: string }
            phone: { type: string }
    responses:
      201:
        description: Created (returns user, accessToken, refreshToken)
      400:
        description: Validation error
      409:
        description: Email already registered
    """
    data = signup_schema.load(request.get_json(silent=True) or {})
    result = auth_service().signup(
        email=data["email"],
        password=data["password"],
        first_name=data["first_name"],
        last_name=data["last_name"],
        phone=data.get("phone"),
    )
    return jsonify(
        {
            "success": True,
            "message": "User registered successfully",
            "data": _session_payload(result),
        }
    ), 201


@bp.post("/login")
@require_body
def login():
    """
    Login: return the user with an access token and a refresh token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: true
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      401:
        description: Invalid credentials or deactivated account
    """
    data = login_schema.load(request.get_json(silent=True) or {})
    result = auth_service().login(data["email"], data["password"])
    return jsonify(
        {
            "success": True,
            "message": "Login successful",
            "data": _session_payload(result),
        }
    ), 200


@bp.post("/refresh-token")
@require_body
def refresh_token():
    """
    Exchange a refresh token for a new access token (no rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: true
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: OK (returns accessToken)
      401:
        description: Invalid, unknown or expired refresh token
    """
    data = refresh_token_schema.load(request.get_json(silent=True) or {})
    result = auth_service().refresh_access_token(data["refresh_token"])
    return jsonify(
        {
            "success": True,
            "message": "Token refreshed successfully",
            "data": result,
        }
    ), 200


@bp.post("/logout")
@require_body
def logout():
    """
    Logout: deletes the refresh token. Idempotent.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: true
         schema:
           type: object
           properties:
             refreshToken: { type: string }
    responses:
      200:
        description: Logged out
    """
    data = refresh_token_schema.load(request.get_json(silent=True) or {})
    auth_service().logout(data["refresh_token"])
    return jsonify({"success": True, "message": "Logged out successfully"}), 200


@bp.get("/profile")
@jwt_required()
def get_profile():
    """
    Get the current user's profile
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Missing, invalid or expired access token
      404:
        description: User no longer exists
    """
    user = auth_service().get_profile(g.current_user["id"])
    return jsonify({"success": True, "data": profile_out_schema.dump(user)}), 200


@bp.put("/profile")
@jwt_required()
@require_body
def update_profile():
    """
    Update first name, last name and/or phone
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         required: true
         schema:
           type: object
           properties:
             firstName: { type: string }
             lastName: { type: string }
             phone: { type: string }
    responses:
      200:
        description: Updated
      400:
        description: Validation error
      401:
        description: Unauthorized
    """
    data = update_profile_schema.load(request.get_json(silent=True) or {})
    user = auth_service().update_profile(
        g.current_user["id"],
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        phone=data.get("phone"),
    )
    return jsonify(
        {
            "success": True,
            "message": "Profile updated successfully",
            "data": user_out_schema.dump(user),
        }
    ), 200
