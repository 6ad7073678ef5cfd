# Overview: Flask API routes for auth operations; parses input and returns JSON responses.

# backend/brandhub/routes/auth.py
"""
Authentication API routes

- Self-registration for brand owners and customers (admins are created by
  other admins or from the CLI)
- Login issues a bearer session token
- Logout revokes it; change-password revokes every session of the user
"""

from flask import Blueprint, request, jsonify, current_app, g

from ..errors import BrandHubError
from ..models.users import ROLE_BRAND, ROLE_CUSTOMER
from ..services import auth_service
from ..services import session_service
from ..decorators import bearer_token, require_auth

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")

SELF_REGISTER_ROLES = (ROLE_BRAND, ROLE_CUSTOMER)
PROFILE_FIELDS = ("name", "age", "gender", "phone", "avatar_url")


@auth_bp.post("/register")
def register_route():
    """
    Create an account.

    Request body:
    - email: str (required)
    - password: str (required, 8+ chars with a letter and a digit)
    - role: "brand" | "customer" (default "customer")
    - name, age, gender, phone, avatar_url: optional profile fields
    - brand: object (optional, brand role only) - onboarding details such as
      industry_category and employee_range, plus the required brand fields

    Customers get an empty customer profile (preferences, saved brands).
    Everything is written in one transaction.
    """
    data = request.get_json(silent=True) or {}
    role = data.get("role") or ROLE_CUSTOMER
    if role not in SELF_REGISTER_ROLES:
        return jsonify({"error": f"role must be one of: {', '.join(SELF_REGISTER_ROLES)}"}), 400

    profile = {k: data[k] for k in PROFILE_FIELDS if k in data}
    user = auth_service.register_user(
        data.get("email"),
        data.get("password"),
        role=role,
        brand=data.get("brand"),
        **profile,
    )
    return jsonify({"user": user.to_dict()}), 201


@auth_bp.post("/login")
def login_route():
    """
    Authenticate user and create session token.

    Token must be included in Authorization header for protected routes.
    """
    data = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")

    if not email or not password:
        return jsonify({"error": "email and password required"}), 400

    try:
        user = auth_service.authenticate(email, password)
        if not user:
            return jsonify({"error": "Invalid credentials"}), 401

        session, token = session_service.create_session(
            user_id=user.id,
            user_agent=request.headers.get("User-Agent"),
            ip_address=request.remote_addr,
        )
    except BrandHubError:
        raise
    except Exception:
        current_app.logger.exception("Failed to login user")
        return jsonify({"error": "Internal server error"}), 500

    return jsonify({
        "user": user.to_dict(),
        "token": token,
        "session": session.to_dict(),
        "message": "Login successful",
    }), 200


@auth_bp.post("/logout")
def logout_route():
    """
    Revoke session token (logout).

    WHY: Explicit logout prevents token reuse.
    """
    token = bearer_token()
    if token is None:
        return jsonify({"error": "Authorization header required"}), 401

    if not session_service.revoke_session(token):
        return jsonify({"error": "Invalid or expired token"}), 401

    return jsonify({"message": "Logout successful"}), 200


@auth_bp.get("/me")
@require_auth
def me_route():
    return jsonify({"user": g.current_user.to_dict()})


@auth_bp.patch("/me")
@require_auth
def update_me_route():
    data = request.get_json(silent=True) or {}
    user = auth_service.update_user(g.current_user.id, data)
    return jsonify({"user": user.to_dict()})


@auth_bp.post("/change-password")
@require_auth
def change_password_route():
    data = request.get_json(silent=True) or {}
    auth_service.change_password(
        g.current_user.id,
        data.get("current_password"),
        data.get("new_password"),
    )
    revoked = session_service.revoke_all_sessions(g.current_user.id)
    return jsonify({"message": "Password changed", "sessions_revoked": revoked})
