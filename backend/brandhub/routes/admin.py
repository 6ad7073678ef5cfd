# Overview: Flask API routes for admin operations; parses input and returns JSON responses.

# backend/brandhub/routes/admin.py
"""
Admin routes for user, profile and brand moderation.

Provides endpoints for:
- User management (list, create, role changes, deactivate, delete)
- Admin profiles (create, permissions, department)
- Brand moderation flags (active, verified)

All endpoints require an admin session.
"""

from flask import Blueprint, request, jsonify, g

from ..errors import ValidationError
from ..services import auth_service, brand_service, profile_service, session_service
from ..decorators import require_auth, require_admin

admin_bp = Blueprint("admin", __name__, url_prefix="/api/admin")

PROFILE_FIELDS = ("name", "age", "gender", "phone", "avatar_url")


# =============================================================================
# USER MANAGEMENT
# =============================================================================

@admin_bp.get("/users")
@require_auth
@require_admin
def list_users():
    """
    Query params:
    - role: admin | brand | customer (optional)
    """
    users = auth_service.list_users(role=request.args.get("role"))
    return jsonify({"users": [u.to_dict() for u in users], "count": len(users)})


@admin_bp.post("/users")
@require_auth
@require_admin
def create_user():
    """
    Create a user of any role, admins included.

    Request body:
    - email: str (required)
    - password: str (required)
    - role: admin | brand | customer (default customer)
    """
    data = request.get_json(silent=True) or {}
    profile = {k: data[k] for k in PROFILE_FIELDS if k in data}
    user = auth_service.create_user(
        data.get("email"),
        data.get("password"),
        role=data.get("role") or "customer",
        **profile,
    )
    return jsonify({"user": user.to_dict()}), 201


@admin_bp.get("/users/<int:user_id>")
@require_auth
@require_admin
def get_user(user_id: int):
    user = auth_service.get_user(user_id)
    user_dict = user.to_dict()
    user_dict["customer_profile"] = user.customer_profile.to_dict() if user.customer_profile else None
    user_dict["admin_profile"] = user.admin_profile.to_dict() if user.admin_profile else None
    return jsonify({"user": user_dict})


@admin_bp.put("/users/<int:user_id>/role")
@require_auth
@require_admin
def set_user_role(user_id: int):
    data = request.get_json(silent=True) or {}
    if user_id == g.current_user.id:
        return jsonify({"error": "You cannot change your own role"}), 400
    user = auth_service.set_role(user_id, data.get("role"))
    return jsonify({"user": user.to_dict()})


@admin_bp.put("/users/<int:user_id>/active")
@require_auth
@require_admin
def set_user_active(user_id: int):
    """
    Activate or deactivate a user.

    WHY: Deactivation also revokes every session so the user is logged out
    immediately rather than at token expiry.
    """
    data = request.get_json(silent=True) or {}
    is_active = data.get("is_active")
    if not isinstance(is_active, bool):
        raise ValidationError("is_active must be true or false")
    if user_id == g.current_user.id and not is_active:
        return jsonify({"error": "You cannot deactivate your own account"}), 400

    user = auth_service.set_active(user_id, is_active)
    revoked = 0 if is_active else session_service.revoke_all_sessions(user_id)
    return jsonify({"user": user.to_dict(), "sessions_revoked": revoked})


@admin_bp.delete("/users/<int:user_id>")
@require_auth
@require_admin
def delete_user(user_id: int):
    if user_id == g.current_user.id:
        return jsonify({"error": "You cannot delete your own account"}), 400
    auth_service.delete_user(user_id)
    return jsonify({"message": "User deleted"})


# =============================================================================
# ADMIN PROFILES
# =============================================================================

@admin_bp.post("/users/<int:user_id>/admin-profile")
@require_auth
@require_admin
def create_admin_profile(user_id: int):
    data = request.get_json(silent=True) or {}
    user = auth_service.get_user(user_id)
    if not user.is_admin:
        raise ValidationError("Admin profiles can only be attached to admin users")
    profile = profile_service.create_admin_profile(
        user_id,
        permissions=data.get("permissions"),
        department=data.get("department"),
        is_superadmin=bool(data.get("is_superadmin", False)),
    )
    return jsonify({"profile": profile.to_dict()}), 201


@admin_bp.patch("/users/<int:user_id>/admin-profile")
@require_auth
@require_admin
def update_admin_profile(user_id: int):
    data = request.get_json(silent=True) or {}
    profile = profile_service.update_admin_profile(
        user_id,
        department=data.get("department"),
        is_superadmin=data.get("is_superadmin"),
    )
    return jsonify({"profile": profile.to_dict()})


@admin_bp.put("/users/<int:user_id>/admin-profile/permissions/<permission>")
@require_auth
@require_admin
def grant_permission(user_id: int, permission: str):
    profile = profile_service.grant_admin_permission(user_id, permission)
    return jsonify({"profile": profile.to_dict()})


@admin_bp.delete("/users/<int:user_id>/admin-profile/permissions/<permission>")
@require_auth
@require_admin
def revoke_permission(user_id: int, permission: str):
    profile = profile_service.revoke_admin_permission(user_id, permission)
    return jsonify({"profile": profile.to_dict()})


# =============================================================================
# BRAND MODERATION
# =============================================================================

@admin_bp.put("/brands/<int:brand_id>/flags")
@require_auth
@require_admin
def set_brand_flags(brand_id: int):
    """Request body: is_active and/or is_verified (booleans)."""
    data = request.get_json(silent=True) or {}
    brand = brand_service.set_brand_flags(
        brand_id,
        g.current_user,
        is_active=data.get("is_active"),
        is_verified=data.get("is_verified"),
    )
    return jsonify({"brand": brand.to_dict()})
