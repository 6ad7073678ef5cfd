# Overview: Flask API routes for customer and admin profiles; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify, g

from ..models.users import ROLE_ADMIN, ROLE_CUSTOMER
from ..services import profile_service
from ..decorators import require_auth, require_role

profiles_bp = Blueprint("profiles", __name__, url_prefix="/api/profiles")


@profiles_bp.post("/customer")
@require_auth
@require_role(ROLE_CUSTOMER)
def create_customer_profile_route():
    data = request.get_json(silent=True) or {}
    profile = profile_service.create_customer_profile(
        g.current_user.id,
        preferences=data.get("preferences"),
        saved_brand_ids=data.get("saved_brand_ids"),
    )
    return jsonify({"profile": profile.to_dict()}), 201


@profiles_bp.get("/customer")
@require_auth
@require_role(ROLE_CUSTOMER)
def get_customer_profile_route():
    profile = profile_service.get_customer_profile(g.current_user.id)
    return jsonify({"profile": profile.to_dict()})


@profiles_bp.put("/customer/preferences")
@require_auth
@require_role(ROLE_CUSTOMER)
def update_preferences_route():
    data = request.get_json(silent=True) or {}
    profile = profile_service.update_customer_preferences(g.current_user.id, data.get("preferences"))
    return jsonify({"profile": profile.to_dict()})


@profiles_bp.get("/customer/saved-brands")
@require_auth
@require_role(ROLE_CUSTOMER)
def list_saved_brands_route():
    brands = profile_service.list_saved_brands(g.current_user.id)
    return jsonify({"brands": [b.to_dict() for b in brands], "count": len(brands)})


@profiles_bp.put("/customer/saved-brands/<int:brand_id>")
@require_auth
@require_role(ROLE_CUSTOMER)
def save_brand_route(brand_id: int):
    profile = profile_service.save_brand(g.current_user.id, brand_id)
    return jsonify({"profile": profile.to_dict()})


@profiles_bp.delete("/customer/saved-brands/<int:brand_id>")
@require_auth
@require_role(ROLE_CUSTOMER)
def unsave_brand_route(brand_id: int):
    profile = profile_service.unsave_brand(g.current_user.id, brand_id)
    return jsonify({"profile": profile.to_dict()})


@profiles_bp.get("/admin")
@require_auth
@require_role(ROLE_ADMIN)
def get_admin_profile_route():
    profile = profile_service.get_admin_profile(g.current_user.id)
    return jsonify({"profile": profile.to_dict()})
