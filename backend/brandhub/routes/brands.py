# Overview: Flask API routes for brand profiles and reviews; parses input and returns JSON responses.

# backend/brandhub/routes/brands.py
"""
Brand profile routes.

SECURITY:
- Listing, detail and reviews are readable without a session (the public
  brand directory); listings hide deactivated brands from everyone but admins
- Brand-role users manage only their own brand (ensure_brand_access)
- Reviews are written by customers; a review is deleted by its author or an admin
"""
from flask import Blueprint, request, jsonify, g

from ..errors import PermissionDeniedError
from ..models.users import ROLE_BRAND, ROLE_CUSTOMER
from ..services import brand_service, review_service
from ..decorators import bearer_token, ensure_brand_access, require_auth, require_role
from ..services import session_service

brands_bp = Blueprint("brands", __name__, url_prefix="/api/brands")


def _caller_is_admin() -> bool:
    token = bearer_token()
    context = session_service.validate_session(token) if token else None
    return bool(context and context.user.is_admin)


@brands_bp.get("")
def list_brands_route():
    """
    List brands.

    Query params:
    - search: str (optional) - case-insensitive name match
    - verified: bool (optional) - only verified brands
    - include_inactive: bool (admins only)
    - page: int (optional) - page number (1-indexed). If omitted, returns all items.
    - per_page: int (optional) - items per page (default 20, max 100)
    """
    include_inactive = request.args.get("include_inactive", "false").lower() == "true"
    result = brand_service.list_brands(
        active_only=not (include_inactive and _caller_is_admin()),
        verified_only=request.args.get("verified", "false").lower() == "true",
        search=request.args.get("search"),
        page=request.args.get("page", type=int),
        per_page=request.args.get("per_page", type=int),
    )
    return jsonify(result)


@brands_bp.post("")
@require_auth
@require_role(ROLE_BRAND)
def create_brand_route():
    payload = request.get_json(silent=True) or {}
    brand = brand_service.create_brand(g.current_user.id, payload)
    return jsonify({"brand": brand.to_dict()}), 201


@brands_bp.get("/me")
@require_auth
@require_role(ROLE_BRAND)
def get_own_brand_route():
    brand = brand_service.get_brand_for_user(g.current_user.id)
    return jsonify({"brand": brand.to_dict(), "slug": brand_service.brand_slug(brand.name)})


@brands_bp.put("/me")
@require_auth
@require_role(ROLE_BRAND)
def save_own_brand_route():
    """
    Create-or-update the caller's brand profile (the profile form's save button).

    The response carries the brand's URL slug for the public brand link.
    """
    payload = request.get_json(silent=True) or {}
    brand, created = brand_service.save_brand_profile(g.current_user.id, payload)
    return jsonify({
        "brand": brand.to_dict(),
        "slug": brand_service.brand_slug(brand.name),
        "created": created,
    }), 201 if created else 200


@brands_bp.get("/<int:brand_id>")
def get_brand_route(brand_id: int):
    brand = brand_service.get_brand(brand_id)
    return jsonify({"brand": brand.to_dict()})


@brands_bp.patch("/<int:brand_id>")
@require_auth
@require_role(ROLE_BRAND)
def update_brand_route(brand_id: int):
    ensure_brand_access(brand_id)
    payload = request.get_json(silent=True) or {}
    brand = brand_service.update_brand(brand_id, payload)
    return jsonify({"brand": brand.to_dict()})


@brands_bp.delete("/<int:brand_id>")
@require_auth
@require_role(ROLE_BRAND)
def delete_brand_route(brand_id: int):
    ensure_brand_access(brand_id)
    brand_service.delete_brand(brand_id)
    return jsonify({"message": "Brand deleted"})


# =============================================================================
# REVIEWS
# =============================================================================

@brands_bp.get("/<int:brand_id>/reviews")
def list_reviews_route(brand_id: int):
    brand_service.get_brand(brand_id)
    reviews = review_service.list_reviews(brand_id)
    return jsonify({
        "reviews": [r.to_dict() for r in reviews],
        "count": len(reviews),
        "summary": review_service.brand_rating_summary(brand_id),
    })


@brands_bp.post("/<int:brand_id>/reviews")
@require_auth
@require_role(ROLE_CUSTOMER)
def create_review_route(brand_id: int):
    data = request.get_json(silent=True) or {}
    review = review_service.create_review(
        g.current_user.id,
        brand_id,
        data.get("rating"),
        comment=data.get("comment"),
        images=data.get("images"),
    )
    return jsonify({"review": review.to_dict()}), 201


@brands_bp.delete("/<int:brand_id>/reviews/<int:review_id>")
@require_auth
def delete_review_route(brand_id: int, review_id: int):
    review = review_service.get_review(review_id)
    if review.brand_id != brand_id:
        return jsonify({"error": "Review not found"}), 404
    if review.user_id != g.current_user.id and not g.current_user.is_admin:
        raise PermissionDeniedError("Only the author or an admin can delete a review")
    review_service.delete_review(review_id)
    return jsonify({"message": "Review deleted"})
