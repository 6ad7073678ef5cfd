# Overview: Flask API routes for landing pages and their blocks; parses input and returns JSON responses.

# backend/brandhub/routes/landing_pages.py
"""
Landing page editor routes.

Pages and blocks are managed by the owning brand (or an admin). The public,
read-only view of a published page lives in routes/public.py.

Block order is maintained server-side: insert, move and delete renumber the
page, and a full reorder is applied in one transaction.
"""
from flask import Blueprint, request, jsonify

from ..models.users import ROLE_BRAND
from ..services import block_service, brand_service, landing_page_service
from ..decorators import ensure_brand_access, require_auth, require_role

landing_pages_bp = Blueprint("landing_pages", __name__, url_prefix="/api")


def _page_for_caller(page_id: int):
    page = landing_page_service.get_landing_page(page_id)
    ensure_brand_access(page.brand_id)
    return page


@landing_pages_bp.get("/brands/<int:brand_id>/landing-pages")
@require_auth
@require_role(ROLE_BRAND)
def list_landing_pages_route(brand_id: int):
    ensure_brand_access(brand_id)
    brand_service.get_brand(brand_id)
    pages = landing_page_service.list_landing_pages(brand_id, status=request.args.get("status"))
    return jsonify({"landing_pages": [p.to_dict() for p in pages], "count": len(pages)})


@landing_pages_bp.post("/brands/<int:brand_id>/landing-pages")
@require_auth
@require_role(ROLE_BRAND)
def create_landing_page_route(brand_id: int):
    """
    Request body:
    - name: str (required)
    - slug: str (required, lowercase letters/digits/hyphens, unique system-wide)
    - status: draft | published | archived (default draft)
    - settings: object (optional)
    """
    ensure_brand_access(brand_id)
    data = request.get_json(silent=True) or {}
    page = landing_page_service.create_landing_page(
        brand_id,
        data.get("name"),
        data.get("slug"),
        status=data.get("status") or "draft",
        settings=data.get("settings"),
    )
    return jsonify({"landing_page": page.to_dict()}), 201


@landing_pages_bp.get("/landing-pages/<int:page_id>")
@require_auth
@require_role(ROLE_BRAND)
def get_landing_page_route(page_id: int):
    page = _page_for_caller(page_id)
    return jsonify({"landing_page": page.to_dict(include_blocks=True)})


@landing_pages_bp.patch("/landing-pages/<int:page_id>")
@require_auth
@require_role(ROLE_BRAND)
def update_landing_page_route(page_id: int):
    _page_for_caller(page_id)
    data = request.get_json(silent=True) or {}
    page = landing_page_service.update_landing_page(page_id, data)
    return jsonify({"landing_page": page.to_dict()})


@landing_pages_bp.put("/landing-pages/<int:page_id>/status")
@require_auth
@require_role(ROLE_BRAND)
def set_status_route(page_id: int):
    _page_for_caller(page_id)
    data = request.get_json(silent=True) or {}
    page = landing_page_service.set_status(page_id, data.get("status"))
    return jsonify({"landing_page": page.to_dict()})


@landing_pages_bp.delete("/landing-pages/<int:page_id>")
@require_auth
@require_role(ROLE_BRAND)
def delete_landing_page_route(page_id: int):
    _page_for_caller(page_id)
    landing_page_service.delete_landing_page(page_id)
    return jsonify({"message": "Landing page deleted"})


# =============================================================================
# BLOCKS
# =============================================================================

@landing_pages_bp.get("/landing-pages/<int:page_id>/blocks")
@require_auth
@require_role(ROLE_BRAND)
def list_blocks_route(page_id: int):
    _page_for_caller(page_id)
    blocks = block_service.list_blocks(page_id)
    return jsonify({"blocks": [b.to_dict() for b in blocks], "count": len(blocks)})


@landing_pages_bp.post("/landing-pages/<int:page_id>/blocks")
@require_auth
@require_role(ROLE_BRAND)
def insert_block_route(page_id: int):
    """
    Request body:
    - type: str (required)
    - content: object (optional)
    - order: int (optional, default append)
    """
    _page_for_caller(page_id)
    data = request.get_json(silent=True) or {}
    block = block_service.insert_block(
        page_id,
        data.get("type"),
        content=data.get("content"),
        order=data.get("order"),
    )
    return jsonify({"block": block.to_dict()}), 201


@landing_pages_bp.put("/landing-pages/<int:page_id>/blocks/order")
@require_auth
@require_role(ROLE_BRAND)
def reorder_blocks_route(page_id: int):
    """Request body: {"block_ids": [...]} naming every block of the page once."""
    _page_for_caller(page_id)
    data = request.get_json(silent=True) or {}
    blocks = block_service.reorder_blocks(page_id, data.get("block_ids"))
    return jsonify({"blocks": [b.to_dict() for b in blocks], "count": len(blocks)})


@landing_pages_bp.patch("/blocks/<int:block_id>")
@require_auth
@require_role(ROLE_BRAND)
def update_block_route(block_id: int):
    block = block_service.get_block(block_id)
    _page_for_caller(block.landing_page_id)
    data = request.get_json(silent=True) or {}

    block = block_service.update_block(
        block_id,
        block_type=data.get("type"),
        content=data.get("content"),
        order=data.get("order"),
    )
    return jsonify({"block": block.to_dict()})


@landing_pages_bp.delete("/blocks/<int:block_id>")
@require_auth
@require_role(ROLE_BRAND)
def delete_block_route(block_id: int):
    block = block_service.get_block(block_id)
    _page_for_caller(block.landing_page_id)
    block_service.delete_block(block_id)
    return jsonify({"message": "Block deleted"})
