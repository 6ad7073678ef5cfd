# Overview: Flask API routes for QR codes and scan analytics; parses input and returns JSON responses.

from flask import Blueprint, request, jsonify

from ..models.users import ROLE_BRAND
from ..services import brand_service, landing_page_service, qr_service
from ..decorators import ensure_brand_access, require_auth, require_role

qr_codes_bp = Blueprint("qr_codes", __name__, url_prefix="/api")


def _qr_for_caller(qr_code_id: int):
    qr = qr_service.get_qr_code(qr_code_id)
    ensure_brand_access(qr.brand_id)
    return qr


@qr_codes_bp.get("/brands/<int:brand_id>/qr-codes")
@require_auth
@require_role(ROLE_BRAND)
def list_qr_codes_route(brand_id: int):
    ensure_brand_access(brand_id)
    brand_service.get_brand(brand_id)
    codes = qr_service.list_qr_codes(
        brand_id=brand_id,
        landing_page_id=request.args.get("landing_page_id", type=int),
    )
    return jsonify({"qr_codes": [q.to_dict() for q in codes], "count": len(codes)})


@qr_codes_bp.post("/landing-pages/<int:page_id>/qr-codes")
@require_auth
@require_role(ROLE_BRAND)
def create_qr_code_route(page_id: int):
    """
    Request body:
    - name: str (required)
    - data: str (optional, defaults to the page's public URL)
    - settings: object (optional) - colors, size, margin, error correction, logo
    """
    page = landing_page_service.get_landing_page(page_id)
    ensure_brand_access(page.brand_id)
    data = request.get_json(silent=True) or {}
    qr = qr_service.create_qr_code(
        page_id,
        data.get("name"),
        data=data.get("data"),
        settings=data.get("settings"),
        brand_id=data.get("brand_id"),
    )
    return jsonify({"qr_code": qr.to_dict()}), 201


@qr_codes_bp.get("/qr-codes/<int:qr_code_id>")
@require_auth
@require_role(ROLE_BRAND)
def get_qr_code_route(qr_code_id: int):
    qr = _qr_for_caller(qr_code_id)
    return jsonify({"qr_code": qr.to_dict()})


@qr_codes_bp.patch("/qr-codes/<int:qr_code_id>")
@require_auth
@require_role(ROLE_BRAND)
def update_qr_code_route(qr_code_id: int):
    _qr_for_caller(qr_code_id)
    data = request.get_json(silent=True) or {}
    qr = qr_service.update_qr_code(qr_code_id, data)
    return jsonify({"qr_code": qr.to_dict()})


@qr_codes_bp.delete("/qr-codes/<int:qr_code_id>")
@require_auth
@require_role(ROLE_BRAND)
def delete_qr_code_route(qr_code_id: int):
    _qr_for_caller(qr_code_id)
    qr_service.delete_qr_code(qr_code_id)
    return jsonify({"message": "QR code deleted"})


@qr_codes_bp.get("/qr-codes/<int:qr_code_id>/scans")
@require_auth
@require_role(ROLE_BRAND)
def list_scans_route(qr_code_id: int):
    """Query params: limit (default 100, max 1000)."""
    _qr_for_caller(qr_code_id)
    scans = qr_service.list_scans(qr_code_id, limit=request.args.get("limit", type=int))
    return jsonify({"scans": [s.to_dict() for s in scans], "count": len(scans)})


@qr_codes_bp.get("/qr-codes/<int:qr_code_id>/stats")
@require_auth
@require_role(ROLE_BRAND)
def scan_stats_route(qr_code_id: int):
    _qr_for_caller(qr_code_id)
    return jsonify(qr_service.scan_stats(qr_code_id))
