# Overview: Flask API routes for the media library; parses input and returns JSON responses.

# backend/brandhub/routes/files.py
"""
Media library routes.

The client uploads the binary to object storage first and then registers
the resulting URL here. All routes are scoped to a brand the caller can
access.
"""
from flask import Blueprint, request, jsonify, g

from ..models.users import ROLE_BRAND
from ..services import brand_service, file_service
from ..decorators import ensure_brand_access, require_auth, require_role

files_bp = Blueprint("files", __name__, url_prefix="/api")


@files_bp.get("/brands/<int:brand_id>/files")
@require_auth
@require_role(ROLE_BRAND)
def list_files_route(brand_id: int):
    """
    Query params:
    - type: image | pdf | video (optional)
    - folder: str (optional)
    """
    ensure_brand_access(brand_id)
    brand_service.get_brand(brand_id)
    files = file_service.list_files(
        brand_id,
        file_type=request.args.get("type"),
        folder=request.args.get("folder"),
    )
    return jsonify({"files": [f.to_dict() for f in files], "count": len(files)})


@files_bp.post("/brands/<int:brand_id>/files")
@require_auth
@require_role(ROLE_BRAND)
def register_file_route(brand_id: int):
    ensure_brand_access(brand_id)
    payload = request.get_json(silent=True) or {}
    record = file_service.register_file(g.current_user.id, brand_id, payload)
    return jsonify({"file": record.to_dict()}), 201


@files_bp.get("/files/<int:file_id>")
@require_auth
@require_role(ROLE_BRAND)
def get_file_route(file_id: int):
    record = file_service.get_file(file_id)
    ensure_brand_access(record.brand_id)
    return jsonify({"file": record.to_dict()})


@files_bp.patch("/files/<int:file_id>")
@require_auth
@require_role(ROLE_BRAND)
def update_file_route(file_id: int):
    record = file_service.get_file(file_id)
    ensure_brand_access(record.brand_id)
    payload = request.get_json(silent=True) or {}
    record = file_service.update_file(file_id, payload)
    return jsonify({"file": record.to_dict()})


@files_bp.post("/files/<int:file_id>/use")
@require_auth
@require_role(ROLE_BRAND)
def use_file_route(file_id: int):
    record = file_service.get_file(file_id)
    ensure_brand_access(record.brand_id)
    record = file_service.record_file_use(file_id)
    return jsonify({"file": record.to_dict()})


@files_bp.delete("/files/<int:file_id>")
@require_auth
@require_role(ROLE_BRAND)
def delete_file_route(file_id: int):
    record = file_service.get_file(file_id)
    ensure_brand_access(record.brand_id)
    file_service.delete_file(file_id)
    return jsonify({"message": "File deleted"})
