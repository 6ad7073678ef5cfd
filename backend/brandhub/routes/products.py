# Overview: Flask API routes for products operations; parses input and returns JSON responses.

# backend/brandhub/routes/products.py
"""
Product catalogue routes.

SECURITY:
- Reads are public (product detail pages)
- Writes require the brand role and access to the owning brand
"""
from flask import Blueprint, request, jsonify

from ..models.users import ROLE_BRAND
from ..services import brand_service, product_service
from ..decorators import ensure_brand_access, require_auth, require_role

products_bp = Blueprint("products", __name__, url_prefix="/api")


@products_bp.get("/brands/<int:brand_id>/products")
def list_products_route(brand_id: int):
    """
    List a brand's products.

    Query params:
    - category: str (optional) - exact category match
    """
    brand_service.get_brand(brand_id)
    products = product_service.list_products(brand_id, category=request.args.get("category"))
    return jsonify({"products": [p.to_dict() for p in products], "count": len(products)})


@products_bp.post("/brands/<int:brand_id>/products")
@require_auth
@require_role(ROLE_BRAND)
def create_product_route(brand_id: int):
    ensure_brand_access(brand_id)
    payload = request.get_json(silent=True) or {}
    product = product_service.create_product(brand_id, payload)
    return jsonify({"product": product.to_dict()}), 201


@products_bp.get("/products/<int:product_id>")
def get_product_route(product_id: int):
    product = product_service.get_product(product_id)
    return jsonify({"product": product.to_dict()})


@products_bp.patch("/products/<int:product_id>")
@require_auth
@require_role(ROLE_BRAND)
def update_product_route(product_id: int):
    product = product_service.get_product(product_id)
    ensure_brand_access(product.brand_id)
    payload = request.get_json(silent=True) or {}
    product = product_service.update_product(product_id, payload)
    return jsonify({"product": product.to_dict()})


@products_bp.delete("/products/<int:product_id>")
@require_auth
@require_role(ROLE_BRAND)
def delete_product_route(product_id: int):
    product = product_service.get_product(product_id)
    ensure_brand_access(product.brand_id)
    product_service.delete_product(product_id)
    return jsonify({"message": "Product deleted"})
