# backend/brandhub/services/product_service.py
"""Brand product catalogue: CRUD scoped to one brand."""
from __future__ import annotations

from ..attachments import parse_attachments
from ..errors import NotFoundError, ReferentialError
from ..extensions import db
from ..models import Brand, Product
from ..validation import ModelValidationPolicy, enforce_rules_product, validate_payload
from .concurrency import store_transaction

PRODUCT_POLICY = ModelValidationPolicy(
    writable_fields={
        "name", "description", "category", "subcategory", "price_cents", "image",
        "usage_video", "usage_instructions", "shelf_life", "materials", "recycling",
        "sustainability", "manufacturing_details",
        "ingredients", "certifications", "ecommerce_links", "faqs",
    },
    required_on_create={"name"},
)

# A product's certifications are plain labels, not brand certification records
PRODUCT_ATTACHMENT_SCHEMAS = {"certifications": "product_certifications"}


def _clean(payload: dict, partial: bool) -> dict:
    patch = validate_payload(model=Product, payload=payload, policy=PRODUCT_POLICY, partial=partial)
    enforce_rules_product(patch)
    parse_attachments(patch, PRODUCT_ATTACHMENT_SCHEMAS)
    return patch


def create_product(brand_id: int, patch: dict) -> Product:
    clean = _clean(patch, partial=False)
    if db.session.get(Brand, brand_id) is None:
        raise ReferentialError("Brand does not exist")

    product = Product(brand_id=brand_id, **clean)
    with store_transaction() as session:
        session.add(product)
    return product


def get_product(product_id: int) -> Product:
    product = db.session.get(Product, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def list_products(brand_id: int, category: str | None = None) -> list[Product]:
    query = db.session.query(Product).filter(Product.brand_id == brand_id)
    if category:
        query = query.filter(Product.category == category)
    return query.order_by(Product.name.asc(), Product.id.asc()).all()


def update_product(product_id: int, patch: dict) -> Product:
    product = get_product(product_id)
    clean = _clean(patch, partial=True)
    with store_transaction():
        for k, v in clean.items():
            setattr(product, k, v)
    return product


def delete_product(product_id: int) -> None:
    product = get_product(product_id)
    with store_transaction() as session:
        session.delete(product)
