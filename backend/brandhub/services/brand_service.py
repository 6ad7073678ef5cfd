# backend/brandhub/services/brand_service.py
"""
Brand Service

A brand is the central aggregate owned by one brand-role user. Everything a
brand owner manages (products, files, reviews, landing pages, QR codes) is
scoped by brand_id and removed together with the brand.

- create_brand requires name, logo, description and email
- update_brand has partial semantics: unspecified fields keep their value
- active/verified flags are admin-only
- JSON attachments are shape-checked on write (see attachments.py) and
  returned verbatim on read
"""
from __future__ import annotations

import logging
import re

from ..attachments import parse_attachments
from ..errors import (
    BrandAlreadyExists,
    NotFoundError,
    PermissionDeniedError,
    ReferentialError,
    ValidationError,
)
from ..extensions import db
from ..models import Brand, User
from ..models.brands import BRAND_JSON_FIELDS
from ..models.users import ROLE_BRAND
from ..validation import ModelValidationPolicy, enforce_rules_brand, validate_payload
from .concurrency import store_transaction

logger = logging.getLogger(__name__)

BRAND_PROFILE_FIELDS = {
    "name", "logo", "description", "email",
    "tagline", "brand_video", "mission", "vision", "founding_year", "phone",
    "website", "gst_number", "hq_location", "support_email", "support_phone",
    "whatsapp_support", "industry_category", "employee_range",
}

BRAND_POLICY = ModelValidationPolicy(
    writable_fields=BRAND_PROFILE_FIELDS | set(BRAND_JSON_FIELDS),
    required_on_create={"name", "logo", "description", "email"},
)

# Never accepted from a profile payload
BRAND_IMMUTABLE_FIELDS = {"id", "user_id", "created_at", "updated_at"}
BRAND_ADMIN_FIELDS = {"is_active", "is_verified"}


def brand_slug(name: str) -> str:
    """URL-safe slug for a brand name: 'Acme & Co.' -> 'acme-co'."""
    return re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")


def clean_brand_payload(payload: dict, partial: bool = False) -> dict:
    """Validate and normalize a brand profile payload (create rules unless partial)."""
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    for k in payload:
        if k in BRAND_IMMUTABLE_FIELDS:
            raise ValidationError(f"Field is immutable: {k}")
        if k in BRAND_ADMIN_FIELDS:
            raise ValidationError(f"Field can only be changed by an admin: {k}")
    patch = validate_payload(model=Brand, payload=payload, policy=BRAND_POLICY, partial=partial)
    enforce_rules_brand(patch)
    parse_attachments(patch)
    return patch


def create_brand(user_id: int, patch: dict) -> Brand:
    """
    Create the brand owned by ``user_id``.

    Raises:
        ValidationError: missing/blank required field, owner is not a brand user
        ReferentialError: owner does not exist
        BrandAlreadyExists: owner already has a brand
    """
    clean = clean_brand_payload(patch, partial=False)

    owner = db.session.get(User, user_id)
    if owner is None:
        raise ReferentialError("Owning user does not exist")
    if owner.role != ROLE_BRAND:
        raise ValidationError("Brand owner must have the 'brand' role")
    if db.session.query(Brand.id).filter(Brand.user_id == user_id).first():
        raise BrandAlreadyExists("User already owns a brand")

    brand = Brand(user_id=user_id, **clean)
    with store_transaction() as session:
        session.add(brand)

    logger.info("Created brand id=%s for user id=%s", brand.id, user_id)
    return brand


def get_brand(brand_id: int) -> Brand:
    brand = db.session.get(Brand, brand_id)
    if brand is None:
        raise NotFoundError("Brand not found")
    return brand


def get_brand_for_user(user_id: int) -> Brand:
    brand = db.session.query(Brand).filter(Brand.user_id == user_id).first()
    if brand is None:
        raise NotFoundError("Brand not found")
    return brand


def list_brands(
    active_only: bool = False,
    verified_only: bool = False,
    search: str | None = None,
    page: int | None = None,
    per_page: int | None = None,
) -> dict:
    """
    Brand listing with optional filters and pagination.

    Returns a dict with 'items', 'count' and, when page is given, 'pagination'.
    """
    base_query = db.session.query(Brand)
    if active_only:
        base_query = base_query.filter(Brand.is_active.is_(True))
    if verified_only:
        base_query = base_query.filter(Brand.is_verified.is_(True))
    if search:
        base_query = base_query.filter(Brand.name.ilike(f"%{search.strip()}%"))
    base_query = base_query.order_by(Brand.name.asc(), Brand.id.asc())

    if page is None:
        brands = base_query.all()
        return {"items": [b.to_dict() for b in brands], "count": len(brands)}

    per_page = max(1, min(per_page or 20, 100))
    page = max(page, 1)

    total = base_query.count()
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1
    brands = base_query.offset((page - 1) * per_page).limit(per_page).all()

    return {
        "items": [b.to_dict() for b in brands],
        "count": len(brands),
        "pagination": {
            "page": page,
            "per_page": per_page,
            "total": total,
            "total_pages": total_pages,
            "has_next": page < total_pages,
            "has_prev": page > 1,
        },
    }


def update_brand(brand_id: int, patch: dict) -> Brand:
    """Partial update; required fields may be changed but not blanked."""
    brand = get_brand(brand_id)
    clean = clean_brand_payload(patch, partial=True)
    with store_transaction():
        for k, v in clean.items():
            setattr(brand, k, v)
    return brand


def save_brand_profile(user_id: int, patch: dict) -> tuple[Brand, bool]:
    """
    Create-or-update keyed by owner, as the profile form does.

    Returns (brand, created).
    """
    existing = db.session.query(Brand).filter(Brand.user_id == user_id).first()
    if existing is None:
        return create_brand(user_id, patch), True
    return update_brand(existing.id, patch), False


def set_brand_flags(
    brand_id: int,
    actor: User,
    is_active: bool | None = None,
    is_verified: bool | None = None,
) -> Brand:
    """Toggle moderation flags. Only admins may call this."""
    if actor is None or not actor.is_admin:
        raise PermissionDeniedError("Only admins can change brand status flags")
    for name, value in (("is_active", is_active), ("is_verified", is_verified)):
        if value is not None and not isinstance(value, bool):
            raise ValidationError(f"{name} must be true or false")

    brand = get_brand(brand_id)
    with store_transaction():
        if is_active is not None:
            brand.is_active = is_active
        if is_verified is not None:
            brand.is_verified = is_verified

    logger.info(
        "Brand id=%s flags set by admin id=%s: active=%s verified=%s",
        brand.id, actor.id, brand.is_active, brand.is_verified,
    )
    return brand


def delete_brand(brand_id: int) -> None:
    """Delete a brand with its products, files, reviews, landing pages and QR codes."""
    brand = get_brand(brand_id)
    with store_transaction() as session:
        session.delete(brand)
    logger.info("Deleted brand id=%s", brand_id)
