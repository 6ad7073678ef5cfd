# backend/brandhub/services/landing_page_service.py
"""
Landing Page Service

A landing page belongs to one brand and is addressed publicly by its slug.

WHY: Slugs are URL paths shared by every brand, so uniqueness is global.
The service checks up front to give a clean SlugConflict, and the unique
constraint catches the race where two writers claim the same slug at once
(store_transaction maps that violation to SlugConflict as well). In both
cases the page that already holds the slug is left untouched.
"""
from __future__ import annotations

import logging

from ..attachments import parse_attachment
from ..errors import NotFoundError, ReferentialError, SlugConflict, ValidationError
from ..extensions import db
from ..models import Brand, LandingPage
from ..models.pages import PAGE_STATUS_DRAFT, PAGE_STATUS_PUBLISHED, PAGE_STATUSES
from ..validation import require_text, validate_slug
from .concurrency import store_transaction

logger = logging.getLogger(__name__)

PAGE_UPDATE_FIELDS = {"name", "slug", "settings", "status"}


def _validate_status(status) -> str:
    if not isinstance(status, str) or status not in PAGE_STATUSES:
        raise ValidationError(f"status must be one of: {', '.join(PAGE_STATUSES)}")
    return status


def _validate_name(name) -> str:
    name = require_text(name, "name")
    if len(name) > 255:
        raise ValidationError("name exceeds max length 255")
    return name


def _ensure_slug_free(slug: str, exclude_page_id: int | None = None) -> None:
    query = db.session.query(LandingPage.id).filter(LandingPage.slug == slug)
    if exclude_page_id is not None:
        query = query.filter(LandingPage.id != exclude_page_id)
    if query.first() is not None:
        raise SlugConflict(f"Slug '{slug}' is already in use")


def create_landing_page(
    brand_id: int,
    name,
    slug,
    status: str = PAGE_STATUS_DRAFT,
    settings=None,
) -> LandingPage:
    name = _validate_name(name)
    slug = validate_slug(slug)
    status = _validate_status(status)
    settings = parse_attachment("settings", settings, "page_settings")

    if db.session.get(Brand, brand_id) is None:
        raise ReferentialError("Brand does not exist")
    _ensure_slug_free(slug)

    page = LandingPage(brand_id=brand_id, name=name, slug=slug, status=status, settings=settings)
    with store_transaction() as session:
        session.add(page)

    logger.info("Created landing page id=%s slug=%s for brand id=%s", page.id, slug, brand_id)
    return page


def get_landing_page(page_id: int) -> LandingPage:
    page = db.session.get(LandingPage, page_id)
    if page is None:
        raise NotFoundError("Landing page not found")
    return page


def get_by_slug(slug: str) -> LandingPage:
    page = db.session.query(LandingPage).filter(LandingPage.slug == slug).first()
    if page is None:
        raise NotFoundError("Landing page not found")
    return page


def get_published_by_slug(slug: str) -> LandingPage:
    """Public read: drafts and archived pages are reported as missing."""
    page = get_by_slug(slug)
    if page.status != PAGE_STATUS_PUBLISHED:
        raise NotFoundError("Landing page not found")
    return page


def list_landing_pages(brand_id: int, status: str | None = None) -> list[LandingPage]:
    query = db.session.query(LandingPage).filter(LandingPage.brand_id == brand_id)
    if status is not None:
        query = query.filter(LandingPage.status == _validate_status(status))
    return query.order_by(LandingPage.created_at.desc(), LandingPage.id.desc()).all()


def update_landing_page(page_id: int, patch: dict) -> LandingPage:
    """Partial update of name, slug, settings or status."""
    if not isinstance(patch, dict):
        raise ValidationError("Invalid JSON payload")
    for k in patch:
        if k not in PAGE_UPDATE_FIELDS:
            raise ValidationError(f"Field not allowed: {k}")

    page = get_landing_page(page_id)
    changes: dict = {}
    if "name" in patch:
        changes["name"] = _validate_name(patch["name"])
    if "slug" in patch:
        slug = validate_slug(patch["slug"])
        if slug != page.slug:
            _ensure_slug_free(slug, exclude_page_id=page.id)
        changes["slug"] = slug
    if "settings" in patch:
        changes["settings"] = parse_attachment("settings", patch["settings"], "page_settings")
    if "status" in patch:
        changes["status"] = _validate_status(patch["status"])

    with store_transaction():
        for k, v in changes.items():
            setattr(page, k, v)
    return page


def set_status(page_id: int, status: str) -> LandingPage:
    """Any transition among draft, published and archived is allowed."""
    status = _validate_status(status)
    page = get_landing_page(page_id)
    with store_transaction():
        page.status = status
    logger.info("Landing page id=%s is now %s", page.id, status)
    return page


def delete_landing_page(page_id: int) -> None:
    """Delete a page together with its blocks and QR codes."""
    page = get_landing_page(page_id)
    with store_transaction() as session:
        session.delete(page)
    logger.info("Deleted landing page id=%s", page_id)
