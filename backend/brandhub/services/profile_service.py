# Overview: Role-specific profile extensions (customer and admin).

"""
Each user has at most one customer profile and at most one admin profile.
Creation is idempotent per user in the sense that a second attempt is
rejected with ProfileAlreadyExists; the unique foreign key enforces the
same rule in the store.
"""
from __future__ import annotations

from ..attachments import parse_attachment
from ..errors import NotFoundError, ProfileAlreadyExists, ReferentialError, ValidationError
from ..extensions import db
from ..models import AdminProfile, Brand, CustomerProfile, User
from .concurrency import store_transaction


def _require_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def _clean_permissions(permissions) -> list[str]:
    if permissions is None:
        return []
    if not isinstance(permissions, (list, tuple, set)):
        raise ValidationError("permissions must be a list of strings")
    cleaned = set()
    for perm in permissions:
        if not isinstance(perm, str) or not perm.strip():
            raise ValidationError("permissions must be a list of non-empty strings")
        cleaned.add(perm.strip())
    return sorted(cleaned)


def _clean_brand_ids(brand_ids) -> list[int]:
    if brand_ids is None:
        return []
    if not isinstance(brand_ids, list):
        raise ValidationError("saved_brand_ids must be a list of brand ids")
    result: list[int] = []
    for brand_id in brand_ids:
        if isinstance(brand_id, bool) or not isinstance(brand_id, int):
            raise ValidationError("saved_brand_ids must be a list of brand ids")
        if db.session.get(Brand, brand_id) is None:
            raise ReferentialError(f"Brand {brand_id} does not exist")
        if brand_id not in result:
            result.append(brand_id)
    return result


def create_customer_profile(user_id: int, preferences=None, saved_brand_ids=None) -> CustomerProfile:
    user = _require_user(user_id)
    if user.customer_profile is not None:
        raise ProfileAlreadyExists("Customer profile already exists for this user")

    profile = CustomerProfile(
        user_id=user.id,
        preferences=parse_attachment("preferences", preferences),
        saved_brand_ids=_clean_brand_ids(saved_brand_ids),
    )
    with store_transaction() as session:
        session.add(profile)
    return profile


def create_admin_profile(
    user_id: int,
    permissions=None,
    department: str | None = None,
    is_superadmin: bool = False,
) -> AdminProfile:
    user = _require_user(user_id)
    if user.admin_profile is not None:
        raise ProfileAlreadyExists("Admin profile already exists for this user")

    profile = AdminProfile(
        user_id=user.id,
        permissions=_clean_permissions(permissions),
        department=department.strip() if isinstance(department, str) and department.strip() else None,
        is_superadmin=bool(is_superadmin),
    )
    with store_transaction() as session:
        session.add(profile)
    return profile


def get_customer_profile(user_id: int) -> CustomerProfile:
    user = _require_user(user_id)
    if user.customer_profile is None:
        raise NotFoundError("Customer profile not found")
    return user.customer_profile


def get_admin_profile(user_id: int) -> AdminProfile:
    user = _require_user(user_id)
    if user.admin_profile is None:
        raise NotFoundError("Admin profile not found")
    return user.admin_profile


def update_customer_preferences(user_id: int, preferences) -> CustomerProfile:
    profile = get_customer_profile(user_id)
    with store_transaction():
        profile.preferences = parse_attachment("preferences", preferences)
    return profile


def save_brand(user_id: int, brand_id: int) -> CustomerProfile:
    """Add a brand to the customer's saved list. Saving twice is a no-op."""
    profile = get_customer_profile(user_id)
    if db.session.get(Brand, brand_id) is None:
        raise ReferentialError("Brand does not exist")
    current = list(profile.saved_brand_ids or [])
    if brand_id not in current:
        with store_transaction():
            # JSON columns only notice reassignment, not in-place mutation
            profile.saved_brand_ids = current + [brand_id]
    return profile


def unsave_brand(user_id: int, brand_id: int) -> CustomerProfile:
    profile = get_customer_profile(user_id)
    current = list(profile.saved_brand_ids or [])
    if brand_id in current:
        with store_transaction():
            profile.saved_brand_ids = [b for b in current if b != brand_id]
    return profile


def list_saved_brands(user_id: int) -> list[Brand]:
    """Saved brands that still exist, in the order they were saved."""
    profile = get_customer_profile(user_id)
    ids = list(profile.saved_brand_ids or [])
    if not ids:
        return []
    brands = {b.id: b for b in db.session.query(Brand).filter(Brand.id.in_(ids)).all()}
    return [brands[i] for i in ids if i in brands]


def grant_admin_permission(user_id: int, permission: str) -> AdminProfile:
    profile = get_admin_profile(user_id)
    perms = _clean_permissions(list(profile.permissions or []) + [permission])
    with store_transaction():
        profile.permissions = perms
    return profile


def revoke_admin_permission(user_id: int, permission: str) -> AdminProfile:
    profile = get_admin_profile(user_id)
    perms = [p for p in (profile.permissions or []) if p != permission]
    with store_transaction():
        profile.permissions = perms
    return profile


def update_admin_profile(user_id: int, department=None, is_superadmin=None) -> AdminProfile:
    profile = get_admin_profile(user_id)
    if department is not None and not isinstance(department, str):
        raise ValidationError("department must be a string")
    with store_transaction():
        if department is not None:
            profile.department = department.strip() or None
        if is_superadmin is not None:
            profile.is_superadmin = bool(is_superadmin)
    return profile
