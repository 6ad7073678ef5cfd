from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from sqlalchemy import JSON, BigInteger, Boolean, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError


# Prices above $9,999,999.99 are nonsensical for a product catalogue
MAX_PRICE_CENTS = 999_999_999

MIN_RATING = 1
MAX_RATING = 5

SLUG_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST (blank strings count as missing)
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {prop.key: prop.columns[0] for prop in mapper.column_attrs}


def _coerce_value(key: str, col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats and scientific notation
    if isinstance(coltype, (Integer, BigInteger)):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            stripped = value.strip()
            if not stripped:
                raise ValidationError(f"{key} must be an integer")
            if 'e' in stripped.lower():
                raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
            if '.' in stripped:
                raise ValidationError(f"{key} must be an integer (no decimals)")
            try:
                return int(stripped)
            except ValueError:
                raise ValidationError(f"{key} must be an integer")
        if isinstance(value, float):
            raise ValidationError(f"{key} must be an integer, not a decimal")
        raise ValidationError(f"{key} must be an integer")

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{key} must be true or false")

    # JSON attachments: shape is checked by attachments.parse_attachment
    if isinstance(coltype, JSON):
        if isinstance(value, (dict, list, str)):
            return value
        raise ValidationError(f"{key} must be an object or a list")

    if isinstance(coltype, (String, Text)):
        if isinstance(value, (dict, list)):
            raise ValidationError(f"{key} must be a string")
        return str(value).strip()

    return value


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(
            f for f in required
            if f not in payload or payload[f] is None
            or (isinstance(payload[f], str) and not payload[f].strip())
        )
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in payload.keys():
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(k, col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def require_text(value: Any, field: str) -> str:
    """Return the stripped string or raise when missing/blank."""
    if value is None or not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value.strip()


def validate_email(value: Any, field: str = "email") -> str:
    email = require_text(value, field).lower()
    if not EMAIL_RE.match(email):
        raise ValidationError(f"{field} must be a valid email address")
    return email


def validate_slug(value: Any) -> str:
    slug = require_text(value, "slug")
    if len(slug) > 255:
        raise ValidationError("slug exceeds max length 255")
    if not SLUG_RE.match(slug):
        raise ValidationError(
            "slug may only contain lowercase letters, digits and single hyphens"
        )
    return slug


def validate_rating(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError("rating must be an integer")
    if value < MIN_RATING or value > MAX_RATING:
        raise ValidationError(f"rating must be between {MIN_RATING} and {MAX_RATING}")
    return value


def enforce_rules_brand(patch: dict) -> None:
    """
    Business rules that are not captured by SQLAlchemy metadata alone.
    Keep these small and centralized.
    """
    for key in ("email", "support_email"):
        if patch.get(key):
            patch[key] = validate_email(patch[key], key)

    year = patch.get("founding_year")
    if year is not None and (year < 1800 or year > 2100):
        raise ValidationError("founding_year must be between 1800 and 2100")


def enforce_rules_product(patch: dict) -> None:
    if "price_cents" in patch and patch["price_cents"] is not None:
        price = patch["price_cents"]
        if price < 0:
            raise ValidationError("price_cents must be >= 0")
        if price > MAX_PRICE_CENTS:
            raise ValidationError(f"price_cents cannot exceed {MAX_PRICE_CENTS} (${MAX_PRICE_CENTS / 100:,.2f})")


def enforce_rules_user(patch: dict) -> None:
    age = patch.get("age")
    if age is not None and (age < 0 or age > 150):
        raise ValidationError("age must be between 0 and 150")
