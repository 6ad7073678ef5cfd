# Overview: Unit-of-work helpers; one commit point and store-error classification.

from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import (
    BrandAlreadyExists,
    BrandHubError,
    DuplicateEmail,
    ProfileAlreadyExists,
    ReferentialError,
    SlugConflict,
    StoreError,
    ValidationError,
)
from ..extensions import db

logger = logging.getLogger(__name__)


# (constraint name, SQLite "table.column" spelling) -> error
_UNIQUE_VIOLATIONS = (
    (("uq_users_email", "users.email"), DuplicateEmail, "Email is already registered"),
    (("uq_landing_pages_slug", "landing_pages.slug"), SlugConflict, "Slug is already in use"),
    (("uq_brands_user_id", "brands.user_id"), BrandAlreadyExists, "User already owns a brand"),
    (
        ("uq_customer_profiles_user_id", "customer_profiles.user_id"),
        ProfileAlreadyExists,
        "Customer profile already exists for this user",
    ),
    (
        ("uq_admin_profiles_user_id", "admin_profiles.user_id"),
        ProfileAlreadyExists,
        "Admin profile already exists for this user",
    ),
)


def classify_integrity_error(exc: IntegrityError) -> BrandHubError:
    """Map a constraint violation reported by the store to the error taxonomy."""
    message = str(exc.orig) if exc.orig is not None else str(exc)
    lowered = message.lower()

    for markers, error_cls, text in _UNIQUE_VIOLATIONS:
        if any(marker in message for marker in markers):
            return error_cls(text)
    if "foreign key" in lowered:
        return ReferentialError("Referenced owner does not exist")
    if "not null" in lowered or "check constraint" in lowered:
        return ValidationError(f"Rejected by store constraint: {message}")
    return StoreError(f"Store rejected the operation: {message}")


@contextmanager
def store_transaction():
    """
    Run the enclosed block as one all-or-nothing unit of work.

    Commits on success. On any failure the session is rolled back and
    store-level exceptions are re-raised as BrandHubError subclasses.
    No retry is attempted; StoreError.retryable tells callers they may.
    """
    try:
        yield db.session
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise classify_integrity_error(exc) from exc
    except (OperationalError, StaleDataError) as exc:
        db.session.rollback()
        logger.warning("Store operation failed: %s", exc)
        raise StoreError("Store is temporarily unavailable") from exc
    except DBAPIError as exc:
        db.session.rollback()
        logger.warning("Store rejected operation: %s", exc)
        raise StoreError("Store rejected the operation") from exc
    except Exception:
        db.session.rollback()
        raise
