# Overview: Service-layer operations for users and credentials.

"""
Authentication Service

Every account is a User with one of three roles (admin, brand, customer).
Passwords are hashed with bcrypt before they reach the store; the plaintext
is never persisted.

SECURITY NOTES:
- bcrypt cost factor comes from BCRYPT_ROUNDS (12 by default)
- Minimum 8 characters with at least one letter and one digit
- Emails are normalized (trimmed, lowercased) and globally unique
- Inactive users never authenticate
"""

import logging
import re

import bcrypt
from flask import current_app

from ..errors import DuplicateEmail, NotFoundError, PasswordValidationError, ValidationError
from ..extensions import db
from ..models import Brand, CustomerProfile, User
from ..models.users import ROLES, ROLE_BRAND, ROLE_CUSTOMER
from ..validation import (
    ModelValidationPolicy,
    enforce_rules_user,
    validate_email,
    validate_payload,
)
from . import brand_service
from .concurrency import store_transaction
from brandhub.time_utils import utcnow

logger = logging.getLogger(__name__)

USER_PROFILE_POLICY = ModelValidationPolicy(
    writable_fields={"name", "age", "gender", "phone", "avatar_url"},
)


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Requirements:
    - Minimum 8 characters
    - At least one letter
    - At least one digit

    Raises PasswordValidationError if requirements not met.
    """
    if not isinstance(password, str) or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Za-z]', password):
        raise PasswordValidationError("Password must contain at least one letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """Hash password using bcrypt. Password is validated for strength before hashing."""
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    salt = bcrypt.gensalt(rounds=rounds)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns True if password matches hash, False otherwise. A malformed
    stored hash never matches.
    """
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def normalize_email(email) -> str:
    return validate_email(email)


def validate_role(role: str) -> str:
    if role not in ROLES:
        raise ValidationError(f"role must be one of: {', '.join(ROLES)}")
    return role


def _new_user(email: str, password: str, role: str, profile: dict) -> User:
    email = normalize_email(email)
    role = validate_role(role)
    patch = validate_payload(model=User, payload=profile, policy=USER_PROFILE_POLICY, partial=True)
    enforce_rules_user(patch)

    # Checked up front for a clean message; the unique constraint still guards races
    if db.session.query(User.id).filter(User.email == email).first():
        raise DuplicateEmail("Email is already registered")

    return User(email=email, password_hash=hash_password(password), role=role, **patch)


def create_user(email: str, password: str, role: str = ROLE_CUSTOMER, **profile) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises:
        ValidationError: bad email, unknown role or profile field
        PasswordValidationError: weak password
        DuplicateEmail: email already registered
    """
    user = _new_user(email, password, role, profile)
    with store_transaction() as session:
        session.add(user)

    logger.info("Created user id=%s role=%s", user.id, user.role)
    return user


def register_user(email: str, password: str, role: str = ROLE_CUSTOMER, brand=None, **profile) -> User:
    """
    Self-registration: the account and its role extension in one unit of work.

    Customers get an empty customer profile. Brand users may send their
    brand onboarding details as ``brand``; the brand is then created with the
    account under the same rules as brand_service.create_brand.
    """
    user = _new_user(email, password, role, profile)
    extras = []
    if role == ROLE_CUSTOMER:
        extras.append(CustomerProfile(user=user, saved_brand_ids=[]))
    if brand is not None:
        if role != ROLE_BRAND:
            raise ValidationError("Only brand accounts can register a brand")
        extras.append(Brand(owner=user, **brand_service.clean_brand_payload(brand)))

    with store_transaction() as session:
        session.add(user)
        session.add_all(extras)

    logger.info("Registered user id=%s role=%s with %s extension(s)", user.id, user.role, len(extras))
    return user


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


def get_user_by_email(email: str) -> User | None:
    try:
        email = normalize_email(email)
    except ValidationError:
        return None
    return db.session.query(User).filter(User.email == email).first()


def authenticate(email: str, password: str) -> User | None:
    """
    Authenticate user with email and password.

    Returns User if credentials valid, None otherwise.
    Updates last_login_at timestamp on successful authentication.
    """
    user = get_user_by_email(email)
    if user is None or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    with store_transaction():
        user.last_login_at = utcnow()
    return user


def get_role(user_id: int) -> str:
    return get_user(user_id).role


def set_role(user_id: int, role: str) -> User:
    user = get_user(user_id)
    role = validate_role(role)
    with store_transaction():
        user.role = role
    logger.info("User id=%s role set to %s", user.id, role)
    return user


def update_user(user_id: int, patch: dict) -> User:
    """Partial update of profile fields; unspecified fields keep their value."""
    user = get_user(user_id)
    clean = validate_payload(model=User, payload=patch, policy=USER_PROFILE_POLICY, partial=True)
    enforce_rules_user(clean)
    with store_transaction():
        for k, v in clean.items():
            setattr(user, k, v)
    return user


def change_password(user_id: int, current_password: str, new_password: str) -> None:
    user = get_user(user_id)
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    with store_transaction():
        user.password_hash = hash_password(new_password)


def set_active(user_id: int, is_active: bool) -> User:
    user = get_user(user_id)
    with store_transaction():
        user.is_active = bool(is_active)
    return user


def list_users(role: str | None = None) -> list[User]:
    query = db.session.query(User)
    if role is not None:
        query = query.filter(User.role == validate_role(role))
    return query.order_by(User.id.asc()).all()


def delete_user(user_id: int) -> None:
    """
    Delete a user and everything they own.

    Brands (and their sub-trees), files, reviews, profiles and sessions go
    with the user; scan logs stay with user_id cleared.
    """
    user = get_user(user_id)
    with store_transaction() as session:
        session.delete(user)
    logger.info("Deleted user id=%s", user_id)
