# Overview: Service-layer operations for session tokens; the identity provider for requests.

"""
Session Token Management Service

WHY: Every request must carry a verified identity; ownership checks trust
the user resolved here and nothing else.

SECURITY FEATURES:
- Cryptographically secure random tokens (32 bytes)
- Tokens hashed with SHA-256 before storage (fast, one-way)
- Absolute timeout (SESSION_ABSOLUTE_TIMEOUT_HOURS, 24 by default)
- Idle timeout (SESSION_IDLE_TIMEOUT_HOURS, 2 by default)
- Revocable on logout, password change or account deactivation
"""

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..errors import NotFoundError
from ..extensions import db
from ..models import SessionToken, User
from .concurrency import store_transaction
from brandhub.time_utils import as_naive_utc, utcnow


@dataclass
class SessionContext:
    """Verified identity returned by validate_session."""
    user: User
    session: SessionToken

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def role(self) -> str:
        return self.user.role


def _absolute_timeout() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", 24))


def _idle_timeout() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_IDLE_TIMEOUT_HOURS", 2))


def generate_token() -> str:
    """64-character hex string (32 bytes of entropy) sent to the client once."""
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """
    Hash token for database storage using SHA-256.

    Tokens are already high-entropy, so a fast hash is sufficient.
    """
    return hashlib.sha256(token.encode('utf-8')).hexdigest()


def create_session(
    user_id: int,
    user_agent: str | None = None,
    ip_address: str | None = None
) -> tuple[SessionToken, str]:
    """
    Create new session token for user.

    Returns (session_record, plaintext_token).
    Client receives plaintext_token, database stores only the hash.
    """
    user = db.session.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")

    plaintext_token = generate_token()
    now = utcnow()

    session = SessionToken(
        user_id=user_id,
        token_hash=hash_token(plaintext_token),
        created_at=now,
        last_used_at=now,
        expires_at=now + _absolute_timeout(),
        user_agent=(user_agent or "")[:512] or None,
        ip_address=ip_address,
        is_revoked=False,
    )

    with store_transaction() as tx:
        tx.add(session)

    return session, plaintext_token


def validate_session(token: str) -> SessionContext | None:
    """
    Validate session token and return SessionContext if valid.

    Returns None if:
    - Token is unknown, expired, idle too long or revoked
    - User account is inactive

    Refreshes last_used_at on success.
    """
    if not token:
        return None

    session = (
        db.session.query(SessionToken)
        .filter(SessionToken.token_hash == hash_token(token))
        .first()
    )
    if session is None or session.is_revoked:
        return None

    now = utcnow()
    if now >= as_naive_utc(session.expires_at):
        return None
    if now - as_naive_utc(session.last_used_at) > _idle_timeout():
        return None

    user = session.user
    if user is None or not user.is_active:
        return None

    with store_transaction():
        session.last_used_at = now

    return SessionContext(user=user, session=session)


def revoke_session(token: str) -> bool:
    """Revoke a single session (logout). Returns False when the token is unknown."""
    session = (
        db.session.query(SessionToken)
        .filter(SessionToken.token_hash == hash_token(token))
        .first()
    )
    if session is None:
        return False
    with store_transaction():
        session.is_revoked = True
        session.revoked_at = utcnow()
    return True


def revoke_all_sessions(user_id: int) -> int:
    """Revoke every active session of a user. Returns how many were revoked."""
    now = utcnow()
    with store_transaction():
        count = (
            db.session.query(SessionToken)
            .filter(SessionToken.user_id == user_id, SessionToken.is_revoked.is_(False))
            .update({"is_revoked": True, "revoked_at": now}, synchronize_session="fetch")
        )
    return count
