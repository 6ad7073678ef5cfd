# Overview: Request, role and ownership guards for API routes.

from functools import wraps
from flask import request, jsonify, g

from .errors import PermissionDeniedError
from .extensions import db
from .models import Brand
from .models.users import ROLE_ADMIN
from .services import session_service


def _is_authenticated() -> bool:
    return hasattr(g, 'current_user') and hasattr(g, 'session_context')


def _is_admin() -> bool:
    return _is_authenticated() and g.current_user.role == ROLE_ADMIN


def bearer_token() -> str | None:
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    return auth_header.split(" ", 1)[1].strip() or None


def require_auth(f):
    """
    Require a valid bearer session.

    Sets the following Flask g attributes:
    - g.current_user: The authenticated User object
    - g.session_context: The full SessionContext object

    SECURITY: Returns 401 if:
    - No Authorization header
    - Invalid, expired, idle or revoked token
    - User account deactivated
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        token = bearer_token()
        if token is None:
            return jsonify({"error": "Authentication required"}), 401

        context = session_service.validate_session(token)
        if not context:
            return jsonify({"error": "Invalid or expired token"}), 401

        g.current_user = context.user
        g.session_context = context

        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles: str):
    """
    Require the caller's role to be one of ``roles``.

    Admins pass every role check.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not _is_authenticated():
                return jsonify({"error": "Authentication required"}), 401

            if _is_admin() or g.current_user.role in roles:
                return f(*args, **kwargs)

            return jsonify({
                "error": "Permission denied",
                "required_roles": list(roles),
            }), 403

        return decorated_function
    return decorator


def require_admin(f):
    """Require the authenticated user to be an admin."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not _is_authenticated():
            return jsonify({"error": "Authentication required"}), 401
        if not _is_admin():
            return jsonify({"error": "Admin access required"}), 403
        return f(*args, **kwargs)
    return decorated_function


def ensure_brand_access(brand_id: int) -> None:
    """
    Raise PermissionDeniedError unless the caller may act on ``brand_id``.

    A brand user acts only inside their own brand's sub-tree; admins act
    anywhere. Unknown brands are left to the service to report as 404.
    """
    if _is_admin():
        return
    owner_id = db.session.query(Brand.user_id).filter(Brand.id == brand_id).scalar()
    if owner_id is None:
        return
    if owner_id != g.current_user.id:
        raise PermissionDeniedError("You do not have access to this brand")
