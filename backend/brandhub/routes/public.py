# backend/brandhub/routes/public.py
"""
Unauthenticated endpoints: health check, published landing pages and the
QR scan redirect.
"""

import time
from flask import Blueprint, current_app, jsonify, redirect, request
from sqlalchemy import text

from ..extensions import db
from ..services import landing_page_service, qr_service, session_service
from ..decorators import bearer_token
from brandhub.time_utils import to_utc_z, utcnow

public_bp = Blueprint("public", __name__)


def check_database_health() -> dict:
    """Round-trip a trivial query and report its latency."""
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        elapsed_ms = (time.time() - start_time) * 1000
        return {"status": "healthy", "latency_ms": round(elapsed_ms, 2)}
    except Exception:
        elapsed_ms = (time.time() - start_time) * 1000
        current_app.logger.exception("Database health check failed")
        return {
            "status": "unhealthy",
            "latency_ms": round(elapsed_ms, 2),
            "error": "Database error",
        }


@public_bp.get("/api/health")
def health():
    database = check_database_health()
    status_code = 200 if database["status"] == "healthy" else 503
    return jsonify({
        "status": database["status"],
        "timestamp": to_utc_z(utcnow()),
        "checks": {"database": database},
    }), status_code


@public_bp.get("/p/<slug>")
def published_page(slug: str):
    """A published landing page with its blocks in render order."""
    page = landing_page_service.get_published_by_slug(slug)
    return jsonify({"landing_page": page.to_dict(include_blocks=True)})


@public_bp.get("/q/<int:qr_code_id>")
def scan_redirect(qr_code_id: int):
    """
    Record a scan, then send the visitor on to the QR code's target.

    A logged-in visitor is linked to the scan; anonymous scans are kept too.
    Targets that are not http(s) URLs are returned as JSON instead of
    redirected.
    """
    token = bearer_token()
    context = session_service.validate_session(token) if token else None

    qr_service.record_scan(
        qr_code_id,
        user_id=context.user_id if context else None,
        ip_address=request.remote_addr,
        user_agent=request.headers.get("User-Agent"),
        location=qr_service.derive_location(request.headers),
    )

    target = qr_service.get_qr_code(qr_code_id).data
    if target.startswith(("http://", "https://")):
        return redirect(target, code=302)
    return jsonify({"data": target})
