# backend/brandhub/services/qr_service.py
"""
QR Code Service

QR codes point at a landing page and count their scans.

WHY: qr_codes.scan_count is a denormalized copy of the number of scan_logs
rows. record_scan keeps the two in step by doing both writes in one
transaction, and the counter is incremented by the store itself
(scan_count = scan_count + 1), never read into Python and written back, so
concurrent scans of the same code cannot lose an increment.

The UPDATE runs before the INSERT: on SQLite the first write of a
transaction takes the write lock, so no transaction ever holds a read lock
while waiting to upgrade it.
"""
from __future__ import annotations

import logging
from collections import Counter

from flask import current_app

from ..attachments import parse_attachment
from ..errors import NotFoundError, ReferentialError, ValidationError
from ..extensions import db
from ..models import LandingPage, QRCode, ScanLog, User
from ..validation import require_text
from .concurrency import store_transaction
from brandhub.time_utils import day_key, utcnow

logger = logging.getLogger(__name__)

QR_UPDATE_FIELDS = {"name", "data", "settings"}

DEFAULT_SCAN_LIMIT = 100
MAX_SCAN_LIMIT = 1000

# header name -> location key; first header present wins
_GEO_HEADERS = (
    ("CF-IPCountry", "country"),
    ("X-Geo-Country", "country"),
    ("X-Geo-Region", "region"),
    ("X-Geo-City", "city"),
)
# Cloudflare reports unknown / Tor exits with these pseudo codes
_UNKNOWN_COUNTRIES = {"XX", "T1"}


def page_url(page: LandingPage) -> str:
    return f"{current_app.config['PUBLIC_BASE_URL']}/p/{page.slug}"


def _validate_name(name) -> str:
    name = require_text(name, "name")
    if len(name) > 255:
        raise ValidationError("name exceeds max length 255")
    return name


def create_qr_code(landing_page_id: int, name, data=None, settings=None, brand_id=None) -> QRCode:
    """
    Create a QR code for a landing page.

    The owning brand is taken from the page. A ``brand_id`` argument is only
    a cross-check and must match it.
    """
    name = _validate_name(name)
    settings = parse_attachment("settings", settings, "qr_settings")

    page = db.session.get(LandingPage, landing_page_id)
    if page is None:
        raise ReferentialError("Landing page does not exist")
    if brand_id is not None and brand_id != page.brand_id:
        raise ValidationError("brand_id does not match the landing page's brand")

    data = require_text(data, "data") if data is not None else page_url(page)

    qr = QRCode(
        landing_page_id=page.id,
        brand_id=page.brand_id,
        name=name,
        data=data,
        settings=settings,
        scan_count=0,
    )
    with store_transaction() as session:
        session.add(qr)

    logger.info("Created QR code id=%s for landing page id=%s", qr.id, page.id)
    return qr


def get_qr_code(qr_code_id: int) -> QRCode:
    qr = db.session.get(QRCode, qr_code_id)
    if qr is None:
        raise NotFoundError("QR code not found")
    return qr


def list_qr_codes(brand_id: int | None = None, landing_page_id: int | None = None) -> list[QRCode]:
    query = db.session.query(QRCode)
    if brand_id is not None:
        query = query.filter(QRCode.brand_id == brand_id)
    if landing_page_id is not None:
        query = query.filter(QRCode.landing_page_id == landing_page_id)
    return query.order_by(QRCode.created_at.desc(), QRCode.id.desc()).all()


def update_qr_code(qr_code_id: int, patch: dict) -> QRCode:
    if not isinstance(patch, dict):
        raise ValidationError("Invalid JSON payload")
    for k in patch:
        if k not in QR_UPDATE_FIELDS:
            raise ValidationError(f"Field not allowed: {k}")

    qr = get_qr_code(qr_code_id)
    changes: dict = {}
    if "name" in patch:
        changes["name"] = _validate_name(patch["name"])
    if "data" in patch:
        changes["data"] = require_text(patch["data"], "data")
    if "settings" in patch:
        changes["settings"] = parse_attachment("settings", patch["settings"], "qr_settings")

    with store_transaction():
        for k, v in changes.items():
            setattr(qr, k, v)
    return qr


def delete_qr_code(qr_code_id: int) -> None:
    """Delete a QR code and its whole scan history."""
    qr = get_qr_code(qr_code_id)
    with store_transaction() as session:
        session.delete(qr)
    logger.info("Deleted QR code id=%s", qr_code_id)


def derive_location(headers) -> dict | None:
    """
    Build the scan location from geo headers set by the edge proxy.

    Returns None when no usable header is present.
    """
    if not headers:
        return None
    lookup = {str(k).lower(): v for k, v in headers.items()}

    location: dict = {}
    for header, key in _GEO_HEADERS:
        if key in location:
            continue
        value = lookup.get(header.lower())
        if not isinstance(value, str) or not value.strip():
            continue
        value = value.strip()
        if key == "country":
            value = value.upper()
            if value in _UNKNOWN_COUNTRIES:
                continue
        location[key] = value

    return location or None


def record_scan(
    qr_code_id: int,
    user_id: int | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    location=None,
) -> ScanLog:
    """
    Log one scan and increment the code's counter as a single unit.

    Raises:
        NotFoundError: the QR code does not exist
        ReferentialError: user_id names a user that does not exist
    """
    location = parse_attachment("location", location)
    if user_id is not None and db.session.get(User, user_id) is None:
        raise ReferentialError("Scanning user does not exist")
    if user_agent is not None:
        user_agent = str(user_agent)[:512]
    if ip_address is not None:
        ip_address = str(ip_address)[:64]

    log = ScanLog(
        qr_code_id=qr_code_id,
        user_id=user_id,
        scanned_at=utcnow(),
        ip_address=ip_address,
        user_agent=user_agent,
        location=location,
    )
    with store_transaction() as session:
        updated = (
            session.query(QRCode)
            .filter(QRCode.id == qr_code_id)
            .update({QRCode.scan_count: QRCode.scan_count + 1}, synchronize_session=False)
        )
        if updated == 0:
            raise NotFoundError("QR code not found")
        session.add(log)

    logger.debug("Recorded scan id=%s for QR code id=%s", log.id, qr_code_id)
    return log


def list_scans(qr_code_id: int, limit: int | None = None) -> list[ScanLog]:
    """Most recent scans first."""
    get_qr_code(qr_code_id)
    limit = DEFAULT_SCAN_LIMIT if limit is None else max(1, min(int(limit), MAX_SCAN_LIMIT))
    return (
        db.session.query(ScanLog)
        .filter(ScanLog.qr_code_id == qr_code_id)
        .order_by(ScanLog.scanned_at.desc(), ScanLog.id.desc())
        .limit(limit)
        .all()
    )


def scan_stats(qr_code_id: int) -> dict:
    qr = get_qr_code(qr_code_id)
    rows = (
        db.session.query(ScanLog.scanned_at, ScanLog.ip_address)
        .filter(ScanLog.qr_code_id == qr_code_id)
        .all()
    )

    per_day = Counter(day_key(scanned_at) for scanned_at, _ in rows)
    unique_ips = {ip for _, ip in rows if ip}

    return {
        "qr_code_id": qr.id,
        "scan_count": qr.scan_count,
        "total_scans": len(rows),
        "unique_ips": len(unique_ips),
        "per_day": [{"date": day, "count": per_day[day]} for day in sorted(per_day)],
    }
