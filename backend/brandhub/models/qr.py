from __future__ import annotations

from ..extensions import db
from brandhub.time_utils import to_utc_z


class QRCode(db.Model):
    """
    QR code pointing at a landing page.

    brand_id repeats the page's owning brand so brand-wide listings need no
    join. scan_count is denormalized: it always equals the number of
    scan_logs rows for this code and is only changed by qr_service.record_scan.
    """
    __tablename__ = "qr_codes"
    __table_args__ = (
        db.CheckConstraint("scan_count >= 0", name="ck_qr_codes_scan_count_nonneg"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    landing_page_id = db.Column(
        db.Integer, db.ForeignKey("landing_pages.id", ondelete="CASCADE"), nullable=False, index=True
    )
    brand_id = db.Column(db.Integer, db.ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    data = db.Column(db.Text, nullable=False)
    # Colors, error correction level, logo overlay
    settings = db.Column(db.JSON, nullable=True)
    scan_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    landing_page = db.relationship("LandingPage", back_populates="qr_codes")
    brand = db.relationship("Brand", back_populates="qr_codes")
    scan_logs = db.relationship(
        "ScanLog", back_populates="qr_code", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<QRCode id={self.id} scans={self.scan_count}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "landing_page_id": self.landing_page_id,
            "brand_id": self.brand_id,
            "name": self.name,
            "data": self.data,
            "settings": self.settings,
            "scan_count": self.scan_count,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class ScanLog(db.Model):
    """Immutable record of one scan. The scanning user is optional."""
    __tablename__ = "scan_logs"
    __table_args__ = (
        db.Index("ix_scan_logs_qr_scanned", "qr_code_id", "scanned_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    qr_code_id = db.Column(db.Integer, db.ForeignKey("qr_codes.id", ondelete="CASCADE"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)

    scanned_at = db.Column(db.DateTime(timezone=True), nullable=False)
    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)
    location = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    qr_code = db.relationship("QRCode", back_populates="scan_logs")
    user = db.relationship("User", back_populates="scan_logs")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "qr_code_id": self.qr_code_id,
            "user_id": self.user_id,
            "scanned_at": to_utc_z(self.scanned_at),
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "location": self.location,
            "created_at": to_utc_z(self.created_at),
        }
