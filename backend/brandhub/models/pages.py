from __future__ import annotations

from ..extensions import db
from brandhub.time_utils import to_utc_z


PAGE_STATUS_DRAFT = "draft"
PAGE_STATUS_PUBLISHED = "published"
PAGE_STATUS_ARCHIVED = "archived"
PAGE_STATUSES = (PAGE_STATUS_DRAFT, PAGE_STATUS_PUBLISHED, PAGE_STATUS_ARCHIVED)


class LandingPage(db.Model):
    """
    Public page assembled from ordered content blocks.

    The slug is the public URL path and is unique across all brands.
    """
    __tablename__ = "landing_pages"
    __table_args__ = (
        db.UniqueConstraint("slug", name="uq_landing_pages_slug"),
        db.CheckConstraint(
            "status IN ('draft', 'published', 'archived')", name="ck_landing_pages_status"
        ),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    brand_id = db.Column(db.Integer, db.ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(16), nullable=False, default=PAGE_STATUS_DRAFT, server_default=PAGE_STATUS_DRAFT)
    # Styling and SEO
    settings = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    brand = db.relationship("Brand", back_populates="landing_pages")
    blocks = db.relationship(
        "Block",
        back_populates="landing_page",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="[Block.order, Block.id]",
    )
    qr_codes = db.relationship(
        "QRCode", back_populates="landing_page", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<LandingPage id={self.id} slug={self.slug!r} status={self.status}>"

    def to_dict(self, include_blocks: bool = False) -> dict:
        data = {
            "id": self.id,
            "brand_id": self.brand_id,
            "name": self.name,
            "slug": self.slug,
            "status": self.status,
            "settings": self.settings,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        if include_blocks:
            data["blocks"] = [b.to_dict() for b in self.blocks]
        return data


class Block(db.Model):
    """
    One content block of a landing page.

    `order` defines the render sequence. It carries no unique constraint so
    that renumbering can shift rows inside a transaction; block_service keeps
    it contiguous.
    """
    __tablename__ = "blocks"
    __table_args__ = (
        db.Index("ix_blocks_page_order", "landing_page_id", "order"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    landing_page_id = db.Column(
        db.Integer, db.ForeignKey("landing_pages.id", ondelete="CASCADE"), nullable=False, index=True
    )

    type = db.Column(db.String(64), nullable=False)
    order = db.Column(db.Integer, nullable=False, default=0)
    content = db.Column(db.JSON, nullable=False, default=dict)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    landing_page = db.relationship("LandingPage", back_populates="blocks")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "landing_page_id": self.landing_page_id,
            "type": self.type,
            "order": self.order,
            "content": self.content,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
