from __future__ import annotations

from ..extensions import db
from brandhub.time_utils import to_utc_z


FILE_TYPES = ("image", "pdf", "video")


class File(db.Model):
    """
    Media library entry. The binary lives in object storage; only its
    public URL is kept here.
    """
    __tablename__ = "files"
    __table_args__ = (
        db.CheckConstraint("type IN ('image', 'pdf', 'video')", name="ck_files_type"),
        db.CheckConstraint("size_bytes >= 0", name="ck_files_size_nonneg"),
        db.Index("ix_files_brand_type", "brand_id", "type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    brand_id = db.Column(db.Integer, db.ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(16), nullable=False)
    size_bytes = db.Column(db.BigInteger, nullable=False)
    mime_type = db.Column(db.String(128), nullable=False)
    url = db.Column(db.Text, nullable=False)
    thumbnail_url = db.Column(db.Text, nullable=True)

    # "metadata" is reserved on declarative classes
    file_metadata = db.Column("metadata", db.JSON, nullable=True)
    folder = db.Column(db.String(255), nullable=True)
    tags = db.Column(db.JSON, nullable=True)
    description = db.Column(db.Text, nullable=True)

    usage_count = db.Column(db.Integer, nullable=False, default=0, server_default="0")
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    uploader = db.relationship("User", back_populates="files")
    brand = db.relationship("Brand", back_populates="files")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "brand_id": self.brand_id,
            "name": self.name,
            "type": self.type,
            "size_bytes": self.size_bytes,
            "mime_type": self.mime_type,
            "url": self.url,
            "thumbnail_url": self.thumbnail_url,
            "metadata": self.file_metadata,
            "folder": self.folder,
            "tags": self.tags,
            "description": self.description,
            "usage_count": self.usage_count,
            "last_used_at": to_utc_z(self.last_used_at) if self.last_used_at else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class Review(db.Model):
    """Customer review of a brand. Rating range is checked by the service."""
    __tablename__ = "reviews"
    __table_args__ = (
        db.Index("ix_reviews_brand_created", "brand_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    brand_id = db.Column(db.Integer, db.ForeignKey("brands.id", ondelete="CASCADE"), nullable=False)

    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text, nullable=True)
    images = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    author = db.relationship("User", back_populates="reviews")
    brand = db.relationship("Brand", back_populates="reviews")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "brand_id": self.brand_id,
            "rating": self.rating,
            "comment": self.comment,
            "images": list(self.images or []),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
