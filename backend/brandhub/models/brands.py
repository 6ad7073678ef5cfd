from __future__ import annotations

from ..extensions import db
from brandhub.time_utils import to_utc_z


BRAND_JSON_FIELDS = (
    "address",
    "social_links",
    "certifications",
    "awards",
    "press_features",
    "featured_products",
    "new_launch_products",
    "campaigns",
    "settings",
    "team_members",
    "product_categories",
)


class Brand(db.Model):
    """
    Company profile owned by a brand-role user.

    Central aggregate: files, reviews, landing pages, QR codes and products
    hang off the brand and go away with it. Semi-structured attachments are
    JSON columns validated at the service boundary (see attachments.py).

    One brand per owner: user_id is unique.
    """
    __tablename__ = "brands"
    __table_args__ = (
        db.UniqueConstraint("user_id", name="uq_brands_user_id"),
        db.Index("ix_brands_active_verified", "is_active", "is_verified"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # Required profile
    name = db.Column(db.String(255), nullable=False, index=True)
    logo = db.Column(db.Text, nullable=False)
    description = db.Column(db.Text, nullable=False)
    email = db.Column(db.String(255), nullable=False)

    # Optional profile
    tagline = db.Column(db.String(255), nullable=True)
    brand_video = db.Column(db.Text, nullable=True)
    mission = db.Column(db.Text, nullable=True)
    vision = db.Column(db.Text, nullable=True)
    founding_year = db.Column(db.Integer, nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    website = db.Column(db.String(512), nullable=True)
    gst_number = db.Column(db.String(32), nullable=True)
    hq_location = db.Column(db.String(255), nullable=True)
    support_email = db.Column(db.String(255), nullable=True)
    support_phone = db.Column(db.String(32), nullable=True)
    whatsapp_support = db.Column(db.String(32), nullable=True)
    industry_category = db.Column(db.String(128), nullable=True)
    employee_range = db.Column(db.String(64), nullable=True)

    # Semi-structured attachments
    address = db.Column(db.JSON, nullable=True)
    social_links = db.Column(db.JSON, nullable=True)
    certifications = db.Column(db.JSON, nullable=True)
    awards = db.Column(db.JSON, nullable=True)
    press_features = db.Column(db.JSON, nullable=True)
    featured_products = db.Column(db.JSON, nullable=True)
    new_launch_products = db.Column(db.JSON, nullable=True)
    campaigns = db.Column(db.JSON, nullable=True)
    settings = db.Column(db.JSON, nullable=True)
    team_members = db.Column(db.JSON, nullable=True)
    product_categories = db.Column(db.JSON, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    is_verified = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    owner = db.relationship("User", back_populates="brands")
    products = db.relationship(
        "Product", back_populates="brand", cascade="all, delete-orphan", passive_deletes=True
    )
    files = db.relationship(
        "File", back_populates="brand", cascade="all, delete-orphan", passive_deletes=True
    )
    reviews = db.relationship(
        "Review", back_populates="brand", cascade="all, delete-orphan", passive_deletes=True
    )
    landing_pages = db.relationship(
        "LandingPage", back_populates="brand", cascade="all, delete-orphan", passive_deletes=True
    )
    qr_codes = db.relationship(
        "QRCode", back_populates="brand", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<Brand id={self.id} name={self.name!r}>"

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "user_id": self.user_id,
            "name": self.name,
            "logo": self.logo,
            "description": self.description,
            "email": self.email,
            "tagline": self.tagline,
            "brand_video": self.brand_video,
            "mission": self.mission,
            "vision": self.vision,
            "founding_year": self.founding_year,
            "phone": self.phone,
            "website": self.website,
            "gst_number": self.gst_number,
            "hq_location": self.hq_location,
            "support_email": self.support_email,
            "support_phone": self.support_phone,
            "whatsapp_support": self.whatsapp_support,
            "industry_category": self.industry_category,
            "employee_range": self.employee_range,
            "is_active": self.is_active,
            "is_verified": self.is_verified,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
        for field in BRAND_JSON_FIELDS:
            data[field] = getattr(self, field)
        return data


class Product(db.Model):
    """Catalogue entry shown on a brand's profile and landing pages."""
    __tablename__ = "products"
    __table_args__ = (
        db.Index("ix_products_brand_name", "brand_id", "name"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    brand_id = db.Column(db.Integer, db.ForeignKey("brands.id", ondelete="CASCADE"), nullable=False, index=True)

    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(128), nullable=True)
    subcategory = db.Column(db.String(128), nullable=True)
    price_cents = db.Column(db.Integer, nullable=True)
    image = db.Column(db.Text, nullable=True)
    usage_video = db.Column(db.Text, nullable=True)
    usage_instructions = db.Column(db.Text, nullable=True)
    shelf_life = db.Column(db.String(128), nullable=True)
    materials = db.Column(db.Text, nullable=True)
    recycling = db.Column(db.Text, nullable=True)
    sustainability = db.Column(db.Text, nullable=True)
    manufacturing_details = db.Column(db.Text, nullable=True)

    ingredients = db.Column(db.JSON, nullable=True)
    certifications = db.Column(db.JSON, nullable=True)
    ecommerce_links = db.Column(db.JSON, nullable=True)
    faqs = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    brand = db.relationship("Brand", back_populates="products")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "brand_id": self.brand_id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "subcategory": self.subcategory,
            "price_cents": self.price_cents,
            "image": self.image,
            "usage_video": self.usage_video,
            "usage_instructions": self.usage_instructions,
            "shelf_life": self.shelf_life,
            "materials": self.materials,
            "recycling": self.recycling,
            "sustainability": self.sustainability,
            "manufacturing_details": self.manufacturing_details,
            "ingredients": self.ingredients,
            "certifications": self.certifications,
            "ecommerce_links": self.ecommerce_links,
            "faqs": self.faqs,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }
