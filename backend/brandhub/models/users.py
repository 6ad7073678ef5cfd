from __future__ import annotations

from ..extensions import db
from brandhub.time_utils import to_utc_z


ROLE_ADMIN = "admin"
ROLE_BRAND = "brand"
ROLE_CUSTOMER = "customer"
ROLES = (ROLE_ADMIN, ROLE_BRAND, ROLE_CUSTOMER)


class User(db.Model):
    """
    Account for every actor of the platform.

    The role decides which sub-tree a user may touch: brand owners manage
    their own brand, customers review and save brands, admins moderate.
    Email is globally unique and stored lowercased.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_users_email"),
        db.CheckConstraint("role IN ('admin', 'brand', 'customer')", name="ck_users_role"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    role = db.Column(db.String(16), nullable=False, default=ROLE_CUSTOMER, server_default=ROLE_CUSTOMER)

    name = db.Column(db.String(255), nullable=True)
    age = db.Column(db.Integer, nullable=True)
    gender = db.Column(db.String(32), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    avatar_url = db.Column(db.Text, nullable=True)

    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login_at = db.Column(db.DateTime(timezone=True), nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    brands = db.relationship(
        "Brand", back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )
    files = db.relationship(
        "File", back_populates="uploader", cascade="all, delete-orphan", passive_deletes=True
    )
    reviews = db.relationship(
        "Review", back_populates="author", cascade="all, delete-orphan", passive_deletes=True
    )
    customer_profile = db.relationship(
        "CustomerProfile", back_populates="user", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )
    admin_profile = db.relationship(
        "AdminProfile", back_populates="user", uselist=False,
        cascade="all, delete-orphan", passive_deletes=True,
    )
    sessions = db.relationship(
        "SessionToken", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )
    # Scan logs outlive the user; the store nulls the reference
    scan_logs = db.relationship("ScanLog", back_populates="user", passive_deletes=True)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "role": self.role,
            "name": self.name,
            "age": self.age,
            "gender": self.gender,
            "phone": self.phone,
            "avatar_url": self.avatar_url,
            "is_active": self.is_active,
            "last_login_at": to_utc_z(self.last_login_at) if self.last_login_at else None,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class CustomerProfile(db.Model):
    """Customer-only extension of a user: preferences and saved brands."""
    __tablename__ = "customer_profiles"
    __table_args__ = (
        db.UniqueConstraint("user_id", name="uq_customer_profiles_user_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    preferences = db.Column(db.JSON, nullable=True)
    saved_brand_ids = db.Column(db.JSON, nullable=False, default=list)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    user = db.relationship("User", back_populates="customer_profile")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "preferences": self.preferences,
            "saved_brand_ids": list(self.saved_brand_ids or []),
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class AdminProfile(db.Model):
    """Admin-only extension of a user: permission set and department."""
    __tablename__ = "admin_profiles"
    __table_args__ = (
        db.UniqueConstraint("user_id", name="uq_admin_profiles_user_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(
        db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # Stored as a sorted list; treated as a set
    permissions = db.Column(db.JSON, nullable=False, default=list)
    department = db.Column(db.String(128), nullable=True)
    is_superadmin = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    user = db.relationship("User", back_populates="admin_profile")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "permissions": list(self.permissions or []),
            "department": self.department,
            "is_superadmin": self.is_superadmin,
            "created_at": to_utc_z(self.created_at),
            "updated_at": to_utc_z(self.updated_at),
        }


class SessionToken(db.Model):
    """
    Bearer session issued at login.

    Only the SHA-256 hash of the token is stored; the plaintext goes to the
    client once.
    """
    __tablename__ = "session_tokens"
    __table_args__ = (
        db.Index("ix_session_tokens_user", "user_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    token_hash = db.Column(db.String(64), nullable=False, unique=True, index=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False)
    last_used_at = db.Column(db.DateTime(timezone=True), nullable=False)
    expires_at = db.Column(db.DateTime(timezone=True), nullable=False)

    is_revoked = db.Column(db.Boolean, nullable=False, default=False)
    revoked_at = db.Column(db.DateTime(timezone=True), nullable=True)

    user_agent = db.Column(db.String(512), nullable=True)
    ip_address = db.Column(db.String(64), nullable=True)

    user = db.relationship("User", back_populates="sessions")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": to_utc_z(self.created_at),
            "last_used_at": to_utc_z(self.last_used_at),
            "expires_at": to_utc_z(self.expires_at),
            "is_revoked": self.is_revoked,
        }
