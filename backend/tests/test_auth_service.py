"""
Identity tests: account creation, credentials, roles and sessions.
"""

from datetime import timedelta

import pytest

from brandhub.errors import DuplicateEmail, NotFoundError, PasswordValidationError, ValidationError
from brandhub.models import (
    Block,
    Brand,
    CustomerProfile,
    File,
    LandingPage,
    Product,
    QRCode,
    Review,
    ScanLog,
    SessionToken,
    User,
)
from brandhub.services import (
    auth_service,
    block_service,
    file_service,
    product_service,
    qr_service,
    review_service,
    session_service,
)

from conftest import BRAND_PAYLOAD, TEST_PASSWORD


class TestCreateUser:
    def test_defaults_to_customer_role(self, db_session):
        user = auth_service.create_user("New@Example.com ", TEST_PASSWORD)
        assert user.role == "customer"
        assert user.email == "new@example.com"
        assert user.password_hash != TEST_PASSWORD

    def test_duplicate_email_is_rejected(self, brand_user):
        with pytest.raises(DuplicateEmail):
            auth_service.create_user("A@B.com", TEST_PASSWORD, role="customer")
        assert auth_service.list_users() == [brand_user]

    @pytest.mark.parametrize("password", ["short1", "allletters", "12345678", None])
    def test_weak_password_is_rejected(self, db_session, password):
        with pytest.raises(PasswordValidationError):
            auth_service.create_user("weak@example.com", password)

    def test_unknown_role_is_rejected(self, db_session):
        with pytest.raises(ValidationError):
            auth_service.create_user("x@example.com", TEST_PASSWORD, role="owner")

    def test_invalid_email_is_rejected(self, db_session):
        with pytest.raises(ValidationError):
            auth_service.create_user("not-an-email", TEST_PASSWORD)

    def test_profile_fields_are_validated(self, db_session):
        user = auth_service.create_user("p@example.com", TEST_PASSWORD, name="  Pat ", age=31)
        assert user.name == "Pat"
        assert user.age == 31
        with pytest.raises(ValidationError):
            auth_service.create_user("q@example.com", TEST_PASSWORD, age=200)
        with pytest.raises(ValidationError):
            auth_service.create_user("r@example.com", TEST_PASSWORD, is_active=False)


class TestCredentials:
    def test_authenticate(self, brand_user):
        assert auth_service.authenticate("a@b.com", TEST_PASSWORD).id == brand_user.id
        assert brand_user.last_login_at is not None
        assert auth_service.authenticate("a@b.com", "WrongPass1") is None
        assert auth_service.authenticate("missing@b.com", TEST_PASSWORD) is None

    def test_inactive_user_cannot_authenticate(self, brand_user):
        auth_service.set_active(brand_user.id, False)
        assert auth_service.authenticate("a@b.com", TEST_PASSWORD) is None

    def test_change_password(self, brand_user):
        with pytest.raises(ValidationError):
            auth_service.change_password(brand_user.id, "WrongPass1", "NewPassword9")
        auth_service.change_password(brand_user.id, TEST_PASSWORD, "NewPassword9")
        assert auth_service.authenticate("a@b.com", "NewPassword9") is not None
        assert auth_service.authenticate("a@b.com", TEST_PASSWORD) is None


class TestRoles:
    def test_get_and_set_role(self, customer_user):
        assert auth_service.get_role(customer_user.id) == "customer"
        auth_service.set_role(customer_user.id, "brand")
        assert auth_service.get_role(customer_user.id) == "brand"

    def test_role_of_missing_user(self, db_session):
        with pytest.raises(NotFoundError):
            auth_service.get_role(999)

    def test_list_users_by_role(self, brand_user, customer_user, admin_user):
        assert auth_service.list_users(role="brand") == [brand_user]
        assert len(auth_service.list_users()) == 3


class TestSessions:
    def test_round_trip(self, brand_user):
        record, token = session_service.create_session(brand_user.id, user_agent="pytest")
        assert record.token_hash == session_service.hash_token(token)
        assert record.token_hash != token

        context = session_service.validate_session(token)
        assert context.user_id == brand_user.id
        assert context.role == "brand"

    def test_unknown_token(self, db_session):
        assert session_service.validate_session("nope") is None
        assert session_service.validate_session("") is None

    def test_revoked_token(self, brand_user):
        _, token = session_service.create_session(brand_user.id)
        assert session_service.revoke_session(token) is True
        assert session_service.validate_session(token) is None
        assert session_service.revoke_session("unknown") is False

    def test_expired_and_idle_tokens(self, brand_user, db_session):
        expired, expired_token = session_service.create_session(brand_user.id)
        idle, idle_token = session_service.create_session(brand_user.id)

        expired.expires_at = expired.expires_at - timedelta(days=2)
        idle.last_used_at = idle.last_used_at - timedelta(hours=3)
        db_session.commit()

        assert session_service.validate_session(expired_token) is None
        assert session_service.validate_session(idle_token) is None

    def test_inactive_user_session_is_invalid(self, brand_user):
        _, token = session_service.create_session(brand_user.id)
        auth_service.set_active(brand_user.id, False)
        assert session_service.validate_session(token) is None

    def test_revoke_all(self, brand_user):
        session_service.create_session(brand_user.id)
        session_service.create_session(brand_user.id)
        assert session_service.revoke_all_sessions(brand_user.id) == 2
        assert session_service.revoke_all_sessions(brand_user.id) == 0

    def test_sessions_go_with_user(self, brand_user, db_session):
        session_service.create_session(brand_user.id)
        auth_service.delete_user(brand_user.id)
        assert db_session.query(SessionToken).count() == 0
        assert db_session.query(User).count() == 0


class TestUserDeleteCascade:
    def test_owned_brand_tree_is_removed(self, brand, brand_user, customer_user, qr_code, db_session):
        file_service.register_file(brand_user.id, brand.id, {
            "name": "logo.png",
            "type": "image",
            "size_bytes": 2048,
            "mime_type": "image/png",
            "url": "https://cdn.brandhub.test/acme/logo.png",
        })
        review_service.create_review(customer_user.id, brand.id, 4)
        product_service.create_product(brand.id, {"name": "Neem Soap"})
        block_service.insert_block(qr_code.landing_page_id, "hero")
        qr_service.record_scan(qr_code.id, user_id=customer_user.id)

        auth_service.delete_user(brand_user.id)

        for model in (Brand, File, Review, Product, LandingPage, Block, QRCode, ScanLog):
            assert db_session.query(model).count() == 0, model.__name__
        # The customer who reviewed and scanned keeps their account
        assert db_session.query(User).filter(User.id == customer_user.id).count() == 1


class TestRegisterUser:
    def test_customer_gets_profile(self, db_session):
        user = auth_service.register_user("c@example.com", TEST_PASSWORD)
        profile = db_session.query(CustomerProfile).filter(CustomerProfile.user_id == user.id).one()
        assert profile.saved_brand_ids == []

    def test_brand_onboarding(self, db_session):
        onboarding = dict(BRAND_PAYLOAD, industry_category="Personal care", employee_range="11-50")
        user = auth_service.register_user("owner@acme.com", TEST_PASSWORD, role="brand", brand=onboarding)

        brand = db_session.query(Brand).filter(Brand.user_id == user.id).one()
        assert brand.industry_category == "Personal care"
        assert brand.employee_range == "11-50"
        assert db_session.query(CustomerProfile).count() == 0

    def test_rejected_brand_leaves_no_account(self, db_session):
        onboarding = {"name": "Acme", "industry_category": "Personal care"}
        with pytest.raises(ValidationError):
            auth_service.register_user("owner@acme.com", TEST_PASSWORD, role="brand", brand=onboarding)
        assert auth_service.get_user_by_email("owner@acme.com") is None

    def test_brand_only_for_brand_role(self, db_session):
        with pytest.raises(ValidationError):
            auth_service.register_user("c@example.com", TEST_PASSWORD, brand=dict(BRAND_PAYLOAD))
        assert db_session.query(User).count() == 0
