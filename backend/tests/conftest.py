"""
Pytest fixtures for BrandHub backend tests.

Provides the test app on in-memory SQLite, a per-test table wipe, factory
fixtures for the ownership tree (user -> brand -> landing page -> QR code)
and bearer headers for route tests.
"""

import pytest
from brandhub import create_app
from brandhub.extensions import db
from brandhub.services import (
    auth_service,
    brand_service,
    landing_page_service,
    qr_service,
    session_service,
)

TEST_PASSWORD = "Password123"

TEST_CONFIG = {
    'TESTING': True,
    'SECRET_KEY': 'test',
    'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
    'SQLALCHEMY_TRACK_MODIFICATIONS': False,
    'BCRYPT_ROUNDS': 4,
    'PUBLIC_BASE_URL': 'https://brandhub.test',
}

BRAND_PAYLOAD = {
    "name": "Acme",
    "logo": "https://cdn.brandhub.test/acme/logo.png",
    "description": "Everyday goods, made well.",
    "email": "hello@acme.com",
}


@pytest.fixture(scope='session')
def app():
    """Create application for testing."""
    app = create_app(TEST_CONFIG)

    with app.app_context():
        db.create_all()
        yield app
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Create fresh database for each test."""
    with app.app_context():
        # Clear all data but keep schema
        meta = db.metadata
        for table in reversed(meta.sorted_tables):
            db.session.execute(table.delete())
        db.session.commit()

        yield db.session

        # Cleanup after test
        db.session.rollback()


@pytest.fixture(scope='function')
def brand_user(db_session):
    return auth_service.create_user("a@b.com", TEST_PASSWORD, role="brand", name="Ada Owner")


@pytest.fixture(scope='function')
def other_brand_user(db_session):
    return auth_service.create_user("owner@rival.com", TEST_PASSWORD, role="brand")


@pytest.fixture(scope='function')
def customer_user(db_session):
    return auth_service.create_user("shopper@example.com", TEST_PASSWORD, role="customer")


@pytest.fixture(scope='function')
def admin_user(db_session):
    return auth_service.create_user("admin@brandhub.test", TEST_PASSWORD, role="admin")


@pytest.fixture(scope='function')
def brand(brand_user):
    return brand_service.create_brand(brand_user.id, dict(BRAND_PAYLOAD))


@pytest.fixture(scope='function')
def other_brand(other_brand_user):
    payload = dict(BRAND_PAYLOAD, name="Rival", email="hi@rival.com")
    return brand_service.create_brand(other_brand_user.id, payload)


@pytest.fixture(scope='function')
def landing_page(brand):
    return landing_page_service.create_landing_page(brand.id, "Launch", "acme-launch")


@pytest.fixture(scope='function')
def qr_code(landing_page):
    return qr_service.create_qr_code(landing_page.id, "Shelf sticker")


def _headers_for(user) -> dict:
    _, token = session_service.create_session(user.id)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope='function')
def brand_headers(brand_user):
    return _headers_for(brand_user)


@pytest.fixture(scope='function')
def other_brand_headers(other_brand_user):
    return _headers_for(other_brand_user)


@pytest.fixture(scope='function')
def customer_headers(customer_user):
    return _headers_for(customer_user)


@pytest.fixture(scope='function')
def admin_headers(admin_user):
    return _headers_for(admin_user)
