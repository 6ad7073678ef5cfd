"""
HTTP layer tests: authentication, brand isolation, admin guards and the
public page and scan endpoints.
"""

import pytest

from brandhub.services import block_service, qr_service

from conftest import BRAND_PAYLOAD, TEST_PASSWORD


class TestAuthFlow:
    def test_register_login_me_logout(self, client, db_session):
        res = client.post("/api/auth/register", json={
            "email": "New@Brand.com",
            "password": TEST_PASSWORD,
            "role": "brand",
            "name": "Nia",
        })
        assert res.status_code == 201
        assert res.get_json()["user"]["email"] == "new@brand.com"

        res = client.post("/api/auth/login", json={"email": "new@brand.com", "password": TEST_PASSWORD})
        assert res.status_code == 200
        token = res.get_json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        res = client.get("/api/auth/me", headers=headers)
        assert res.status_code == 200
        assert res.get_json()["user"]["role"] == "brand"

        assert client.post("/api/auth/logout", headers=headers).status_code == 200
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_customer_registration_creates_profile(self, client, db_session):
        res = client.post("/api/auth/register", json={"email": "c@example.com", "password": TEST_PASSWORD})
        assert res.status_code == 201
        assert res.get_json()["user"]["role"] == "customer"

        token = client.post(
            "/api/auth/login", json={"email": "c@example.com", "password": TEST_PASSWORD}
        ).get_json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        res = client.get("/api/profiles/customer", headers=headers)
        assert res.status_code == 200
        assert res.get_json()["profile"]["saved_brand_ids"] == []

        res = client.put(
            "/api/profiles/customer/preferences", headers=headers, json={"preferences": {"newsletter": True}}
        )
        assert res.get_json()["profile"]["preferences"] == {"newsletter": True, "categories": []}

    def test_brand_registration_with_onboarding(self, client, db_session):
        res = client.post("/api/auth/register", json={
            "email": "owner@acme.com",
            "password": TEST_PASSWORD,
            "role": "brand",
            "brand": dict(BRAND_PAYLOAD, industry_category="Personal care", employee_range="11-50"),
        })
        assert res.status_code == 201

        res = client.get("/api/brands")
        assert res.get_json()["items"][0]["industry_category"] == "Personal care"

        res = client.post("/api/auth/register", json={
            "email": "late@acme.com", "password": TEST_PASSWORD, "role": "brand", "brand": {"name": "Late"},
        })
        assert res.status_code == 400
        res = client.post("/api/auth/login", json={"email": "late@acme.com", "password": TEST_PASSWORD})
        assert res.status_code == 401

    def test_cannot_self_register_as_admin(self, client, db_session):
        res = client.post("/api/auth/register", json={
            "email": "sneaky@example.com", "password": TEST_PASSWORD, "role": "admin",
        })
        assert res.status_code == 400

    def test_duplicate_email(self, client, brand_user):
        res = client.post("/api/auth/register", json={"email": "A@B.com", "password": TEST_PASSWORD})
        assert res.status_code == 409

    def test_weak_password(self, client, db_session):
        res = client.post("/api/auth/register", json={"email": "x@y.com", "password": "short"})
        assert res.status_code == 400

    def test_bad_credentials(self, client, brand_user):
        res = client.post("/api/auth/login", json={"email": "a@b.com", "password": "WrongPass1"})
        assert res.status_code == 401

    def test_change_password_revokes_sessions(self, client, brand_headers):
        res = client.post("/api/auth/change-password", headers=brand_headers, json={
            "current_password": TEST_PASSWORD, "new_password": "Another123",
        })
        assert res.status_code == 200
        assert res.get_json()["sessions_revoked"] >= 1
        assert client.get("/api/auth/me", headers=brand_headers).status_code == 401


class TestBrandIsolation:
    def test_requires_token(self, client, brand):
        assert client.get(f"/api/brands/{brand.id}/landing-pages").status_code == 401
        assert client.get(
            f"/api/brands/{brand.id}/landing-pages", headers={"Authorization": "Bearer nope"}
        ).status_code == 401

    def test_customer_cannot_manage_pages(self, client, brand, customer_headers):
        res = client.get(f"/api/brands/{brand.id}/landing-pages", headers=customer_headers)
        assert res.status_code == 403

    def test_other_brand_is_forbidden(self, client, brand, landing_page, qr_code, other_brand, other_brand_headers):
        assert client.get(f"/api/brands/{brand.id}/landing-pages", headers=other_brand_headers).status_code == 403
        assert client.get(f"/api/landing-pages/{landing_page.id}", headers=other_brand_headers).status_code == 403
        assert client.get(f"/api/qr-codes/{qr_code.id}", headers=other_brand_headers).status_code == 403
        assert client.patch(
            f"/api/brands/{brand.id}", headers=other_brand_headers, json={"tagline": "hijacked"}
        ).status_code == 403

    def test_owner_and_admin_have_access(self, client, landing_page, brand_headers, admin_headers):
        assert client.get(f"/api/landing-pages/{landing_page.id}", headers=brand_headers).status_code == 200
        assert client.get(f"/api/landing-pages/{landing_page.id}", headers=admin_headers).status_code == 200


class TestBrandRoutes:
    def test_create_own_brand(self, client, brand_user, brand_headers):
        res = client.post("/api/brands", headers=brand_headers, json=BRAND_PAYLOAD)
        assert res.status_code == 201
        assert res.get_json()["brand"]["user_id"] == brand_user.id

        res = client.get("/api/brands/me", headers=brand_headers)
        assert res.get_json()["brand"]["name"] == "Acme"

    def test_profile_save_returns_slug(self, client, brand_headers):
        res = client.put("/api/brands/me", headers=brand_headers, json=dict(BRAND_PAYLOAD, name="Acme & Co."))
        assert res.status_code == 201
        assert res.get_json()["slug"] == "acme-co"

        res = client.put("/api/brands/me", headers=brand_headers, json={"tagline": "Made well"})
        assert res.status_code == 200
        assert res.get_json()["slug"] == "acme-co"

    def test_missing_required_field(self, client, brand_headers):
        payload = dict(BRAND_PAYLOAD)
        payload.pop("logo")
        assert client.post("/api/brands", headers=brand_headers, json=payload).status_code == 400

    def test_public_listing_hides_inactive(self, client, brand, other_brand, admin_headers):
        res = client.put(f"/api/admin/brands/{other_brand.id}/flags", headers=admin_headers, json={"is_active": False})
        assert res.status_code == 200

        names = [b["name"] for b in client.get("/api/brands").get_json()["items"]]
        assert names == ["Acme"]

        res = client.get("/api/brands?include_inactive=true", headers=admin_headers)
        assert [b["name"] for b in res.get_json()["items"]] == ["Acme", "Rival"]

    def test_reviews(self, client, brand, customer_headers, brand_headers):
        res = client.post(f"/api/brands/{brand.id}/reviews", headers=customer_headers, json={"rating": 4})
        assert res.status_code == 201
        review_id = res.get_json()["review"]["id"]

        res = client.get(f"/api/brands/{brand.id}/reviews")
        assert res.get_json()["summary"]["average"] == 4.0

        res = client.delete(f"/api/brands/{brand.id}/reviews/{review_id}", headers=brand_headers)
        assert res.status_code == 403
        res = client.delete(f"/api/brands/{brand.id}/reviews/{review_id}", headers=customer_headers)
        assert res.status_code == 200


class TestLandingPageRoutes:
    def test_duplicate_slug_is_409(self, client, landing_page, other_brand, other_brand_headers):
        res = client.post(
            f"/api/brands/{other_brand.id}/landing-pages",
            headers=other_brand_headers,
            json={"name": "Copycat", "slug": "acme-launch"},
        )
        assert res.status_code == 409

    def test_invalid_slug_is_400(self, client, brand, brand_headers):
        res = client.post(
            f"/api/brands/{brand.id}/landing-pages",
            headers=brand_headers,
            json={"name": "Launch", "slug": "Not A Slug"},
        )
        assert res.status_code == 400

    def test_block_editing(self, client, landing_page, brand_headers):
        base = f"/api/landing-pages/{landing_page.id}/blocks"
        ids = [
            client.post(base, headers=brand_headers, json={"type": t}).get_json()["block"]["id"]
            for t in ("hero", "text", "cta")
        ]

        res = client.put(f"{base}/order", headers=brand_headers, json={"block_ids": list(reversed(ids))})
        assert res.status_code == 200
        assert [b["type"] for b in res.get_json()["blocks"]] == ["cta", "text", "hero"]

        res = client.put(f"{base}/order", headers=brand_headers, json={"block_ids": ids[:2]})
        assert res.status_code == 400

        res = client.patch(f"/api/blocks/{ids[0]}", headers=brand_headers, json={"order": 0})
        assert res.get_json()["block"]["order"] == 0

        assert client.delete(f"/api/blocks/{ids[1]}", headers=brand_headers).status_code == 200
        orders = [b["order"] for b in client.get(base, headers=brand_headers).get_json()["blocks"]]
        assert orders == [0, 1]

    def test_public_page_only_when_published(self, client, landing_page, brand_headers):
        block_service.insert_block(landing_page.id, "hero", {"title": "Hello"})
        assert client.get("/p/acme-launch").status_code == 404

        res = client.put(
            f"/api/landing-pages/{landing_page.id}/status", headers=brand_headers, json={"status": "published"}
        )
        assert res.status_code == 200

        res = client.get("/p/acme-launch")
        assert res.status_code == 200
        page = res.get_json()["landing_page"]
        assert page["blocks"][0]["content"] == {"title": "Hello"}


class TestScanRoutes:
    def test_scan_redirects_and_counts(self, client, qr_code, brand_headers):
        res = client.get(f"/q/{qr_code.id}", headers={"User-Agent": "pytest", "CF-IPCountry": "de"})
        assert res.status_code == 302
        assert res.headers["Location"] == "https://brandhub.test/p/acme-launch"

        res = client.get(f"/api/qr-codes/{qr_code.id}/scans", headers=brand_headers)
        scans = res.get_json()["scans"]
        assert len(scans) == 1
        assert scans[0]["location"] == {"country": "DE"}

        res = client.get(f"/api/qr-codes/{qr_code.id}/stats", headers=brand_headers)
        assert res.get_json()["scan_count"] == 1

    def test_logged_in_scan_links_user(self, client, qr_code, customer_user, customer_headers):
        client.get(f"/q/{qr_code.id}", headers=customer_headers)
        assert qr_service.list_scans(qr_code.id)[0].user_id == customer_user.id

    def test_non_url_target_is_returned(self, client, landing_page):
        qr = qr_service.create_qr_code(landing_page.id, "Wifi", data="WIFI:S:acme;;")
        res = client.get(f"/q/{qr.id}")
        assert res.status_code == 200
        assert res.get_json() == {"data": "WIFI:S:acme;;"}

    def test_unknown_code(self, client, db_session):
        assert client.get("/q/999").status_code == 404

    def test_create_qr_for_own_page_only(self, client, landing_page, brand_headers, other_brand, other_brand_headers):
        url = f"/api/landing-pages/{landing_page.id}/qr-codes"
        assert client.post(url, headers=other_brand_headers, json={"name": "x"}).status_code == 403

        res = client.post(url, headers=brand_headers, json={"name": "Poster", "settings": {"size": 256}})
        assert res.status_code == 201
        assert res.get_json()["qr_code"]["scan_count"] == 0


class TestAdminRoutes:
    def test_non_admin_is_forbidden(self, client, brand_headers):
        assert client.get("/api/admin/users", headers=brand_headers).status_code == 403

    def test_brand_owner_cannot_set_flags(self, client, brand, brand_headers):
        res = client.put(f"/api/admin/brands/{brand.id}/flags", headers=brand_headers, json={"is_verified": True})
        assert res.status_code == 403

    def test_verify_brand(self, client, brand, admin_headers):
        res = client.put(f"/api/admin/brands/{brand.id}/flags", headers=admin_headers, json={"is_verified": True})
        assert res.status_code == 200
        assert res.get_json()["brand"]["is_verified"] is True

    def test_deactivate_user_ends_sessions(self, client, customer_user, customer_headers, admin_headers):
        res = client.put(
            f"/api/admin/users/{customer_user.id}/active", headers=admin_headers, json={"is_active": False}
        )
        assert res.status_code == 200
        assert client.get("/api/auth/me", headers=customer_headers).status_code == 401

    def test_admin_cannot_delete_self(self, client, admin_user, admin_headers):
        res = client.delete(f"/api/admin/users/{admin_user.id}", headers=admin_headers)
        assert res.status_code == 400

    @pytest.mark.parametrize("role", ["brand", "customer"])
    def test_list_users_by_role(self, client, admin_headers, brand_user, customer_user, role):
        res = client.get(f"/api/admin/users?role={role}", headers=admin_headers)
        assert [u["role"] for u in res.get_json()["users"]] == [role]


def test_health(client, db_session):
    res = client.get("/api/health")
    assert res.status_code == 200
    assert res.get_json()["checks"]["database"]["status"] == "healthy"
