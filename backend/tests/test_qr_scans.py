"""
QR code and scan tracking tests.

The concurrency test runs against a file-backed SQLite database so that
each worker thread gets its own connection, as separate requests would.
"""

import os
import tempfile
import threading

import pytest

from brandhub import create_app
from brandhub.errors import NotFoundError, ReferentialError, ValidationError
from brandhub.extensions import db
from brandhub.models import QRCode, ScanLog
from brandhub.services import auth_service, brand_service, landing_page_service, qr_service

from conftest import BRAND_PAYLOAD, TEST_CONFIG, TEST_PASSWORD


def _log_count(qr_code_id):
    return db.session.query(ScanLog).filter(ScanLog.qr_code_id == qr_code_id).count()


class TestQRCodes:
    def test_create_defaults(self, landing_page, brand):
        qr = qr_service.create_qr_code(landing_page.id, "Sticker", settings={"fgColor": "#000000", "size": 512})
        assert qr.scan_count == 0
        assert qr.brand_id == brand.id
        assert qr.data == "https://brandhub.test/p/acme-launch"
        assert qr.settings == {"foreground_color": "#000000", "size": 512}

    def test_explicit_data(self, landing_page):
        qr = qr_service.create_qr_code(landing_page.id, "Sticker", data="https://acme.com/promo")
        assert qr.data == "https://acme.com/promo"

    def test_brand_must_match_page(self, landing_page, other_brand):
        with pytest.raises(ValidationError):
            qr_service.create_qr_code(landing_page.id, "Sticker", brand_id=other_brand.id)

    def test_page_must_exist(self, db_session):
        with pytest.raises(ReferentialError):
            qr_service.create_qr_code(999, "Sticker")

    @pytest.mark.parametrize("settings", [
        {"size": 10},
        {"errorCorrection": "Z"},
        {"fgColor": "black"},
        {"shape": "round"},
    ])
    def test_bad_settings(self, landing_page, settings):
        with pytest.raises(ValidationError):
            qr_service.create_qr_code(landing_page.id, "Sticker", settings=settings)

    def test_update(self, qr_code):
        qr_service.update_qr_code(qr_code.id, {"name": "Poster", "settings": {"errorCorrection": "h"}})
        updated = qr_service.get_qr_code(qr_code.id)
        assert updated.name == "Poster"
        assert updated.settings == {"error_correction": "H"}
        with pytest.raises(ValidationError):
            qr_service.update_qr_code(qr_code.id, {"scan_count": 100})

    def test_listing(self, brand, landing_page, qr_code):
        other_page = landing_page_service.create_landing_page(brand.id, "Sale", "acme-sale")
        qr_service.create_qr_code(other_page.id, "Sale sticker")
        assert len(qr_service.list_qr_codes(brand_id=brand.id)) == 2
        assert [q.id for q in qr_service.list_qr_codes(landing_page_id=landing_page.id)] == [qr_code.id]


class TestScans:
    def test_three_scans(self, qr_code):
        for _ in range(3):
            qr_service.record_scan(qr_code.id, ip_address="10.0.0.1")

        assert qr_service.get_qr_code(qr_code.id).scan_count == 3
        assert _log_count(qr_code.id) == 3

    def test_scan_of_missing_code_writes_nothing(self, qr_code):
        with pytest.raises(NotFoundError):
            qr_service.record_scan(999)
        assert db.session.query(ScanLog).count() == 0

    def test_scan_with_unknown_user(self, qr_code):
        with pytest.raises(ReferentialError):
            qr_service.record_scan(qr_code.id, user_id=999)
        assert qr_service.get_qr_code(qr_code.id).scan_count == 0
        assert _log_count(qr_code.id) == 0

    def test_user_delete_keeps_scan_history(self, qr_code, customer_user):
        log = qr_service.record_scan(qr_code.id, user_id=customer_user.id)
        auth_service.delete_user(customer_user.id)

        kept = db.session.get(ScanLog, log.id)
        assert kept is not None
        assert kept.user_id is None
        assert qr_service.get_qr_code(qr_code.id).scan_count == 1

    def test_qr_delete_takes_scans(self, qr_code):
        qr_service.record_scan(qr_code.id)
        qr_service.delete_qr_code(qr_code.id)
        assert db.session.query(ScanLog).count() == 0

    def test_list_scans_newest_first(self, qr_code):
        first = qr_service.record_scan(qr_code.id)
        second = qr_service.record_scan(qr_code.id)
        assert [s.id for s in qr_service.list_scans(qr_code.id)] == [second.id, first.id]
        assert len(qr_service.list_scans(qr_code.id, limit=1)) == 1

    def test_stats(self, qr_code):
        qr_service.record_scan(qr_code.id, ip_address="10.0.0.1")
        qr_service.record_scan(qr_code.id, ip_address="10.0.0.1")
        qr_service.record_scan(qr_code.id, ip_address="10.0.0.2")
        qr_service.record_scan(qr_code.id)

        stats = qr_service.scan_stats(qr_code.id)
        assert stats["total_scans"] == 4
        assert stats["scan_count"] == 4
        assert stats["unique_ips"] == 2
        assert sum(day["count"] for day in stats["per_day"]) == 4

    def test_location(self, qr_code):
        location = qr_service.derive_location({"CF-IPCountry": "in", "X-Geo-City": "Pune"})
        assert location == {"country": "IN", "city": "Pune"}
        assert qr_service.derive_location({"CF-IPCountry": "XX"}) is None
        assert qr_service.derive_location({}) is None

        log = qr_service.record_scan(qr_code.id, location=location)
        assert db.session.get(ScanLog, log.id).location == {"country": "IN", "city": "Pune"}


class TestConcurrentScans:
    """Concurrent scans of one code must not lose increments."""

    WORKERS = 10

    def setup_method(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        db_path = os.path.join(self.tmpdir.name, "scans.db")
        self.app = create_app(dict(TEST_CONFIG, SQLALCHEMY_DATABASE_URI=f"sqlite:///{db_path}"))

        with self.app.app_context():
            db.create_all()
            owner = auth_service.create_user("owner@acme.com", TEST_PASSWORD, role="brand")
            brand = brand_service.create_brand(owner.id, dict(BRAND_PAYLOAD))
            page = landing_page_service.create_landing_page(brand.id, "Launch", "acme-launch")
            self.qr_code_id = qr_service.create_qr_code(page.id, "Sticker").id

    def teardown_method(self):
        with self.app.app_context():
            db.session.remove()
            db.drop_all()
            db.session.remove()
            db.engine.dispose()
        self.tmpdir.cleanup()

    def test_no_lost_increments(self):
        errors = []
        start = threading.Barrier(self.WORKERS)

        def worker(n):
            with self.app.app_context():
                try:
                    start.wait()
                    qr_service.record_scan(self.qr_code_id, ip_address=f"10.0.0.{n}")
                except Exception as exc:
                    errors.append(exc)
                finally:
                    db.session.remove()

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(self.WORKERS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        with self.app.app_context():
            qr = db.session.get(QRCode, self.qr_code_id)
            assert qr.scan_count == self.WORKERS
            assert _log_count(self.qr_code_id) == self.WORKERS
