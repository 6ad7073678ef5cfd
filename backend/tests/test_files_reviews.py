"""
Media library and review tests.
"""

import pytest

from brandhub.errors import NotFoundError, ReferentialError, ValidationError
from brandhub.services import brand_service, file_service, landing_page_service, qr_service, review_service


def _image(**overrides):
    payload = {
        "name": "hero.png",
        "type": "image",
        "size_bytes": 120_000,
        "mime_type": "image/png",
        "url": "https://cdn.brandhub.test/acme/hero.png",
    }
    payload.update(overrides)
    return payload


class TestFiles:
    def test_register(self, brand, brand_user):
        record = file_service.register_file(
            brand_user.id,
            brand.id,
            _image(metadata={"width": 1200, "height": 630}, tags=["hero", "launch"], folder="banners"),
        )
        assert record.usage_count == 0
        assert record.to_dict()["metadata"] == {"width": 1200, "height": 630}
        assert record.tags == ["hero", "launch"]

    @pytest.mark.parametrize("overrides", [
        {"type": "audio"},
        {"mime_type": "application/pdf"},
        {"size_bytes": 0},
        {"size_bytes": 6 * 1024 * 1024},
        {"size_bytes": 1.5},
        {"url": ""},
        {"metadata": {"width": 0}},
    ])
    def test_register_rejects_bad_input(self, brand, brand_user, overrides):
        with pytest.raises(ValidationError):
            file_service.register_file(brand_user.id, brand.id, _image(**overrides))

    def test_pdf_and_video_limits(self, brand, brand_user):
        file_service.register_file(brand_user.id, brand.id, _image(
            name="deck.pdf", type="pdf", mime_type="application/pdf", size_bytes=10 * 1024 * 1024,
        ))
        with pytest.raises(ValidationError):
            file_service.register_file(brand_user.id, brand.id, _image(
                name="deck.pdf", type="pdf", mime_type="application/pdf", size_bytes=25 * 1024 * 1024,
            ))
        file_service.register_file(brand_user.id, brand.id, _image(
            name="ad.mp4", type="video", mime_type="video/mp4", size_bytes=150 * 1024 * 1024,
        ))

    def test_owners_must_exist(self, brand, brand_user):
        with pytest.raises(ReferentialError):
            file_service.register_file(brand_user.id, 999, _image())
        with pytest.raises(ReferentialError):
            file_service.register_file(999, brand.id, _image())

    def test_list_filters(self, brand, brand_user):
        file_service.register_file(brand_user.id, brand.id, _image(folder="banners"))
        file_service.register_file(brand_user.id, brand.id, _image(
            name="deck.pdf", type="pdf", mime_type="application/pdf", size_bytes=1000,
        ))
        assert len(file_service.list_files(brand.id)) == 2
        assert [f.name for f in file_service.list_files(brand.id, file_type="pdf")] == ["deck.pdf"]
        assert [f.name for f in file_service.list_files(brand.id, folder="banners")] == ["hero.png"]

    def test_record_use(self, brand, brand_user):
        record = file_service.register_file(brand_user.id, brand.id, _image())
        file_service.record_file_use(record.id)
        used = file_service.record_file_use(record.id)
        assert used.usage_count == 2
        assert used.last_used_at is not None

        with pytest.raises(NotFoundError):
            file_service.record_file_use(999)

    def test_update_and_delete(self, brand, brand_user):
        record = file_service.register_file(brand_user.id, brand.id, _image())
        file_service.update_file(record.id, {"folder": "archive", "description": "Old hero"})
        assert file_service.get_file(record.id).folder == "archive"

        with pytest.raises(ValidationError):
            file_service.update_file(record.id, {"size_bytes": 10})

        file_service.delete_file(record.id)
        with pytest.raises(NotFoundError):
            file_service.get_file(record.id)


class TestReviews:
    def test_create_and_summary(self, brand, customer_user, other_brand_user):
        review_service.create_review(customer_user.id, brand.id, 5, comment="Lovely", images=["https://img/1.png"])
        review_service.create_review(other_brand_user.id, brand.id, 2)

        summary = review_service.brand_rating_summary(brand.id)
        assert summary["count"] == 2
        assert summary["average"] == 3.5

    def test_empty_summary(self, brand):
        assert review_service.brand_rating_summary(brand.id) == {"brand_id": brand.id, "count": 0, "average": None}

    @pytest.mark.parametrize("rating", [0, 6, 3.5, "4", None, True])
    def test_rating_must_be_1_to_5(self, brand, customer_user, rating):
        with pytest.raises(ValidationError):
            review_service.create_review(customer_user.id, brand.id, rating)

    def test_owners_must_exist(self, brand, customer_user):
        with pytest.raises(ReferentialError):
            review_service.create_review(customer_user.id, 999, 4)
        with pytest.raises(ReferentialError):
            review_service.create_review(999, brand.id, 4)

    def test_newest_first(self, brand, customer_user):
        first = review_service.create_review(customer_user.id, brand.id, 4)
        second = review_service.create_review(customer_user.id, brand.id, 5)
        assert [r.id for r in review_service.list_reviews(brand.id)] == [second.id, first.id]

    def test_delete(self, brand, customer_user):
        review = review_service.create_review(customer_user.id, brand.id, 4)
        review_service.delete_review(review.id)
        with pytest.raises(NotFoundError):
            review_service.get_review(review.id)


class TestBrandDelete:
    def test_owned_content_is_gone(self, brand, brand_user, customer_user, qr_code):
        file_id = file_service.register_file(brand_user.id, brand.id, _image()).id
        review_id = review_service.create_review(customer_user.id, brand.id, 5).id
        page_id = qr_code.landing_page_id
        qr_id = qr_code.id

        brand_service.delete_brand(brand.id)

        with pytest.raises(NotFoundError):
            file_service.get_file(file_id)
        with pytest.raises(NotFoundError):
            review_service.get_review(review_id)
        with pytest.raises(NotFoundError):
            landing_page_service.get_landing_page(page_id)
        with pytest.raises(NotFoundError):
            qr_service.get_qr_code(qr_id)
