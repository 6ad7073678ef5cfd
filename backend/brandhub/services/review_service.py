from __future__ import annotations

from sqlalchemy import func

from ..attachments import parse_attachment
from ..errors import NotFoundError, ReferentialError, ValidationError
from ..extensions import db
from ..models import Brand, Review, User
from ..validation import validate_rating
from .concurrency import store_transaction


def create_review(user_id: int, brand_id: int, rating, comment=None, images=None) -> Review:
    rating = validate_rating(rating)
    if comment is not None:
        if not isinstance(comment, str):
            raise ValidationError("comment must be a string")
        comment = comment.strip() or None

    if db.session.get(User, user_id) is None:
        raise ReferentialError("Reviewing user does not exist")
    if db.session.get(Brand, brand_id) is None:
        raise ReferentialError("Reviewed brand does not exist")

    review = Review(
        user_id=user_id,
        brand_id=brand_id,
        rating=rating,
        comment=comment,
        images=parse_attachment("images", images) or [],
    )
    with store_transaction() as session:
        session.add(review)
    return review


def get_review(review_id: int) -> Review:
    review = db.session.get(Review, review_id)
    if review is None:
        raise NotFoundError("Review not found")
    return review


def list_reviews(brand_id: int) -> list[Review]:
    """Newest first; reviews written in the same instant fall back to id order."""
    return (
        db.session.query(Review)
        .filter(Review.brand_id == brand_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .all()
    )


def delete_review(review_id: int) -> None:
    review = get_review(review_id)
    with store_transaction() as session:
        session.delete(review)


def brand_rating_summary(brand_id: int) -> dict:
    count, average = (
        db.session.query(func.count(Review.id), func.avg(Review.rating))
        .filter(Review.brand_id == brand_id)
        .one()
    )
    return {
        "brand_id": brand_id,
        "count": int(count or 0),
        "average": round(float(average), 2) if average is not None else None,
    }
