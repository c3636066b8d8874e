"""Product reviews: one per customer per product, purchasers only."""
from datetime import datetime, timezone
from typing import Dict, Optional

from sqlalchemy.orm import Session

from .errors import NotFoundError, PermissionDenied
from ..data.models import Order, OrderItem, Profile, ProductReview


class ReviewService:
    def __init__(self, db: Session):
        self.db = db

    def summary(self, product_name: str) -> Dict:
        rows = (self.db.query(ProductReview, Profile)
                .outerjoin(Profile, Profile.id == ProductReview.user_id)
                .filter(ProductReview.product_name == product_name)
                .order_by(ProductReview.created_at.desc(), ProductReview.id.desc())
                .all())
        reviews = [{
            "id": review.id,
            "user_id": review.user_id,
            "reviewer_name": profile.full_name if profile else None,
            "rating": review.rating,
            "comment": review.comment,
            "created_at": review.created_at,
        } for review, profile in rows]
        count = len(reviews)
        average = sum(r["rating"] for r in reviews) / count if count else 0.0
        return {"product_name": product_name, "average_rating": average,
                "review_count": count, "reviews": reviews}

    def has_purchased(self, user_id: str, product_name: str) -> bool:
        return (self.db.query(OrderItem.id)
                .join(Order, Order.id == OrderItem.order_id)
                .filter(Order.user_id == user_id, OrderItem.product_name == product_name)
                .first()) is not None

    def user_review(self, user_id: str, product_name: str) -> Optional[ProductReview]:
        return (self.db.query(ProductReview)
                .filter(ProductReview.user_id == user_id, ProductReview.product_name == product_name)
                .first())

    def submit(self, user_id: str, product_name: str, rating: int, comment: Optional[str]) -> str:
        """Create the customer's review or update the one they already wrote."""
        if not self.has_purchased(user_id, product_name):
            raise PermissionDenied("Only customers who bought this product can review it")
        review = self.user_review(user_id, product_name)
        if review is not None:
            review.rating = rating
            review.comment = comment
            review.updated_at = datetime.now(timezone.utc)
            message = "Review updated successfully"
        else:
            self.db.add(ProductReview(user_id=user_id, product_name=product_name,
                                      rating=rating, comment=comment))
            message = "Review submitted successfully"
        self.db.commit()
        return message

    def delete(self, user_id: str, product_name: str) -> str:
        review = self.user_review(user_id, product_name)
        if review is None:
            raise NotFoundError("No review to delete")
        self.db.delete(review)
        self.db.commit()
        return "Review deleted successfully"
