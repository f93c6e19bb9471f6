"""Seller reviews and rating aggregation."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ecofinds.db.postgres_client import PostgresConnection, db
from ecofinds.errors import DuplicateReview, NotEligibleToReview, NotFound
from ecofinds.models import Product, Purchase, Review
from ecofinds.models.views import ReviewView, SellerRating
from ecofinds.utils.validation import is_unique_violation, require_user, validate_rating

logger = logging.getLogger(__name__)


class ReviewService:
    def __init__(self, database: PostgresConnection | None = None):
        self.db = database or db

    @staticmethod
    def _find_review(session: Session, buyer_id: str, seller_id: str, product_id: int) -> int | None:
        return session.execute(
            select(Review.id).where(
                Review.buyer_id == buyer_id,
                Review.seller_id == seller_id,
                Review.product_id == product_id,
            )
        ).scalar_one_or_none()

    def submit_review(
        self,
        buyer_id: str | None,
        seller_id: str,
        product_id: int,
        rating: int,
        review_text: str = "",
    ) -> ReviewView:
        """
        Rate a seller for a product the buyer purchased from them.

        Args:
            buyer_id: Acting user ID
            seller_id: Seller being rated
            product_id: Purchased product the review is about
            rating: Integer from 1 to 5
            review_text: Free-text comment

        Returns:
            The stored review

        Raises:
            Unauthenticated: No acting user
            InvalidRating: Rating is not an integer in 1..5
            NotFound: The seller did not list this product
            NotEligibleToReview: The buyer never purchased this product
            DuplicateReview: The buyer already reviewed this seller for this product
        """
        require_user(buyer_id)
        validate_rating(rating)

        try:
            with self.db.session_scope() as session:
                self.db.ensure_user(session, buyer_id)

                product = session.get(Product, product_id)
                if product is None or product.user_id != seller_id:
                    raise NotFound("Product not found for this seller")

                if seller_id == buyer_id:
                    raise NotEligibleToReview("You cannot review yourself")

                purchased = session.execute(
                    select(Purchase.id).where(Purchase.user_id == buyer_id, Purchase.product_id == product_id).limit(1)
                ).first()
                if purchased is None:
                    logger.warning(f"User {buyer_id} tried to review product {product_id} without purchasing it")
                    raise NotEligibleToReview()

                if self._find_review(session, buyer_id, seller_id, product_id) is not None:
                    raise DuplicateReview()

                review = Review(
                    buyer_id=buyer_id,
                    seller_id=seller_id,
                    product_id=product_id,
                    rating=rating,
                    review_text=review_text,
                )
                session.add(review)
                session.flush()

                view = ReviewView.model_validate(review)

        except IntegrityError as e:
            if is_unique_violation(e):
                logger.warning(f"Duplicate review by {buyer_id} for seller {seller_id} caught by constraint")
                raise DuplicateReview() from e
            raise

        logger.info(f"User {buyer_id} rated seller {seller_id} {rating}/5 for product {product_id}")
        return view

    def seller_rating(self, seller_id: str) -> SellerRating:
        """Average all ratings the seller has received. Computed on every read, never cached."""
        with self.db.session_scope() as session:
            ratings = session.execute(select(Review.rating).where(Review.seller_id == seller_id)).scalars().all()

        if not ratings:
            return SellerRating(average=0.0, count=0)
        return SellerRating(average=sum(ratings) / len(ratings), count=len(ratings))

    def list_seller_reviews(self, seller_id: str) -> list[ReviewView]:
        with self.db.session_scope() as session:
            reviews = session.execute(
                select(Review).where(Review.seller_id == seller_id).order_by(Review.created_at.desc(), Review.id.desc())
            ).scalars()
            return [ReviewView.model_validate(review) for review in reviews]


# Singleton instance
review_service = ReviewService()
