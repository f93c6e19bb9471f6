"""User profiles, profile statistics and seller badges."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ecofinds.db.postgres_client import PostgresConnection, db
from ecofinds.errors import DuplicateEmail, InvalidProfile
from ecofinds.models import User
from ecofinds.models.views import ProfileStats, ProfileView
from ecofinds.services.purchase_service import PurchaseService, purchase_service
from ecofinds.services.review_service import ReviewService, review_service
from ecofinds.utils.validation import is_unique_violation, require_user, validate_email, validate_username

logger = logging.getLogger(__name__)


def seller_badge(avg_rating: float, total_sales: int) -> str | None:
    """Pick the seller's badge; the first matching tier wins."""
    if avg_rating >= 4.5 and total_sales >= 5:
        return "Eco Champion"
    if avg_rating >= 4.0 and total_sales >= 3:
        return "Green Seller"
    if total_sales >= 1:
        return "Eco Starter"
    return None


class ProfileService:
    def __init__(
        self,
        purchases: PurchaseService | None = None,
        reviews: ReviewService | None = None,
        database: PostgresConnection | None = None,
    ):
        self.purchases = purchases or purchase_service
        self.reviews = reviews or review_service
        self.db = database or db

    @staticmethod
    def _email_owner(session: Session, email: str) -> str | None:
        return session.execute(select(User.id).where(User.email == email)).scalar_one_or_none()

    def get_profile(self, user_id: str | None) -> ProfileView:
        """Get the user's profile, provisioning it on first access."""
        require_user(user_id)

        with self.db.session_scope() as session:
            self.db.ensure_user(session, user_id)
            user = session.execute(select(User).where(User.id == user_id)).scalar_one()
            return ProfileView.model_validate(user)

    def update_profile(
        self,
        user_id: str | None,
        username: str | None = None,
        email: str | None = None,
    ) -> ProfileView:
        """
        Change the user's display name and/or email.

        Args:
            user_id: Acting user ID
            username: New display name (optional)
            email: New email address, stored in lower case (optional)

        Raises:
            Unauthenticated: No acting user
            InvalidProfile: Nothing to change, blank username or malformed email
            DuplicateEmail: Another profile already uses the email
        """
        require_user(user_id)
        if username is None and email is None:
            raise InvalidProfile("Nothing to update")

        changes = {}
        if username is not None:
            changes["username"] = validate_username(username)
        if email is not None:
            changes["email"] = validate_email(email)

        try:
            with self.db.session_scope() as session:
                user = self.db.lock_user(session, user_id)

                if "email" in changes and self._email_owner(session, changes["email"]) not in (None, user_id):
                    raise DuplicateEmail()

                for field, value in changes.items():
                    setattr(user, field, value)
                session.flush()

                view = ProfileView.model_validate(user)

        except IntegrityError as e:
            if is_unique_violation(e):
                logger.warning(f"Email already taken for user {user_id}, caught by constraint")
                raise DuplicateEmail() from e
            raise

        logger.info(f"User {user_id} updated profile fields {sorted(changes)}")
        return view

    def get_stats(self, user_id: str | None) -> ProfileStats:
        """Aggregate the user's buying and selling activity."""
        require_user(user_id)

        history = self.purchases.list_purchases(user_id)
        total_sales = self.purchases.total_sales(user_id)
        rating = self.reviews.seller_rating(user_id)

        return ProfileStats(
            total_sales=total_sales,
            total_purchases=self.purchases.total_purchases(user_id),
            avg_rating=rating.average,
            total_reviews=rating.count,
            co2_saved=sum(purchase.co2_saved for purchase in history),
            badge=seller_badge(rating.average, total_sales),
        )


# Singleton instance
profile_service = ProfileService()
