"""Checkout: converts a user's cart into purchases in a single transaction."""

import logging
import random
from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ecofinds.db.postgres_client import PostgresConnection, db
from ecofinds.errors import CheckoutFailed
from ecofinds.models import CartItem, Product, Purchase
from ecofinds.models.views import CheckoutResult, ProductView, PurchaseView
from ecofinds.utils.impact import estimate_co2_savings
from ecofinds.utils.validation import require_user

logger = logging.getLogger(__name__)


class CheckoutService:
    def __init__(self, database: PostgresConnection | None = None, rng: random.Random | None = None):
        self.db = database or db
        self.rng = rng

    @staticmethod
    def _clear_cart(session: Session, user_id: str) -> int:
        result = session.execute(delete(CartItem).where(CartItem.user_id == user_id))
        return result.rowcount

    def checkout(self, user_id: str | None) -> CheckoutResult:
        """
        Convert cart to purchases and clear cart.

        The user's row lock is held from reading the cart until the commit, so
        a concurrent checkout or cart change for the same user waits and then
        sees the cleared cart. Purchases and the cart clear commit together or
        not at all.

        Args:
            user_id: Acting user ID

        Returns:
            Created purchases with their CO2 estimates; empty when the cart was empty

        Raises:
            Unauthenticated: No acting user
            CheckoutFailed: The transaction was rolled back
        """
        require_user(user_id)

        try:
            with self.db.session_scope() as session:
                self.db.lock_user(session, user_id)

                rows = session.execute(
                    select(CartItem, Product)
                    .join(Product, CartItem.product_id == Product.id)
                    .where(CartItem.user_id == user_id)
                    .order_by(CartItem.id)
                ).all()

                if not rows:
                    logger.info(f"Checkout for user {user_id}: cart is empty, nothing to do")
                    return CheckoutResult()

                purchased_at = datetime.now()
                purchases = [
                    Purchase(user_id=user_id, product_id=product.id, purchased_at=purchased_at)
                    for _, product in rows
                ]
                session.add_all(purchases)
                session.flush()

                cleared = self._clear_cart(session, user_id)
                if cleared != len(rows):
                    raise CheckoutFailed(f"Cart changed during checkout ({cleared} of {len(rows)} items cleared)")

                views = [
                    PurchaseView(
                        id=purchase.id,
                        purchased_at=purchase.purchased_at,
                        product=ProductView.model_validate(product),
                        co2_saved=estimate_co2_savings(product.price, self.rng),
                    )
                    for purchase, (_, product) in zip(purchases, rows)
                ]

        except CheckoutFailed as e:
            logger.error(f"Checkout rolled back for user {user_id}: {e}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"Checkout rolled back for user {user_id}: {e}")
            raise CheckoutFailed() from e

        result = CheckoutResult(
            purchases=views,
            total_price=sum((view.product.price for view in views), Decimal("0")),
            total_co2_saved=sum(view.co2_saved for view in views),
        )
        logger.info(f"User {user_id} checked out {len(views)} items, ~{result.total_co2_saved}kg CO2 saved")
        return result


# Singleton instance
checkout_service = CheckoutService()
