"""Read side of the purchase ledger: history and sales statistics."""

import logging
import random

from sqlalchemy import func, select

from ecofinds.db.postgres_client import PostgresConnection, db
from ecofinds.models import Product, Purchase
from ecofinds.models.views import ProductView, PurchaseView
from ecofinds.utils.impact import estimate_co2_savings
from ecofinds.utils.validation import require_user

logger = logging.getLogger(__name__)


class PurchaseService:
    def __init__(self, database: PostgresConnection | None = None, rng: random.Random | None = None):
        self.db = database or db
        self.rng = rng

    def list_purchases(self, user_id: str | None) -> list[PurchaseView]:
        """Get the user's purchase history, newest first."""
        require_user(user_id)

        with self.db.session_scope() as session:
            rows = session.execute(
                select(Purchase, Product)
                .join(Product, Purchase.product_id == Product.id)
                .where(Purchase.user_id == user_id)
                .order_by(Purchase.purchased_at.desc(), Purchase.id.desc())
            ).all()

            return [
                PurchaseView(
                    id=purchase.id,
                    purchased_at=purchase.purchased_at,
                    product=ProductView.model_validate(product),
                    co2_saved=estimate_co2_savings(product.price, self.rng),
                )
                for purchase, product in rows
            ]

    def total_purchases(self, user_id: str) -> int:
        with self.db.session_scope() as session:
            return session.execute(
                select(func.count()).select_from(Purchase).where(Purchase.user_id == user_id)
            ).scalar_one()

    def total_sales(self, user_id: str) -> int:
        """Count purchases of products the user listed."""
        with self.db.session_scope() as session:
            return session.execute(
                select(func.count())
                .select_from(Purchase)
                .join(Product, Purchase.product_id == Product.id)
                .where(Product.user_id == user_id)
            ).scalar_one()


# Singleton instance
purchase_service = PurchaseService()
