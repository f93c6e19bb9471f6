"""Shopping cart management service backed by the cart_items table."""

import logging
import random
from decimal import Decimal

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ecofinds.db.postgres_client import PostgresConnection, db
from ecofinds.errors import DuplicateEntry, NotFound, SelfPurchaseForbidden
from ecofinds.models import CartItem, Product
from ecofinds.models.views import CartLine, CartView, ProductView
from ecofinds.utils.impact import total_co2_savings
from ecofinds.utils.validation import is_unique_violation, require_user

logger = logging.getLogger(__name__)


class ShoppingCartService:
    def __init__(self, database: PostgresConnection | None = None, rng: random.Random | None = None):
        self.db = database or db
        self.rng = rng

    @staticmethod
    def _find_entry(session: Session, user_id: str, product_id: int) -> int | None:
        return session.execute(
            select(CartItem.id).where(CartItem.user_id == user_id, CartItem.product_id == product_id)
        ).scalar_one_or_none()

    @staticmethod
    def _to_line(item: CartItem, product: Product) -> CartLine:
        return CartLine(id=item.id, product=ProductView.model_validate(product), added_at=item.created_at)

    def add_item(self, user_id: str | None, product_id: int) -> CartLine:
        """
        Add a product to the user's cart.

        Args:
            user_id: Acting user ID
            product_id: Product ID to add

        Returns:
            The new cart line with its product snapshot

        Raises:
            Unauthenticated: No acting user
            NotFound: Product does not exist or was taken down
            SelfPurchaseForbidden: The user owns the product
            DuplicateEntry: The product is already in the cart
        """
        require_user(user_id)

        try:
            with self.db.session_scope() as session:
                self.db.lock_user(session, user_id)

                product = session.get(Product, product_id)
                if product is None or product.deleted_at is not None:
                    raise NotFound("Product not found")

                if product.user_id == user_id:
                    logger.warning(f"User {user_id} tried to add own product {product_id} to cart")
                    raise SelfPurchaseForbidden()

                if self._find_entry(session, user_id, product_id) is not None:
                    raise DuplicateEntry()

                item = CartItem(user_id=user_id, product_id=product_id)
                session.add(item)
                # The unique (user_id, product_id) constraint fires here if a concurrent add won
                session.flush()

                line = self._to_line(item, product)

        except IntegrityError as e:
            if is_unique_violation(e):
                logger.warning(f"Duplicate cart entry for user {user_id}, product {product_id} caught by constraint")
                raise DuplicateEntry() from e
            raise

        logger.info(f"User {user_id} added product {product_id} to cart")
        return line

    def remove_item(self, user_id: str | None, cart_item_id: int) -> None:
        """
        Remove one entry from the user's cart.

        Raises NotFound when the entry is absent or belongs to someone else.
        """
        require_user(user_id)

        with self.db.session_scope() as session:
            self.db.lock_user(session, user_id)

            result = session.execute(
                delete(CartItem).where(CartItem.id == cart_item_id, CartItem.user_id == user_id)
            )
            if result.rowcount == 0:
                raise NotFound("Item not found in cart")

        logger.info(f"User {user_id} removed cart item {cart_item_id}")

    def list_items(self, user_id: str | None) -> list[CartLine]:
        """List cart entries in the order they were added, joined with current product data."""
        require_user(user_id)

        with self.db.session_scope() as session:
            rows = session.execute(
                select(CartItem, Product)
                .join(Product, CartItem.product_id == Product.id)
                .where(CartItem.user_id == user_id)
                .order_by(CartItem.id)
            ).all()
            return [self._to_line(item, product) for item, product in rows]

    def get_cart(self, user_id: str | None) -> CartView:
        """Get the user's cart with totals. Prices are read live, not frozen at add time."""
        lines = self.list_items(user_id)
        return CartView(
            items=lines,
            item_count=len(lines),
            total_price=sum((line.product.price for line in lines), Decimal("0")),
            co2_estimate=total_co2_savings((line.product.price for line in lines), self.rng),
        )

    def cart_count(self, user_id: str | None) -> int:
        """Count entries in the user's cart."""
        require_user(user_id)

        with self.db.session_scope() as session:
            return session.execute(
                select(func.count()).select_from(CartItem).where(CartItem.user_id == user_id)
            ).scalar_one()


# Singleton instance
shopping_cart_service = ShoppingCartService()
