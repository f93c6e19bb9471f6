"""Product catalog: listing creation, removal and the browse feed."""

import logging
from datetime import datetime
from decimal import Decimal

from sqlalchemy import delete, select

from ecofinds.config import DEFAULT_IMAGE_URL
from ecofinds.db.postgres_client import PostgresConnection, db
from ecofinds.errors import InvalidListing, NotFound
from ecofinds.models import CartItem, Product
from ecofinds.models.views import ProductView
from ecofinds.utils.validation import require_user, validate_category, validate_price

logger = logging.getLogger(__name__)


class ProductCatalogService:
    def __init__(self, database: PostgresConnection | None = None):
        self.db = database or db

    def create_listing(
        self,
        user_id: str | None,
        title: str,
        category: str,
        price: Decimal | float | str,
        description: str | None = None,
        image_url: str | None = None,
    ) -> ProductView:
        """
        List a product for sale. The acting user becomes its seller.

        Raises:
            Unauthenticated: No acting user
            InvalidListing: Empty title, unknown category or a price out of range
        """
        require_user(user_id)

        title = (title or "").strip()
        if not title:
            raise InvalidListing("Title is required")

        product = Product(
            user_id=user_id,
            title=title,
            description=description,
            category=validate_category(category),
            price=validate_price(price),
            image_url=image_url or DEFAULT_IMAGE_URL,
        )

        with self.db.session_scope() as session:
            self.db.ensure_user(session, user_id)

            session.add(product)
            session.flush()
            view = ProductView.model_validate(product)

        logger.info(f"User {user_id} listed product {view.id} ({view.title})")
        return view

    def delete_listing(self, user_id: str | None, product_id: int) -> None:
        """
        Take one of the user's listings off the market.

        The product row stays so purchases and reviews of it keep their
        history; it leaves the feed and every cart it was sitting in.

        Raises:
            Unauthenticated: No acting user
            NotFound: No live listing with this id belongs to the user
        """
        require_user(user_id)

        with self.db.session_scope() as session:
            product = session.execute(
                select(Product)
                .where(Product.id == product_id, Product.user_id == user_id, Product.deleted_at.is_(None))
                .with_for_update()
            ).scalar_one_or_none()
            if product is None:
                raise NotFound("Product not found")

            product.deleted_at = datetime.now()
            dropped = session.execute(delete(CartItem).where(CartItem.product_id == product_id)).rowcount

        logger.info(f"User {user_id} deleted listing {product_id}, removed from {dropped} cart(s)")

    def get_product(self, product_id: int) -> ProductView:
        with self.db.session_scope() as session:
            product = session.get(Product, product_id)
            if product is None or product.deleted_at is not None:
                raise NotFound("Product not found")
            return ProductView.model_validate(product)

    def list_feed(self, category: str | None = None, search: str | None = None) -> list[ProductView]:
        """
        Browse listings, newest first.

        Args:
            category: Exact category filter (optional)
            search: Case-insensitive title substring (optional)
        """
        query = select(Product).where(Product.deleted_at.is_(None))
        if category:
            query = query.where(Product.category == category)
        if search:
            query = query.where(Product.title.ilike(f"%{search}%"))

        with self.db.session_scope() as session:
            products = session.execute(query.order_by(Product.created_at.desc(), Product.id.desc())).scalars()
            return [ProductView.model_validate(product) for product in products]

    def list_user_listings(self, user_id: str) -> list[ProductView]:
        """The seller's live listings, newest first."""
        with self.db.session_scope() as session:
            products = session.execute(
                select(Product)
                .where(Product.user_id == user_id, Product.deleted_at.is_(None))
                .order_by(Product.created_at.desc(), Product.id.desc())
            ).scalars()
            return [ProductView.model_validate(product) for product in products]


# Singleton instance
product_catalog_service = ProductCatalogService()
