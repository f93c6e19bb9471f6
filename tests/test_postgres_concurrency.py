"""
Concurrent cart and checkout tests against a real PostgreSQL server.

SQLite ignores SELECT ... FOR UPDATE, so per-user serialization can only be
observed on PostgreSQL. Point TEST_DATABASE_URL at a throwaway database to run
these; its tables are dropped before and after each test.
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from sqlalchemy import create_engine, func, select

from ecofinds.db.postgres_bootstrap import Base
from ecofinds.db.postgres_client import PostgresConnection
from ecofinds.errors import DuplicateEntry, MarketplaceError
from ecofinds.models import CartItem, Product, Purchase, User
from ecofinds.services.checkout_service import CheckoutService
from ecofinds.services.shopping_cart_service import ShoppingCartService

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL")

pytestmark = [
    pytest.mark.postgres,
    pytest.mark.skipif(not TEST_DATABASE_URL, reason="TEST_DATABASE_URL is not set"),
]


def run_concurrently(*calls):
    """Start every call at the same moment; return results or raised marketplace errors in order."""
    barrier = threading.Barrier(len(calls))

    def run(call):
        barrier.wait()
        try:
            return call()
        except MarketplaceError as e:
            return e

    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(run, call) for call in calls]
        return [future.result() for future in futures]


@pytest.fixture
def pg_database():
    engine = create_engine(TEST_DATABASE_URL, pool_size=10)
    Base.metadata.drop_all(engine)
    connection = PostgresConnection(engine=engine)
    connection.create_tables()
    yield connection
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def seeded(pg_database):
    """U001 sells three products; U002 has all of them in the cart."""
    with pg_database.session_scope() as session:
        session.add_all(
            [
                User(id="U001", username="alice", email="alice@example.com"),
                User(id="U002", username="bob", email="bob@example.com"),
            ]
        )
        session.flush()
        products = [
            Product(user_id="U001", title=title, category="Other", price=Decimal("10.00"))
            for title in ("Bike", "Lamp", "Desk")
        ]
        session.add_all(products)
        session.flush()
        session.add_all([CartItem(user_id="U002", product_id=product.id) for product in products])
        product_ids = [product.id for product in products]
    return product_ids


def count(database, model, **filters) -> int:
    with database.session_scope() as session:
        query = select(func.count()).select_from(model)
        for column, value in filters.items():
            query = query.where(getattr(model, column) == value)
        return session.execute(query).scalar_one()


class TestConcurrentCheckout:
    def test_double_checkout_buys_each_item_once(self, pg_database, seeded):
        """Test two simultaneous checkouts of one cart produce N purchases, not 2N."""
        checkout_service = CheckoutService(pg_database)

        results = run_concurrently(
            lambda: checkout_service.checkout("U002"),
            lambda: checkout_service.checkout("U002"),
        )

        assert sorted(len(result.purchases) for result in results) == [0, 3]
        assert count(pg_database, Purchase, user_id="U002") == 3
        assert count(pg_database, CartItem, user_id="U002") == 0

    def test_checkouts_of_different_users_both_succeed(self, pg_database, seeded):
        ShoppingCartService(pg_database).add_item("U003", seeded[0])
        checkout_service = CheckoutService(pg_database)

        results = run_concurrently(
            lambda: checkout_service.checkout("U002"),
            lambda: checkout_service.checkout("U003"),
        )

        assert [len(result.purchases) for result in results] == [3, 1]
        assert count(pg_database, Purchase) == 4


class TestConcurrentCart:
    def test_simultaneous_adds_of_same_product(self, pg_database, seeded):
        cart_service = ShoppingCartService(pg_database)
        CheckoutService(pg_database).checkout("U002")

        results = run_concurrently(
            lambda: cart_service.add_item("U002", seeded[0]),
            lambda: cart_service.add_item("U002", seeded[0]),
        )

        assert sum(isinstance(result, DuplicateEntry) for result in results) == 1
        assert count(pg_database, CartItem, user_id="U002") == 1

    def test_first_requests_of_new_identity_race(self, pg_database, seeded):
        """Test two first requests of one identity both provision-and-add without a conflict."""
        cart_service = ShoppingCartService(pg_database)

        results = run_concurrently(
            lambda: cart_service.add_item("U050", seeded[0]),
            lambda: cart_service.add_item("U050", seeded[1]),
        )

        assert not any(isinstance(result, MarketplaceError) for result in results)
        assert count(pg_database, User, id="U050") == 1
        assert count(pg_database, CartItem, user_id="U050") == 2
