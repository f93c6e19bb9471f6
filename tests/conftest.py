"""Shared fixtures: an in-memory SQLite engine standing in for PostgreSQL."""

from decimal import Decimal
from unittest.mock import Mock

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.pool import StaticPool

from ecofinds.db.postgres_client import PostgresConnection
from ecofinds.models import Product, User


@pytest.fixture
def fixed_rng():
    """Random source pinned to 0.0, for repeatable CO2 estimates."""
    rng = Mock()
    rng.random.return_value = 0.0
    return rng


@pytest.fixture
def database():
    engine = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    connection = PostgresConnection(engine=engine)
    connection.create_tables()
    yield connection
    engine.dispose()


@pytest.fixture
def users(database):
    with database.session_scope() as session:
        session.add_all(
            [
                User(id="U001", username="alice", email="alice@example.com"),
                User(id="U002", username="bob", email="bob@example.com"),
                User(id="U003", username="carol", email="carol@example.com"),
            ]
        )
    return ["U001", "U002", "U003"]


@pytest.fixture
def make_product(database, users):
    def _make_product(owner: str = "U001", title: str = "Bike", price: str = "50.00", category: str = "Other") -> int:
        with database.session_scope() as session:
            product = Product(user_id=owner, title=title, category=category, price=Decimal(price), image_url="bike.png")
            session.add(product)
            session.flush()
            return product.id

    return _make_product


@pytest.fixture
def count_rows(database):
    def _count_rows(model, **filters) -> int:
        with database.session_scope() as session:
            query = select(func.count()).select_from(model)
            for column, value in filters.items():
                query = query.where(getattr(model, column) == value)
            return session.execute(query).scalar_one()

    return _count_rows
