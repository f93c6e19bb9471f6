"""PostgreSQL connection and transaction utilities."""

import logging
from contextlib import contextmanager

import psycopg2
from psycopg2.extras import RealDictCursor
from sqlalchemy import create_engine, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session, sessionmaker

from ecofinds.config import DATABASE_URL, POSTGRES_CONFIG
from ecofinds.db.postgres_bootstrap import Base
from ecofinds.errors import Unauthenticated
from ecofinds.models import *  # Needed for Base metadata

logger = logging.getLogger(__name__)


class PostgresConnection:
    def __init__(self, config: dict | None = None, engine=None):
        self.config = config or POSTGRES_CONFIG
        self._engine = engine
        self._session_factory = None

    @property
    def engine(self):
        if not self._engine:
            db_url = DATABASE_URL or (
                f"postgresql+psycopg2://{self.config['user']}:{self.config['password']}@"
                f"{self.config['host']}:{self.config['port']}/{self.config['database']}"
            )
            self._engine = create_engine(db_url)
        return self._engine

    @property
    def session_factory(self):
        if not self._session_factory:
            self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)
        return self._session_factory

    @contextmanager
    def session_scope(self):
        """Run the enclosed block as one transaction: commit all writes or none."""
        session = self.session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    @staticmethod
    def ensure_user(session: Session, user_id: str | None) -> None:
        """
        Create the profile row for an authenticated identity on its first write.

        The identity comes from the authentication gateway, which knows nothing
        about this database, so the row is inserted with ON CONFLICT DO NOTHING
        and two first requests racing each other both succeed.
        """
        if not user_id:
            raise Unauthenticated()

        insert = sqlite_insert if session.get_bind().dialect.name == "sqlite" else pg_insert
        result = session.execute(
            insert(User).values(id=user_id, username=user_id).on_conflict_do_nothing(index_elements=["id"])
        )
        if result.rowcount:
            logger.info(f"Provisioned profile for user {user_id}")

    @staticmethod
    def lock_user(session: Session, user_id: str | None) -> User:
        """
        Lock the acting user's row for the rest of the transaction.

        Every cart mutation and checkout for a user takes this lock first, so
        they run one at a time per user while different users never block
        each other. A first-time identity gets its row provisioned before the lock.
        """
        PostgresConnection.ensure_user(session, user_id)
        return session.execute(select(User).where(User.id == user_id).with_for_update()).scalar_one()

    @contextmanager
    def get_cursor(self):
        """Get a database cursor for raw SQL queries, on the same database as the engine."""
        url = self.engine.url
        conn = psycopg2.connect(
            host=url.host,
            port=url.port,
            dbname=url.database,
            user=url.username,
            password=url.password,
        )
        try:
            with conn.cursor(cursor_factory=RealDictCursor) as cursor:
                yield cursor
                conn.commit()
        except Exception as e:
            conn.rollback()
            raise e
        finally:
            conn.close()

    def create_tables(self):
        """Create all tables in the database."""
        logger.log(logging.INFO, "Creating tables...")

        try:
            Base.metadata.create_all(self.engine)
            logger.log(logging.INFO, "Tables created successfully.")
        except Exception as e:
            logger.log(logging.ERROR, f"Error creating tables: {e}")
            raise e


# Singleton instance
db = PostgresConnection()
