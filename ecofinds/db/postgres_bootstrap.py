"""
Declarative base shared by all SQLAlchemy models.
Kept apart from the client module to prevent circular imports when creating the tables."""

from sqlalchemy.orm import declarative_base

Base = declarative_base()
