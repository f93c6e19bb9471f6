"""
Users SQLAlchemy model.
"""

from sqlalchemy import Column, DateTime, String, func
from sqlalchemy.orm import relationship
from sqlalchemy.sql.schema import CheckConstraint

from ecofinds.db.postgres_bootstrap import Base


class User(Base):
    __tablename__ = "users"

    # Identity issued by the authentication provider
    id = Column(String, primary_key=True)
    # Defaults to the identity until the user sets a display name
    username = Column(String(80), nullable=False)
    # Unset for profiles provisioned on first request
    email = Column(String(255), CheckConstraint("email LIKE '%@%.%'"), unique=True, nullable=True)

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    products = relationship("Product", back_populates="owner")
    cart_items = relationship("CartItem", back_populates="user", cascade="all, delete-orphan")
    purchases = relationship("Purchase", back_populates="buyer")

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username}, email={self.email})>"
