"""
Products SQLAlchemy model.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import relationship
from sqlalchemy.sql.schema import CheckConstraint

from ecofinds.config import DEFAULT_IMAGE_URL
from ecofinds.db.postgres_bootstrap import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # The seller; never reassigned after the listing is created
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(120), nullable=False, index=True)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False, index=True)
    price = Column(Numeric(10, 2), CheckConstraint("price >= 0"), nullable=False)
    image_url = Column(String(255), nullable=False, default=DEFAULT_IMAGE_URL)

    created_at = Column(DateTime, nullable=False, server_default=func.now(), index=True)

    # Set when the seller takes the listing down; the row stays for purchase history
    deleted_at = Column(DateTime, nullable=True)

    owner = relationship("User", back_populates="products")

    def __repr__(self):
        return f"<Product(id={self.id}, title={self.title}, category={self.category}, price={self.price}, user_id={self.user_id})>"
