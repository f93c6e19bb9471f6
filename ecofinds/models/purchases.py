"""
Purchases SQLAlchemy model.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from ecofinds.db.postgres_bootstrap import Base


class Purchase(Base):
    """
    Purchase SQLAlchemy model. Rows are append-only and written by checkout.
    """

    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False, index=True)
    purchased_at = Column(DateTime, nullable=False, index=True)

    buyer = relationship("User", back_populates="purchases")
    product = relationship("Product")

    def __repr__(self):
        return f"<Purchase(id={self.id}, user_id={self.user_id}, product_id={self.product_id})>"
