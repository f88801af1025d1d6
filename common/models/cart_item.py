from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import relationship
from .base import Base, utcnow


class CartItem(Base):
    __tablename__ = "cart_item"

    id = Column(String(36), primary_key=True)
    cart_id = Column(String(36), ForeignKey("cart.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(String(36), ForeignKey("product.id"), nullable=True)
    # snapshot taken when the line is added
    product_name = Column(String(255), nullable=False)
    product_description = Column(Text, nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    flat_fees = Column(Numeric(12, 2), nullable=False, default=0)
    total_price = Column(Numeric(12, 2), nullable=False)
    selected_specs = Column(JSON, nullable=True)
    custom_dimensions = Column(JSON, nullable=True)
    artwork_url = Column(String(1024), nullable=True)
    # python-side default keeps sub-second ordering for display
    added_at = Column(DateTime, nullable=False, default=utcnow)

    cart = relationship("Cart", back_populates="items")
