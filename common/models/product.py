from sqlalchemy import Boolean, Column, DateTime, Integer, JSON, Numeric, String, Text, func
from sqlalchemy.orm import relationship
from .base import Base, utcnow


class Product(Base):
    __tablename__ = "product"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=False)
    category = Column(String(128), nullable=True)
    description = Column(Text, nullable=True)
    base_price = Column(Numeric(12, 2), nullable=False, default=0)
    image_url = Column(String(512), nullable=True)
    default_quantity = Column(Integer, nullable=False, default=100)
    # {"kind": "area_based" | "tiered_package" | "per_unit_catalog", ...}
    pricing_model = Column(JSON, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    axes = relationship(
        "CustomizationAxis",
        back_populates="product",
        cascade="all, delete-orphan",
        order_by="CustomizationAxis.sort_order",
    )
