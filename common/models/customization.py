"""
Product customization models.
An axis is one dimension of choice (paper type, size, finishing) and each
option on it carries a price delta applied per unit.
"""
from sqlalchemy import Column, String, Integer, ForeignKey, Numeric, UniqueConstraint, func, DateTime
from sqlalchemy.orm import relationship
from .base import Base


class CustomizationAxis(Base):
    """A customization dimension, e.g. Paper Type."""
    __tablename__ = "customization_axis"
    __table_args__ = (UniqueConstraint("product_id", "axis_type", name="uq_axis_product_type"),)

    id = Column(String(36), primary_key=True)
    product_id = Column(String(36), ForeignKey("product.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(128), nullable=False)  # display name, e.g. "Paper Type"
    axis_type = Column(String(64), nullable=False)  # lookup key, e.g. "paper"
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    product = relationship("Product", back_populates="axes")
    options = relationship(
        "CustomizationOption",
        back_populates="axis",
        cascade="all, delete-orphan",
        order_by="CustomizationOption.sort_order",
    )

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "name": self.name,
            "type": self.axis_type,
            "sort_order": self.sort_order,
            "options": [o.to_dict() for o in sorted(self.options, key=lambda x: x.sort_order)],
        }


class CustomizationOption(Base):
    """One choice on an axis, e.g. 600gsm (+3000)."""
    __tablename__ = "customization_option"

    id = Column(String(36), primary_key=True)
    axis_id = Column(String(36), ForeignKey("customization_axis.id", ondelete="CASCADE"), nullable=False)
    value = Column(String(128), nullable=False)
    label = Column(String(255), nullable=False)
    price_delta = Column(Numeric(12, 2), nullable=False, default=0)  # may be negative
    sort_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, server_default=func.now())

    axis = relationship("CustomizationAxis", back_populates="options")

    def to_dict(self):
        return {
            "id": self.id,
            "axis_id": self.axis_id,
            "value": self.value,
            "label": self.label,
            "price_delta": float(self.price_delta or 0),
            "sort_order": self.sort_order,
        }
