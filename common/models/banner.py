from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text, func
from .base import Base, utcnow


class Banner(Base):
    """Hero banner on the storefront home page."""
    __tablename__ = "banner"

    id = Column(String(36), primary_key=True)
    title = Column(String(255), nullable=False)
    subtitle = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    button_text = Column(String(64), nullable=True)
    link_url = Column(String(512), nullable=True)
    image_url = Column(String(1024), nullable=True)
    image_dimensions = Column(String(32), nullable=True)  # "1920x1080"
    position = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())


class FlashBanner(Base):
    """Thin promotional strip shown above the header."""
    __tablename__ = "flash_banner"

    id = Column(String(36), primary_key=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    link_url = Column(String(512), nullable=True)
    background_color = Column(String(32), nullable=True)
    text_color = Column(String(32), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())
