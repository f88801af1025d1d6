from sqlalchemy import Column, DateTime, String, func
from .base import Base


class AdminUser(Base):
    __tablename__ = "admin_user"

    id = Column(String(36), primary_key=True)
    user_id = Column(String(128), nullable=False, unique=True)
    role = Column(String(32), nullable=False, default="admin")
    created_at = Column(DateTime, nullable=False, server_default=func.now())
