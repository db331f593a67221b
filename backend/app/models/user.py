"""User model"""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String

from app.database import Base


class User(Base):
    """A registered platform user. Rows are never hard-deleted."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), unique=True, nullable=False, index=True)  # stored lower-cased
    password_hash = Column(String(255), nullable=False)                   # bcrypt
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email_verified = Column(Boolean, default=False, nullable=False)
    subscription_tier = Column(String(50), default="free", nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    last_login = Column(DateTime, nullable=True)
