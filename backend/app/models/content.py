"""Content model"""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text

from app.database import Base

CONTENT_TYPES = ("lesson", "tutorial", "glossary", "article")
DIFFICULTY_LEVELS = ("beginner", "intermediate", "advanced")


class Content(Base):
    """Educational content item, written by the seed/admin process and read-only over the API"""

    __tablename__ = "content"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    type = Column(String(20), nullable=False, index=True)                 # lesson, tutorial, glossary, article
    category = Column(String(100), nullable=True, index=True)
    difficulty_level = Column(String(20), nullable=True, index=True)     # beginner, intermediate, advanced
    published = Column(Boolean, default=False, nullable=False, index=True)
    author_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
