"""Database models"""
from app.models.content import CONTENT_TYPES, DIFFICULTY_LEVELS, Content
from app.models.user import User

__all__ = ["CONTENT_TYPES", "DIFFICULTY_LEVELS", "Content", "User"]
