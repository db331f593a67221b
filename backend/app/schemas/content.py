"""Content response schemas"""
from typing import List, Optional

from pydantic import BaseModel


class ContentItem(BaseModel):
    id: str
    title: str
    body: str
    type: str
    category: Optional[str] = None
    difficulty: Optional[str] = None
    published: bool
    author: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    hasMore: bool


class ContentListResponse(BaseModel):
    success: bool = True
    data: List[ContentItem]
    pagination: Pagination


class ContentItemResponse(BaseModel):
    success: bool = True
    data: ContentItem
