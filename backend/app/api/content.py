"""Educational content endpoints"""
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from app.api.deps import get_content_service, optional_user
from app.middleware.monitoring import record_content_request
from app.middleware.rate_limit import api_rate_limit
from app.schemas.content import ContentItemResponse, ContentListResponse
from app.services import AuthContext, ContentService

router = APIRouter(prefix="/api/content", tags=["content"])


@router.get("", response_model=ContentListResponse)
@api_rate_limit
def list_content(
    request: Request,
    type: Optional[str] = Query(None, description="lesson | tutorial | glossary | article"),
    category: Optional[str] = Query(None),
    difficulty: Optional[str] = Query(None, description="beginner | intermediate | advanced"),
    published: Optional[bool] = Query(None),
    limit: int = Query(20, description="Page size, clamped to 1..100"),
    offset: int = Query(0, description="Number of items to skip"),
    viewer: AuthContext = Depends(optional_user),
    content_service: ContentService = Depends(get_content_service),
):
    """
    List content, newest first

    Responses are cached for 5 minutes per distinct filter set.
    """
    record_content_request("list", viewer.is_authenticated)
    return content_service.list_content(
        type=type,
        category=category,
        difficulty=difficulty,
        published=published,
        limit=limit,
        offset=offset,
    )


@router.get("/{content_id}", response_model=ContentItemResponse)
@api_rate_limit
def get_content(
    request: Request,
    content_id: str,
    viewer: AuthContext = Depends(optional_user),
    content_service: ContentService = Depends(get_content_service),
):
    """Get a single content item; cached for 10 minutes"""
    record_content_request("item", viewer.is_authenticated)
    return content_service.get_content(content_id)
