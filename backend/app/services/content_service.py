"""Content listing and retrieval with a cache-aside read path.

Responses are cached whole, keyed by the normalized filter set (lists) or the
content id (items). There is no invalidation on write: an entry may be stale
for up to its TTL.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import func

from app.cache import CacheGateway, content_item_key, content_list_key
from app.config import settings
from app.database import Database
from app.errors import NotFoundError, ValidationError
from app.middleware.monitoring import record_cache_lookup
from app.models.content import CONTENT_TYPES, DIFFICULTY_LEVELS, Content
from app.models.user import User
from app.utils.logger import logger

DEFAULT_LIMIT = 20
MAX_LIMIT = 100

_TRUE_VALUES = {"true", "1", "yes"}
_FALSE_VALUES = {"false", "0", "no"}


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _author_name(first_name: Optional[str], last_name: Optional[str]) -> Optional[str]:
    parts = [part for part in (first_name, last_name) if part]
    return " ".join(parts) or None


def serialize_content(content: Content, author_first: Optional[str], author_last: Optional[str]) -> Dict[str, Any]:
    """Shape a content row for the API; identical for list and item responses"""
    return {
        "id": content.id,
        "title": content.title,
        "body": content.body,
        "type": content.type,
        "category": content.category,
        "difficulty": content.difficulty_level,
        "published": content.published,
        "author": _author_name(author_first, author_last),
        "createdAt": _isoformat(content.created_at),
        "updatedAt": _isoformat(content.updated_at),
    }


def _parse_int(name: str, value: Any, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be an integer")


def _parse_bool(value: Any) -> Optional[bool]:
    if value is None or isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValidationError("published must be a boolean")


def normalize_filters(
    type: Optional[str] = None,
    category: Optional[str] = None,
    difficulty: Optional[str] = None,
    published: Any = None,
    limit: Any = None,
    offset: Any = None,
) -> Dict[str, Any]:
    """Validate list filters and fill in pagination defaults.

    ``limit`` is clamped into [1, 100]; a negative ``offset`` is rejected.
    """
    if type is not None and type not in CONTENT_TYPES:
        raise ValidationError(f"type must be one of [{', '.join(CONTENT_TYPES)}]")
    if difficulty is not None and difficulty not in DIFFICULTY_LEVELS:
        raise ValidationError(f"difficulty must be one of [{', '.join(DIFFICULTY_LEVELS)}]")
    if category is not None:
        category = category.strip() or None

    limit = min(max(_parse_int("limit", limit, DEFAULT_LIMIT), 1), MAX_LIMIT)
    offset = _parse_int("offset", offset, 0)
    if offset < 0:
        raise ValidationError("offset must be greater than or equal to 0")

    return {
        "type": type,
        "category": category,
        "difficulty": difficulty,
        "published": _parse_bool(published),
        "limit": limit,
        "offset": offset,
    }


class ContentService:
    def __init__(
        self,
        database: Database,
        cache: CacheGateway,
        list_ttl: Optional[int] = None,
        item_ttl: Optional[int] = None,
    ):
        self.database = database
        self.cache = cache
        self.list_ttl = list_ttl or settings.CONTENT_LIST_TTL
        self.item_ttl = item_ttl or settings.CONTENT_ITEM_TTL

    def list_content(self, **filters: Any) -> Dict[str, Any]:
        """Filtered, paginated content, newest first"""
        params = normalize_filters(**filters)
        cache_key = content_list_key(params)

        cached = self.cache.get(cache_key)
        record_cache_lookup("list", cached is not None)
        if cached is not None:
            logger.debug("Content list cache hit", extra={"cache_key": cache_key})
            return cached

        with self.database.session() as session:
            rows = (
                self._apply_filters(
                    session.query(Content, User.first_name, User.last_name)
                    .outerjoin(User, Content.author_id == User.id),
                    params,
                )
                .order_by(Content.created_at.desc())
                .limit(params["limit"])
                .offset(params["offset"])
                .all()
            )
            total = self._apply_filters(session.query(func.count(Content.id)), params).scalar() or 0
            data = [serialize_content(content, first, last) for content, first, last in rows]

        response = {
            "success": True,
            "data": data,
            "pagination": {
                "total": total,
                "limit": params["limit"],
                "offset": params["offset"],
                "hasMore": params["offset"] + params["limit"] < total,
            },
        }

        self.cache.set(cache_key, response, self.list_ttl)
        return response

    def get_content(self, content_id: str) -> Dict[str, Any]:
        cache_key = content_item_key(content_id)

        cached = self.cache.get(cache_key)
        record_cache_lookup("item", cached is not None)
        if cached is not None:
            logger.debug("Content item cache hit", extra={"cache_key": cache_key})
            return cached

        with self.database.session() as session:
            row = (
                session.query(Content, User.first_name, User.last_name)
                .outerjoin(User, Content.author_id == User.id)
                .filter(Content.id == content_id)
                .first()
            )
            if row is None:
                raise NotFoundError("Content not found")
            content, first, last = row
            response = {"success": True, "data": serialize_content(content, first, last)}

        self.cache.set(cache_key, response, self.item_ttl)
        return response

    @staticmethod
    def _apply_filters(query, params: Dict[str, Any]):
        if params["type"] is not None:
            query = query.filter(Content.type == params["type"])
        if params["category"] is not None:
            query = query.filter(Content.category == params["category"])
        if params["difficulty"] is not None:
            query = query.filter(Content.difficulty_level == params["difficulty"])
        if params["published"] is not None:
            query = query.filter(Content.published == params["published"])
        return query
