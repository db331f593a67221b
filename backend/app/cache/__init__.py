"""Redis cache gateway and key helpers"""
from app.cache.gateway import CacheGateway, ReconnectPolicy
from app.cache.keys import blacklist_key, canonical_params, content_item_key, content_list_key

__all__ = [
    "CacheGateway",
    "ReconnectPolicy",
    "blacklist_key",
    "canonical_params",
    "content_item_key",
    "content_list_key",
]
