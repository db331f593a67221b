"""Cache key construction"""
import json
from typing import Any, Mapping


def canonical_params(params: Mapping[str, Any]) -> str:
    """Deterministic encoding of a filter mapping.

    Unset (None) entries are dropped and keys are sorted, so the same filter
    set always produces the same string whatever order it was built in.
    """
    present = {name: value for name, value in params.items() if value is not None}
    return json.dumps(present, sort_keys=True, separators=(",", ":"))


def content_list_key(filters: Mapping[str, Any]) -> str:
    return f"content:list:{canonical_params(filters)}"


def content_item_key(content_id: str) -> str:
    return f"content:{content_id}"


def blacklist_key(token: str) -> str:
    return f"blacklist:{token}"
