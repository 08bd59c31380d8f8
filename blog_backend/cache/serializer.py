"""Serialization of cache payloads.

Every value written to Redis is a JSON envelope tagged with the kind of payload
it holds:

    {"kind": "post_page", "data": {...}}

Readers state the kind they expect, so a value cached under the wrong key
(or left behind by an older deployment) is rejected instead of being handed to
a caller that assumes a different shape.

Special Type Handling:
    - datetime: UTC ISO-8601 with a ``Z`` suffix, the same form as nextCursor
    - date/time: Converted to ISO format strings
    - Decimal: Converted to float
    - UUID: Converted to string
    - set: Converted to list

Usage:
    from blog_backend.cache.serializer import CacheKind, serialize, deserialize

    raw = serialize({"id": 1, "title": "Hello"}, CacheKind.POST)
    post = deserialize(raw, CacheKind.POST)
"""

import json
import logging
from datetime import datetime, date, time
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Union
from uuid import UUID

from blog_backend.pagination import format_timestamp

logger = logging.getLogger(__name__)


class CacheKind(str, Enum):
    """Payload types that may be stored in the cache."""

    POST = "post"
    POST_PAGE = "post_page"
    DASHBOARD = "dashboard"
    HOME_DIGEST = "home_digest"
    COMMENT_PAGE = "comment_page"
    CATEGORY = "category"
    CATEGORY_LIST = "category_list"
    KNOWLEDGE = "knowledge"
    KNOWLEDGE_PAGE = "knowledge_page"
    SESSION = "session"
    REVOKED_TOKEN = "revoked_token"


class PayloadError(ValueError):
    """Raised when a cached payload cannot be decoded or has the wrong kind."""


def _json_default(obj: Any) -> Any:
    """
    Custom JSON encoder for special types.

    Args:
        obj: Object to encode

    Returns:
        JSON-serializable representation

    Raises:
        TypeError: If object type is not supported
    """
    if isinstance(obj, datetime):
        return format_timestamp(obj)

    if isinstance(obj, (date, time)):
        return obj.isoformat()

    if isinstance(obj, Decimal):
        return float(obj)

    if isinstance(obj, UUID):
        return str(obj)

    if isinstance(obj, set):
        return list(obj)

    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def serialize(data: Any, kind: CacheKind) -> str:
    """
    Wrap data in a tagged envelope and encode it as compact JSON.

    Args:
        data: Payload to cache
        kind: Payload type tag

    Returns:
        JSON string

    Raises:
        ValueError: If the payload is not JSON serializable
    """
    envelope = {"kind": CacheKind(kind).value, "data": data}
    try:
        return json.dumps(envelope, default=_json_default, separators=(",", ":"))
    except (TypeError, ValueError) as e:
        logger.error(f"JSON serialization failed: {e}", exc_info=True)
        raise ValueError(f"Failed to serialize to JSON: {e}")


def deserialize(raw: Union[str, bytes], kind: Optional[CacheKind] = None) -> Any:
    """
    Decode a tagged envelope and return its payload.

    Args:
        raw: JSON string or bytes read from Redis
        kind: Expected payload type; None accepts any known kind

    Returns:
        The unwrapped payload

    Raises:
        PayloadError: If the value is not valid JSON, is not an envelope, or
            carries a different kind than expected
    """
    try:
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        envelope = json.loads(raw)
    except (UnicodeDecodeError, ValueError) as e:
        raise PayloadError(f"Invalid JSON payload: {e}")

    if not isinstance(envelope, dict) or "kind" not in envelope or "data" not in envelope:
        raise PayloadError("Payload is not a cache envelope")

    try:
        found = CacheKind(envelope["kind"])
    except ValueError:
        raise PayloadError(f"Unknown payload kind: {envelope['kind']!r}")

    if kind is not None and found != CacheKind(kind):
        raise PayloadError(f"Expected {CacheKind(kind).value} payload, found {found.value}")

    return envelope["data"]


def to_jsonable(data: Any) -> Any:
    """Round-trip data through the cache encoding.

    Services return this form on a cache miss so that a hit and a miss produce
    identical structures.
    """
    return json.loads(json.dumps(data, default=_json_default))
