"""Cache key builders.

Key Naming Convention:
    - Colons (:) separate namespaces
    - Format: {resource}:{qualifier}:...
    - Every parameter that changes a query's result is part of its key, and
      nothing else is: two requests share a key exactly when they would
      return the same rows from an unchanged store. A client asking for
      limit=5 must never receive a cached limit=20 page.

Key Layout:
    posts:list:{category|all}:cursor:{cursor|first}:{id|first}:{limit}
    posts:search:{term}:cursor:{cursor|first}:{id|first}:{limit}
    posts:dashboard
    posts:home
    post:{id}
    comments:{post_id}:cursor:{cursor|first}:{id|first}:{limit}
    categories
    categories:{id}
    knowledge:cursor:{cursor|first}:{id|first}:{limit}
    knowledge:{id}
    session:user:{user_id}
    blacklist:token:{jti}

Every list and aggregate over posts lives under ``posts:``, so one prefix
deletion clears them all after a post mutation. The single-post key uses the
separate ``post:`` namespace so a view increment can drop it without touching
any list.

Filter values are normalised (trimmed, lower-cased) before they reach either
the key or the query, then URL-quoted in the key so user text containing ':'
cannot collide with another key's layout.

Usage:
    from blog_backend.cache.keys import post_list_key

    key = post_list_key(category="Sports", cursor=None, limit=10)
    # Returns: "posts:list:sports:cursor:first:first:10"
"""

from typing import Optional, Union
from urllib.parse import quote
import logging

from blog_backend.pagination import Cursor, FIRST_PAGE

logger = logging.getLogger(__name__)

# Cache key prefixes for different resources
PREFIX_POSTS = "posts"
PREFIX_POST = "post"
PREFIX_COMMENTS = "comments"
PREFIX_CATEGORIES = "categories"
PREFIX_KNOWLEDGE = "knowledge"
PREFIX_SESSION = "session:user"
PREFIX_REVOKED_TOKEN = "blacklist:token"

ALL_CATEGORIES = "all"


def normalize_filter(value: Optional[str]) -> Optional[str]:
    """
    Normalise a free-text filter value for case-insensitive matching.

    Returns:
        The trimmed, lower-cased value, or None if empty
    """
    if value is None:
        return None
    normalized = value.strip().lower()
    return normalized or None


def normalize_category(category: Optional[str]) -> Optional[str]:
    """Normalise a category filter. Empty or "All" means no filter."""
    normalized = normalize_filter(category)
    if normalized == ALL_CATEGORIES:
        return None
    return normalized


def _quote(value: str) -> str:
    return quote(value, safe="")


def _cursor_part(cursor: Optional[Cursor]) -> str:
    if cursor is None:
        return f"cursor:{FIRST_PAGE}:{FIRST_PAGE}"
    return f"cursor:{cursor.token}:{cursor.id}"


def _require_id(value: Union[int, str], name: str) -> str:
    if value is None or value == "":
        raise ValueError(f"{name} is required")
    return str(value)


# ============================================================================
# Post Keys
# ============================================================================


def post_list_key(category: Optional[str], cursor: Optional[Cursor], limit: int) -> str:
    """
    Build cache key for a page of the post list.

    Args:
        category: Category filter (normalised here; None or "All" for no filter)
        cursor: Page position, None for the first page
        limit: Page size

    Example:
        >>> post_list_key("Tech", None, 10)
        'posts:list:tech:cursor:first:first:10'
    """
    normalized = normalize_category(category)
    category_part = _quote(normalized) if normalized else ALL_CATEGORIES
    return f"{PREFIX_POSTS}:list:{category_part}:{_cursor_part(cursor)}:{limit}"


def post_search_key(term: str, cursor: Optional[Cursor], limit: int) -> str:
    """
    Build cache key for a page of search results.

    Example:
        >>> post_search_key("Python", None, 5)
        'posts:search:python:cursor:first:first:5'
    """
    normalized = normalize_filter(term)
    if not normalized:
        raise ValueError("search term is required")
    return f"{PREFIX_POSTS}:search:{_quote(normalized)}:{_cursor_part(cursor)}:{limit}"


def post_key(post_id: Union[int, str]) -> str:
    """
    Build cache key for a single post.

    Example:
        >>> post_key(1700000000000)
        'post:1700000000000'
    """
    return f"{PREFIX_POST}:{_require_id(post_id, 'post_id')}"


def dashboard_key() -> str:
    """Cache key for the dashboard totals."""
    return f"{PREFIX_POSTS}:dashboard"


def home_key() -> str:
    """Cache key for the per-category home digest."""
    return f"{PREFIX_POSTS}:home"


# ============================================================================
# Comment Keys
# ============================================================================


def comments_prefix(post_id: Union[int, str]) -> str:
    """Prefix covering every comment page of one post."""
    return f"{PREFIX_COMMENTS}:{_require_id(post_id, 'post_id')}"


def comment_page_key(post_id: Union[int, str], cursor: Optional[Cursor], limit: int) -> str:
    """
    Build cache key for a page of a post's comments.

    Example:
        >>> comment_page_key(42, None, 10)
        'comments:42:cursor:first:first:10'
    """
    return f"{comments_prefix(post_id)}:{_cursor_part(cursor)}:{limit}"


# ============================================================================
# Category Keys
# ============================================================================


def category_list_key() -> str:
    """Cache key for the full category list."""
    return PREFIX_CATEGORIES


def category_key(category_id: Union[int, str]) -> str:
    """
    Build cache key for a single category.

    Example:
        >>> category_key(3)
        'categories:3'
    """
    return f"{PREFIX_CATEGORIES}:{_require_id(category_id, 'category_id')}"


# ============================================================================
# Knowledge Keys
# ============================================================================


def knowledge_page_key(cursor: Optional[Cursor], limit: int) -> str:
    """
    Build cache key for a page of knowledge articles.

    Example:
        >>> knowledge_page_key(None, 10)
        'knowledge:cursor:first:first:10'
    """
    return f"{PREFIX_KNOWLEDGE}:{_cursor_part(cursor)}:{limit}"


def knowledge_key(article_id: Union[int, str]) -> str:
    """
    Build cache key for a single knowledge article.

    Example:
        >>> knowledge_key(7)
        'knowledge:7'
    """
    return f"{PREFIX_KNOWLEDGE}:{_require_id(article_id, 'article_id')}"


# ============================================================================
# Session Keys
# ============================================================================


def session_key(user_id: Union[int, str]) -> str:
    """
    Build cache key for a user's login session.

    Example:
        >>> session_key(5)
        'session:user:5'
    """
    return f"{PREFIX_SESSION}:{_require_id(user_id, 'user_id')}"


def revoked_token_key(token_id: str) -> str:
    """
    Build cache key marking an access token as revoked.

    Example:
        >>> revoked_token_key("6f1c")
        'blacklist:token:6f1c'
    """
    return f"{PREFIX_REVOKED_TOKEN}:{_require_id(token_id, 'token_id')}"
