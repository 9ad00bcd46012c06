import hashlib
import json
import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from newsroom.config import settings

logger = logging.getLogger(__name__)

ARTICLE_LIST_PATTERN = "news:articles:list:*"


def article_list_key(page: int, page_size: int, category: str | None, search: str | None,
                     sort_by: str, sort_order: str) -> str:
    # Query values are free text, so they are hashed as a JSON array rather
    # than joined with the key separator.
    params = json.dumps([page, page_size, category, search, sort_by, sort_order])
    return f"news:articles:list:{hashlib.sha256(params.encode()).hexdigest()}"


def article_detail_key(article_id: int) -> str:
    return f"news:articles:detail:{article_id}"


class ArticleCache:
    """
    Cache-aside store for public article reads, backed by Redis.

    Only the anonymous read paths use it.  Mutations never consult the
    cache for ownership; they only invalidate it afterwards.  When Redis is
    down or not configured every read is a miss and every write is a no-op.
    """

    def __init__(self) -> None:
        self._redis: redis.Redis | None = None

    async def connect(self) -> None:
        """Open the connection pool.  Called once at application startup."""
        self._redis = redis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_connect_timeout=2,
            socket_timeout=2,
        )
        try:
            await self._redis.ping()
            logger.info("Redis connected: %s", settings.REDIS_URL)
        except RedisError as exc:
            logger.warning("Redis unavailable, article cache disabled: %s", exc)
            await self._redis.aclose()
            self._redis = None

    async def disconnect(self) -> None:
        if self._redis:
            await self._redis.aclose()
            self._redis = None

    async def get(self, key: str) -> dict | None:
        if not self._redis:
            return None
        try:
            data = await self._redis.get(key)
        except RedisError as exc:
            logger.debug("Cache GET failed for key=%r: %s", key, exc)
            return None
        return json.loads(data) if data is not None else None

    async def set(self, key: str, value: dict, ttl: int | None = None) -> None:
        if not self._redis:
            return
        try:
            await self._redis.set(key, json.dumps(value, default=str), ex=ttl)
        except RedisError as exc:
            logger.debug("Cache SET failed for key=%r: %s", key, exc)

    async def _delete_matching(self, pattern: str) -> None:
        # SCAN rather than KEYS so a large keyspace never blocks Redis.
        try:
            keys = [key async for key in self._redis.scan_iter(match=pattern)]
            if keys:
                await self._redis.delete(*keys)
        except RedisError as exc:
            logger.debug("Cache invalidation failed for pattern=%r: %s", pattern, exc)

    async def invalidate_article(self, article_id: int | None = None) -> None:
        """Drop every list page, plus the detail entry for *article_id* if given."""
        if not self._redis:
            return
        await self._delete_matching(ARTICLE_LIST_PATTERN)
        if article_id is not None:
            await self._delete_matching(article_detail_key(article_id))


# Module-level singleton shared across all request handlers.
cache = ArticleCache()
