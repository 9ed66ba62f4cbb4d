"""
Redis cache for read-only backend snapshots (price tiers, tier rules).
Company-isolated keys; every failure degrades to a cache miss.
"""

import logging
import json
from typing import Any, Optional, Callable, Dict
from decimal import Decimal

import redis
from redis.exceptions import RedisError, ConnectionError, TimeoutError
from flask import Flask

logger = logging.getLogger(__name__)


class CacheService:
    """
    Redis-based cache keyed per company.

    Keys pattern: {prefix}:company:{company_id}:{module}:{key}
    """

    def __init__(self, app: Optional[Flask] = None):
        self.client: Optional[redis.Redis] = None
        self._enabled: bool = False
        self._prefix: str = "pos"
        self._default_ttl: int = 60

        if app:
            self.init_app(app)

    def init_app(self, app: Flask) -> None:
        """Initialize Redis client from Flask app config."""
        self._enabled = app.config.get('CACHE_ENABLED', True)
        self._prefix = app.config.get('CACHE_KEY_PREFIX', 'pos')
        self._default_ttl = app.config.get('CACHE_DEFAULT_TTL', 60)
        redis_url = app.config.get('REDIS_URL', 'redis://redis:6379/0')

        if not self._enabled:
            logger.info("[CACHE] Cache is DISABLED via config")
            return

        try:
            self.client = redis.from_url(
                redis_url,
                decode_responses=True,
                socket_connect_timeout=3,
                socket_timeout=3,
                retry_on_timeout=True,
                health_check_interval=30
            )
            self.client.ping()
            logger.info(f"[CACHE] Redis connected: {redis_url}")
        except (ConnectionError, TimeoutError, RedisError) as e:
            logger.warning(f"[CACHE] Redis connection failed: {e}. Cache DISABLED.")
            self._enabled = False
            self.client = None

    def is_available(self) -> bool:
        if not self._enabled or not self.client:
            return False
        try:
            self.client.ping()
            return True
        except (ConnectionError, RedisError):
            return False

    def _build_key(self, company_id: Any, module: str, key: str) -> str:
        return f"{self._prefix}:company:{company_id}:{module}:{key}"

    def _serialize(self, value: Any) -> str:
        """JSON with Decimals kept as tagged strings."""
        def default_handler(obj: Any) -> Any:
            if isinstance(obj, Decimal):
                return {"__decimal__": str(obj)}
            raise TypeError(f"Object of type {type(obj)} is not JSON serializable")
        return json.dumps(value, default=default_handler)

    def _deserialize(self, value: str) -> Any:
        def object_hook(dct: Dict[str, Any]) -> Any:
            if "__decimal__" in dct:
                return Decimal(dct["__decimal__"])
            return dct
        return json.loads(value, object_hook=object_hook)

    def get(self, company_id: Any, module: str, key: str) -> Optional[Any]:
        if not self.is_available():
            return None
        try:
            value = self.client.get(self._build_key(company_id, module, key))
            if value is None:
                return None
            return self._deserialize(value)
        except (RedisError, json.JSONDecodeError) as e:
            logger.warning(f"[CACHE] Get error: {e}")
            return None

    def set(self, company_id: Any, module: str, key: str, value: Any, ttl: Optional[int] = None) -> bool:
        if not self.is_available():
            return False
        try:
            self.client.setex(
                self._build_key(company_id, module, key),
                ttl if ttl is not None else self._default_ttl,
                self._serialize(value)
            )
            return True
        except (RedisError, TypeError) as e:
            logger.warning(f"[CACHE] Set error: {e}")
            return False

    def memoize(self, company_id: Any, module: str, key: str, loader_fn: Callable[[], Any], ttl: Optional[int] = None) -> Any:
        """Cache-aside: return the cached value or load, store and return it."""
        cached = self.get(company_id, module, key)
        if cached is not None:
            logger.debug(f"[CACHE] HIT {module}:{key} company={company_id}")
            return cached
        value = loader_fn()
        self.set(company_id, module, key, value, ttl)
        return value

    def invalidate_module(self, company_id: Any, module: str) -> int:
        """Delete every key of a module for one company."""
        if not self.is_available():
            return 0
        try:
            pattern = self._build_key(company_id, module, "*")
            deleted_count = 0
            for key in self.client.scan_iter(match=pattern, count=100):
                self.client.delete(key)
                deleted_count += 1
            if deleted_count > 0:
                logger.info(f"[CACHE] INVALIDATE: {pattern} ({deleted_count} keys)")
            return deleted_count
        except RedisError as e:
            logger.warning(f"[CACHE] Invalidate error: {e}")
            return 0


_cache_service: Optional[CacheService] = None

def init_cache(app: Flask) -> None:
    """Initialize cache service singleton."""
    global _cache_service
    _cache_service = CacheService(app)
    app.extensions['cache'] = _cache_service

def get_cache() -> CacheService:
    """Get cache service instance."""
    if _cache_service is None:
        raise RuntimeError("Cache not initialized.")
    return _cache_service
