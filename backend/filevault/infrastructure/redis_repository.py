"""
Redis Repository Base Class

Provides JSON document storage, sorted-set indexes and Lua script execution
for the Redis-backed repositories.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

import redis
from redis.exceptions import RedisError

from ..domain.errors import StorageError

logger = logging.getLogger(__name__)


class RedisRepository:
    """
    Base Redis repository.

    Connection and command failures are logged and raised as StorageError
    so callers never mistake an outage for a missing record.
    """

    def __init__(self, redis_client: redis.Redis, key_prefix: str = ""):
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, key: str) -> str:
        """Create a prefixed key for Redis storage."""
        return f"{self.key_prefix}:{key}" if self.key_prefix else key

    def _fail(self, action: str, key: str, error: Exception) -> StorageError:
        logger.error(f"Redis error while {action} {key}: {error}")
        return StorageError(f"Redis error while {action} {key}", original_error=error)

    @staticmethod
    def _decode(value: Any) -> Any:
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def _loads(self, key: str, raw: Any) -> Optional[Dict[str, Any]]:
        if raw is None:
            return None
        try:
            return json.loads(self._decode(raw))
        except json.JSONDecodeError as e:
            logger.error(f"Corrupt JSON stored at {key}: {e}")
            return None

    # ------------------------------------------------------------------
    # JSON documents
    # ------------------------------------------------------------------

    def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        """
        Get JSON data from Redis.

        Returns:
            Dictionary if found and valid JSON, None otherwise
        """
        redis_key = self._make_key(key)
        try:
            data = self.redis.get(redis_key)
        except RedisError as e:
            raise self._fail("reading", key, e)
        return self._loads(key, data)

    def get_many_json(self, keys: Sequence[str]) -> List[Dict[str, Any]]:
        """Fetch several JSON documents in one round trip, skipping missing ones."""
        if not keys:
            return []
        redis_keys = [self._make_key(k) for k in keys]
        try:
            values = self.redis.mget(redis_keys)
        except RedisError as e:
            raise self._fail("reading", f"{len(keys)} keys", e)

        documents = []
        for key, raw in zip(keys, values):
            doc = self._loads(key, raw)
            if doc is not None:
                documents.append(doc)
        return documents

    # ------------------------------------------------------------------
    # Plain values and sorted-set indexes
    # ------------------------------------------------------------------

    def get_value(self, key: str) -> Optional[str]:
        try:
            return self._decode(self.redis.get(self._make_key(key)))
        except RedisError as e:
            raise self._fail("reading", key, e)

    def index_members(self, key: str, newest_first: bool = True) -> List[str]:
        """All members of a sorted-set index ordered by score."""
        try:
            if newest_first:
                members = self.redis.zrevrange(self._make_key(key), 0, -1)
            else:
                members = self.redis.zrange(self._make_key(key), 0, -1)
        except RedisError as e:
            raise self._fail("scanning", key, e)
        return [self._decode(m) for m in members]

    def index_members_below(self, key: str, max_score: Union[float, str], limit: Optional[int] = None) -> List[str]:
        """Members with a score up to max_score, lowest first."""
        try:
            if limit is None:
                members = self.redis.zrangebyscore(self._make_key(key), "-inf", max_score)
            else:
                members = self.redis.zrangebyscore(
                    self._make_key(key), "-inf", max_score, start=0, num=limit
                )
        except RedisError as e:
            raise self._fail("scanning", key, e)
        return [self._decode(m) for m in members]

    # ------------------------------------------------------------------
    # Scripts
    # ------------------------------------------------------------------

    def run_script(self, script: str, keys: Sequence[str], args: Sequence[Any] = ()) -> Any:
        """
        Execute a Lua script atomically.

        Keys are prefixed before execution; arguments are passed unchanged.
        """
        redis_keys = [self._make_key(k) for k in keys]
        try:
            return self.redis.eval(script, len(redis_keys), *redis_keys, *args)
        except RedisError as e:
            raise self._fail("running script on", ", ".join(keys), e)


class RedisConnectionManager:
    """Manages Redis connection with connection pooling."""

    def __init__(self, host: str = "localhost", port: int = 6379, db: int = 0,
                 password: Optional[str] = None, max_connections: int = 20,
                 decode_responses: bool = False):
        self.connection_pool = redis.ConnectionPool(
            host=host,
            port=port,
            db=db,
            password=password,
            max_connections=max_connections,
            decode_responses=decode_responses,
            retry_on_timeout=True,
            socket_keepalive=True,
            socket_keepalive_options={},
        )
        self._client = None

    @property
    def client(self) -> redis.Redis:
        """Get Redis client instance with connection pooling."""
        if self._client is None:
            self._client = redis.Redis(connection_pool=self.connection_pool)
        return self._client

    def health_check(self) -> bool:
        """Check if Redis connection is healthy."""
        try:
            return bool(self.client.ping())
        except RedisError as e:
            logger.warning(f"Redis health check failed: {e}")
            return False

    def close(self):
        """Close the connection pool."""
        if self.connection_pool:
            self.connection_pool.disconnect()
