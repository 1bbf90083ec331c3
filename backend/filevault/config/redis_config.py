"""
Redis Configuration

Configures Redis connection settings and provides factory functions
for creating Redis connection managers.
"""

import os
from typing import Optional

import redis

from ..infrastructure.redis_repository import RedisConnectionManager


class RedisConfig:
    """Redis configuration settings."""

    def __init__(self):
        self.host = os.getenv("REDIS_HOST", "localhost")
        self.port = int(os.getenv("REDIS_PORT", 6379))
        self.db = int(os.getenv("REDIS_DB", 0))
        self.password = os.getenv("REDIS_PASSWORD")
        self.max_connections = int(os.getenv("REDIS_MAX_CONNECTIONS", 20))

        # Redis URL format: redis://[:password@]host:port/db
        self.url = os.getenv("REDIS_URL")
        if self.url:
            connection_params = redis.connection.parse_url(self.url)
            self.host = connection_params.get("host", self.host)
            self.port = connection_params.get("port", self.port)
            self.db = connection_params.get("db", self.db)
            self.password = connection_params.get("password", self.password)


def init_redis(config: Optional[RedisConfig] = None) -> RedisConnectionManager:
    """
    Create a Redis connection manager.

    The caller owns the returned manager; app_factory registers it in the
    dependency container.

    Args:
        config: Redis configuration, uses default if None

    Returns:
        RedisConnectionManager instance
    """
    if config is None:
        config = RedisConfig()

    return RedisConnectionManager(
        host=config.host,
        port=config.port,
        db=config.db,
        password=config.password or None,
        max_connections=config.max_connections,
    )
