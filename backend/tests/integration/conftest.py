"""
Fixtures for tests against a live Redis server.

Tests are skipped when Redis is not reachable at REDIS_HOST:REDIS_PORT.
Each test gets its own key prefix and its keys are removed afterwards.
"""

import os
import uuid

import pytest
import redis

from filevault.infrastructure.redis_file_repository import RedisFileRepository
from filevault.infrastructure.redis_repository import RedisRepository
from filevault.infrastructure.redis_share_link_repository import RedisShareLinkRepository


@pytest.fixture(scope="session")
def redis_client():
    client = redis.Redis(
        host=os.getenv("REDIS_HOST", "localhost"),
        port=int(os.getenv("REDIS_PORT", 6379)),
        db=int(os.getenv("REDIS_TEST_DB", 15)),
    )
    try:
        client.ping()
    except redis.exceptions.RedisError:
        pytest.skip("Redis is not available")
    yield client
    client.close()


@pytest.fixture
def redis_repo(redis_client):
    prefix = f"filevault-test-{uuid.uuid4().hex[:8]}"
    yield RedisRepository(redis_client, prefix)
    keys = list(redis_client.scan_iter(match=f"{prefix}:*"))
    if keys:
        redis_client.delete(*keys)


@pytest.fixture
def redis_file_repository(redis_repo):
    return RedisFileRepository(redis_repo)


@pytest.fixture
def redis_share_repository(redis_repo):
    return RedisShareLinkRepository(redis_repo)
