"""
Unit tests for RedisRepository error handling with a mocked client.
"""

import json
from unittest.mock import Mock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from filevault.domain.errors import StorageError
from filevault.infrastructure.redis_repository import RedisConnectionManager, RedisRepository


@pytest.fixture
def redis_client():
    return Mock()


@pytest.fixture
def repo(redis_client):
    return RedisRepository(redis_client, "filevault")


class TestRedisRepository:
    def test_keys_are_prefixed(self, repo, redis_client):
        redis_client.get.return_value = None

        repo.get_json("file:1")

        redis_client.get.assert_called_once_with("filevault:file:1")

    def test_get_json_decodes_bytes(self, repo, redis_client):
        redis_client.get.return_value = json.dumps({"id": "1"}).encode()

        assert repo.get_json("file:1") == {"id": "1"}

    def test_corrupt_json_reads_as_missing(self, repo, redis_client):
        redis_client.get.return_value = b"{not json"

        assert repo.get_json("file:1") is None

    def test_get_many_skips_missing(self, repo, redis_client):
        redis_client.mget.return_value = [b'{"id": "1"}', None, b'{"id": "3"}']

        assert repo.get_many_json(["a", "b", "c"]) == [{"id": "1"}, {"id": "3"}]

    def test_get_many_empty(self, repo, redis_client):
        assert repo.get_many_json([]) == []
        redis_client.mget.assert_not_called()

    @pytest.mark.parametrize("error", [RedisConnectionError("down"), RedisTimeoutError("slow")])
    def test_outage_raises_storage_error(self, repo, redis_client, error):
        redis_client.get.side_effect = error

        with pytest.raises(StorageError) as exc_info:
            repo.get_json("file:1")

        assert exc_info.value.original_error is error

    def test_script_keys_are_prefixed(self, repo, redis_client):
        repo.run_script("return 1", ["a", "b"], ["x"])

        redis_client.eval.assert_called_once_with("return 1", 2, "filevault:a", "filevault:b", "x")

    def test_script_failure(self, repo, redis_client):
        redis_client.eval.side_effect = RedisConnectionError("down")

        with pytest.raises(StorageError):
            repo.run_script("return 1", ["a"])

    def test_index_members_decodes(self, repo, redis_client):
        redis_client.zrevrange.return_value = [b"b", b"a"]

        assert repo.index_members("owner_files:u") == ["b", "a"]

    def test_no_prefix(self, redis_client):
        RedisRepository(redis_client).get_value("plain")

        redis_client.get.assert_called_once_with("plain")


class TestRedisConnectionManager:
    def test_health_check_failure(self):
        manager = RedisConnectionManager()
        manager._client = Mock()
        manager._client.ping.side_effect = RedisConnectionError("refused")

        assert manager.health_check() is False

    def test_health_check_success(self):
        manager = RedisConnectionManager()
        manager._client = Mock()
        manager._client.ping.return_value = True

        assert manager.health_check() is True
