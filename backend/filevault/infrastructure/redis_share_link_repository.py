"""
Redis Share Link Repository Implementation

Concrete Redis-based implementation of ShareLinkRepository.

Key layout:
- share:<id>                     JSON document
- share_token:<token>            id lookup by public token
- share_active:<file>:<owner>    id of the active link for the pair
- owner_shares:<owner>           sorted set of active link ids by creation time

The active claim, settings updates, revocation and download counting each
run as a single Lua script.
"""

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from ..domain.errors import StorageError
from ..domain.sharing.entities import ShareLink
from ..domain.sharing.repositories import ShareLinkRepository

logger = logging.getLogger(__name__)


# KEYS: active claim, share doc, token lookup, owner index
# ARGV: share id, json, created score
CREATE_IF_ABSENT_SCRIPT = """
local existing = redis.call('GET', KEYS[1])
if existing then
    return existing
end
redis.call('SET', KEYS[1], ARGV[1])
redis.call('SET', KEYS[2], ARGV[2])
redis.call('SET', KEYS[3], ARGV[1])
redis.call('ZADD', KEYS[4], ARGV[3], ARGV[1])
return ARGV[1]
"""

# KEYS: share doc
# ARGV: json object with the settings fields to overwrite
UPDATE_SETTINGS_SCRIPT = """
local raw = redis.call('GET', KEYS[1])
if not raw then
    return 0
end
local doc = cjson.decode(raw)
if doc['is_active'] ~= true then
    return 0
end
local changes = cjson.decode(ARGV[1])
for field, value in pairs(changes) do
    doc[field] = value
end
redis.call('SET', KEYS[1], cjson.encode(doc))
return 1
"""

# KEYS: share doc, active claim, owner index
# ARGV: share id, updated_at
DEACTIVATE_SCRIPT = """
local raw = redis.call('GET', KEYS[1])
if not raw then
    return 0
end
local doc = cjson.decode(raw)
if doc['is_active'] ~= true then
    return 0
end
doc['is_active'] = false
doc['updated_at'] = ARGV[2]
redis.call('SET', KEYS[1], cjson.encode(doc))
if redis.call('GET', KEYS[2]) == ARGV[1] then
    redis.call('DEL', KEYS[2])
end
redis.call('ZREM', KEYS[3], ARGV[1])
return 1
"""

# KEYS: share doc
# Returns the new count, -1 when missing or inactive, -2 when the quota is used up
INCREMENT_DOWNLOAD_SCRIPT = """
local raw = redis.call('GET', KEYS[1])
if not raw then
    return -1
end
local doc = cjson.decode(raw)
if doc['is_active'] ~= true then
    return -1
end
local count = tonumber(doc['download_count']) or 0
local limit = doc['max_downloads']
if limit ~= nil and limit ~= cjson.null and count >= tonumber(limit) then
    return -2
end
count = count + 1
doc['download_count'] = count
redis.call('SET', KEYS[1], cjson.encode(doc))
return count
"""

SETTINGS_FIELDS = ("can_view", "can_download", "password_hash", "expires_at", "max_downloads", "updated_at")


class RedisShareLinkRepository(ShareLinkRepository):
    """Redis-based implementation of ShareLinkRepository."""

    def __init__(self, redis_repository):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
        """
        self.redis_repo = redis_repository

    @staticmethod
    def _share_key(share_id: str) -> str:
        return f"share:{share_id}"

    @staticmethod
    def _token_key(share_token: str) -> str:
        return f"share_token:{share_token}"

    @staticmethod
    def _claim_key(file_id: str, owner_id: str) -> str:
        return f"share_active:{file_id}:{owner_id}"

    @staticmethod
    def _owner_key(owner_id: str) -> str:
        return f"owner_shares:{owner_id}"

    def get(self, share_id: str) -> Optional[ShareLink]:
        data = self.redis_repo.get_json(self._share_key(share_id))
        return self._deserialize(data) if data is not None else None

    def get_by_token(self, share_token: str) -> Optional[ShareLink]:
        share_id = self.redis_repo.get_value(self._token_key(share_token))
        if share_id is None:
            return None
        return self.get(share_id)

    def get_active_for(self, file_id: str, owner_id: str) -> Optional[ShareLink]:
        share_id = self.redis_repo.get_value(self._claim_key(file_id, owner_id))
        if share_id is None:
            return None
        link = self.get(share_id)
        if link is None or not link.is_active:
            return None
        return link

    def create_if_absent(self, link: ShareLink) -> Tuple[ShareLink, bool]:
        winner_id = self.redis_repo.run_script(
            CREATE_IF_ABSENT_SCRIPT,
            [
                self._claim_key(link.file_id, link.owner_id),
                self._share_key(link.id),
                self._token_key(link.share_token),
                self._owner_key(link.owner_id),
            ],
            [link.id, json.dumps(link.to_dict()), _score(link.created_at)],
        )
        winner_id = winner_id.decode("utf-8") if isinstance(winner_id, bytes) else winner_id

        if winner_id == link.id:
            return link, True

        existing = self.get(winner_id)
        if existing is None:
            logger.error(f"Active claim for file {link.file_id} points to missing share {winner_id}")
            raise StorageError(f"Share link {winner_id} referenced by active claim is missing")
        return existing, False

    def update_settings(self, link: ShareLink) -> bool:
        data = link.to_dict()
        changes = {field: data[field] for field in SETTINGS_FIELDS}
        result = self.redis_repo.run_script(
            UPDATE_SETTINGS_SCRIPT,
            [self._share_key(link.id)],
            [json.dumps(changes)],
        )
        return result == 1

    def deactivate(self, share_id: str) -> bool:
        link = self.get(share_id)
        if link is None:
            return False
        result = self.redis_repo.run_script(
            DEACTIVATE_SCRIPT,
            [
                self._share_key(share_id),
                self._claim_key(link.file_id, link.owner_id),
                self._owner_key(link.owner_id),
            ],
            [share_id, datetime.utcnow().isoformat()],
        )
        return result == 1

    def increment_download_count(self, share_id: str) -> Optional[int]:
        result = self.redis_repo.run_script(
            INCREMENT_DOWNLOAD_SCRIPT,
            [self._share_key(share_id)],
        )
        count = int(result)
        if count < 0:
            logger.debug(f"Download increment refused for share {share_id} (code {count})")
            return None
        return count

    def find_active_by_owner(self, owner_id: str) -> List[ShareLink]:
        ids = self.redis_repo.index_members(self._owner_key(owner_id), newest_first=True)
        documents = self.redis_repo.get_many_json([self._share_key(i) for i in ids])
        links = [self._deserialize(d) for d in documents]
        return [link for link in links if link is not None and link.is_active]

    @staticmethod
    def _deserialize(data: dict) -> Optional[ShareLink]:
        try:
            return ShareLink.from_dict(data)
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Error deserializing share link {data.get('id')}: {e}")
            return None


def _score(value: datetime) -> float:
    return value.replace(tzinfo=timezone.utc).timestamp()
