"""
Redis File Repository Implementation

Concrete Redis-based implementation of FileRepository.
Each file is a JSON document; sorted sets index files per owner, the
global trash and PDFs still waiting for a converted thumbnail.
"""

import json
import logging
from datetime import datetime, timezone
from typing import List, Optional

from ..domain.file_storage.entities import StoredFile
from ..domain.file_storage.repositories import FileRepository
from ..domain.file_storage.value_objects import PageRequest, PageResult

logger = logging.getLogger(__name__)


# KEYS: file doc, owner live index, owner trash index, global trash index, pending thumbnail index
# ARGV: json, file id, created score, deleted flag, deleted score, pending flag
SAVE_FILE_SCRIPT = """
redis.call('SET', KEYS[1], ARGV[1])
if ARGV[4] == '1' then
    redis.call('ZREM', KEYS[2], ARGV[2])
    redis.call('ZADD', KEYS[3], ARGV[3], ARGV[2])
    redis.call('ZADD', KEYS[4], ARGV[5], ARGV[2])
else
    redis.call('ZREM', KEYS[3], ARGV[2])
    redis.call('ZREM', KEYS[4], ARGV[2])
    redis.call('ZADD', KEYS[2], ARGV[3], ARGV[2])
end
if ARGV[6] == '1' then
    redis.call('ZADD', KEYS[5], ARGV[3], ARGV[2])
else
    redis.call('ZREM', KEYS[5], ARGV[2])
end
return 1
"""

# KEYS: file doc, owner live index, owner trash index, global trash index, pending thumbnail index
# ARGV: file id
DELETE_FILE_SCRIPT = """
local removed = redis.call('DEL', KEYS[1])
for i = 2, #KEYS do
    redis.call('ZREM', KEYS[i], ARGV[1])
end
return removed
"""


def _score(value: datetime) -> float:
    return value.replace(tzinfo=timezone.utc).timestamp()


class RedisFileRepository(FileRepository):
    """
    Redis-based implementation of FileRepository.

    Document writes and index updates happen in one script call so the
    indexes never disagree with the stored document.
    """

    TRASH_INDEX = "trashed_files"
    PENDING_THUMBNAIL_INDEX = "thumbnail_pending"

    def __init__(self, redis_repository):
        """
        Initialize with Redis repository.

        Args:
            redis_repository: RedisRepository instance from infrastructure layer
        """
        self.redis_repo = redis_repository
        self.file_prefix = "file"

    def _file_key(self, file_id: str) -> str:
        return f"{self.file_prefix}:{file_id}"

    def _index_keys(self, owner_id: str) -> List[str]:
        return [
            f"owner_files:{owner_id}",
            f"owner_trash:{owner_id}",
            self.TRASH_INDEX,
            self.PENDING_THUMBNAIL_INDEX,
        ]

    def save(self, file: StoredFile) -> bool:
        pending = file.is_pdf and not file.is_deleted and not file.has_converted_thumbnail()
        deleted_at = file.deleted_at or file.updated_at
        result = self.redis_repo.run_script(
            SAVE_FILE_SCRIPT,
            [self._file_key(file.id), *self._index_keys(file.owner_id)],
            [
                self._serialize(file),
                file.id,
                _score(file.created_at),
                "1" if file.is_deleted else "0",
                _score(deleted_at),
                "1" if pending else "0",
            ],
        )
        return result == 1

    def get(self, file_id: str) -> Optional[StoredFile]:
        data = self.redis_repo.get_json(self._file_key(file_id))
        if data is None:
            return None
        return self._deserialize(data)

    def delete(self, file_id: str) -> bool:
        file = self.get(file_id)
        if file is None:
            return False
        removed = self.redis_repo.run_script(
            DELETE_FILE_SCRIPT,
            [self._file_key(file_id), *self._index_keys(file.owner_id)],
            [file_id],
        )
        return removed == 1

    def find_by_owner(
        self,
        owner_id: str,
        page: PageRequest,
        deleted: bool = False,
        search: Optional[str] = None,
        file_format: Optional[str] = None,
    ) -> PageResult[StoredFile]:
        index = f"owner_trash:{owner_id}" if deleted else f"owner_files:{owner_id}"
        files = self._load(self.redis_repo.index_members(index, newest_first=True))

        needle = search.lower() if search else None
        matches = [
            f for f in files
            if f.is_deleted == deleted
            and (needle is None or needle in f.name.lower())
            and (file_format is None or f.format == file_format)
        ]

        window = matches[page.offset:page.offset + page.limit]
        return PageResult(items=window, total=len(matches), request=page)

    def find_trashed_before(self, cutoff: datetime) -> List[StoredFile]:
        ids = self.redis_repo.index_members_below(self.TRASH_INDEX, _score(cutoff))
        return [f for f in self._load(ids) if f.is_deleted]

    def find_fallback_thumbnails(self, limit: int = 50) -> List[StoredFile]:
        ids = self.redis_repo.index_members_below(
            self.PENDING_THUMBNAIL_INDEX, "+inf", limit=limit
        )
        return [f for f in self._load(ids) if f.is_pdf and not f.has_converted_thumbnail()]

    def _load(self, file_ids: List[str]) -> List[StoredFile]:
        documents = self.redis_repo.get_many_json([self._file_key(i) for i in file_ids])
        files = []
        for data in documents:
            file = self._deserialize(data)
            if file is not None:
                files.append(file)
        return files

    @staticmethod
    def _serialize(file: StoredFile) -> str:
        return json.dumps(file.to_dict())

    @staticmethod
    def _deserialize(data: dict) -> Optional[StoredFile]:
        try:
            return StoredFile.from_dict(data)
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Error deserializing file metadata {data.get('id')}: {e}")
            return None
