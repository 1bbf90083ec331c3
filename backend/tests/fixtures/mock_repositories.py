"""
Mock Repository Implementations

In-memory implementations of the repository, blob store and gateway
interfaces for unit testing. Stored entities are copied on the way in and
out so tests observe persistence the way a real store behaves.
"""

import threading
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Tuple

from filevault.domain.conversion.gateway import IAssetGateway, ReadyInfo
from filevault.domain.conversion.polling import Clock
from filevault.domain.errors import StorageError
from filevault.domain.file_storage.blob_store import IBlobStore, StoredBlob
from filevault.domain.file_storage.entities import StoredFile
from filevault.domain.file_storage.repositories import FileRepository
from filevault.domain.file_storage.value_objects import PageRequest, PageResult
from filevault.domain.sharing.entities import ShareLink
from filevault.domain.sharing.repositories import ShareLinkRepository


def _copy_file(file: StoredFile) -> StoredFile:
    return StoredFile.from_dict(file.to_dict())


def _copy_link(link: ShareLink) -> ShareLink:
    return ShareLink.from_dict(link.to_dict())


class MockFileRepository(FileRepository):
    """In-memory FileRepository."""

    def __init__(self):
        self._storage: Dict[str, StoredFile] = {}
        self.save_result = True
        self.save_calls = 0

    def save(self, file: StoredFile) -> bool:
        self.save_calls += 1
        if not self.save_result:
            return False
        self._storage[file.id] = _copy_file(file)
        return True

    def get(self, file_id: str) -> Optional[StoredFile]:
        file = self._storage.get(file_id)
        return _copy_file(file) if file else None

    def delete(self, file_id: str) -> bool:
        return self._storage.pop(file_id, None) is not None

    def find_by_owner(
        self,
        owner_id: str,
        page: PageRequest,
        deleted: bool = False,
        search: Optional[str] = None,
        file_format: Optional[str] = None,
    ) -> PageResult[StoredFile]:
        needle = search.lower() if search else None
        matches = sorted(
            (
                f for f in self._storage.values()
                if f.owner_id == owner_id
                and f.is_deleted == deleted
                and (needle is None or needle in f.name.lower())
                and (file_format is None or f.format == file_format)
            ),
            key=lambda f: f.created_at,
            reverse=True,
        )
        items = matches[page.offset:page.offset + page.limit]
        return PageResult([_copy_file(f) for f in items], len(matches), page)

    def find_trashed_before(self, cutoff: datetime) -> List[StoredFile]:
        return [
            _copy_file(f) for f in self._storage.values()
            if f.is_deleted and f.deleted_at is not None and f.deleted_at < cutoff
        ]

    def find_fallback_thumbnails(self, limit: int = 50) -> List[StoredFile]:
        pending = [
            f for f in self._storage.values()
            if f.is_pdf and not f.is_deleted and not f.has_converted_thumbnail()
        ]
        return [_copy_file(f) for f in pending[:limit]]

    # Inspection helpers
    def all(self) -> List[StoredFile]:
        return [_copy_file(f) for f in self._storage.values()]

    def count(self) -> int:
        return len(self._storage)


class MockShareLinkRepository(ShareLinkRepository):
    """
    In-memory ShareLinkRepository.

    A lock makes create_if_absent and increment_download_count atomic the
    way the Redis scripts are.
    """

    SETTINGS_FIELDS = (
        "can_view",
        "can_download",
        "password_hash",
        "expires_at",
        "max_downloads",
        "updated_at",
    )

    def __init__(self):
        self._links: Dict[str, ShareLink] = {}
        self._claims: Dict[Tuple[str, str], str] = {}
        self._lock = threading.Lock()

    def get(self, share_id: str) -> Optional[ShareLink]:
        with self._lock:
            link = self._links.get(share_id)
            return _copy_link(link) if link else None

    def get_by_token(self, share_token: str) -> Optional[ShareLink]:
        with self._lock:
            for link in self._links.values():
                if link.share_token == share_token:
                    return _copy_link(link)
            return None

    def get_active_for(self, file_id: str, owner_id: str) -> Optional[ShareLink]:
        with self._lock:
            share_id = self._claims.get((file_id, owner_id))
            if share_id is None:
                return None
            return _copy_link(self._links[share_id])

    def create_if_absent(self, link: ShareLink) -> Tuple[ShareLink, bool]:
        key = (link.file_id, link.owner_id)
        with self._lock:
            winner = self._claims.get(key)
            if winner is not None:
                return _copy_link(self._links[winner]), False
            self._links[link.id] = _copy_link(link)
            self._claims[key] = link.id
            return _copy_link(link), True

    def update_settings(self, link: ShareLink) -> bool:
        with self._lock:
            stored = self._links.get(link.id)
            if stored is None or not stored.is_active:
                return False
            for name in self.SETTINGS_FIELDS:
                setattr(stored, name, getattr(link, name))
            return True

    def deactivate(self, share_id: str) -> bool:
        with self._lock:
            stored = self._links.get(share_id)
            if stored is None or not stored.is_active:
                return False
            stored.is_active = False
            key = (stored.file_id, stored.owner_id)
            if self._claims.get(key) == share_id:
                del self._claims[key]
            return True

    def increment_download_count(self, share_id: str) -> Optional[int]:
        with self._lock:
            stored = self._links.get(share_id)
            if stored is None or not stored.is_active:
                return None
            if stored.max_downloads is not None and stored.download_count >= stored.max_downloads:
                return None
            stored.download_count += 1
            return stored.download_count

    def find_active_by_owner(self, owner_id: str) -> List[ShareLink]:
        with self._lock:
            links = [
                l for l in self._links.values()
                if l.owner_id == owner_id and l.is_active
            ]
            links.sort(key=lambda l: l.created_at, reverse=True)
            return [_copy_link(l) for l in links]

    # Inspection helper
    def count(self) -> int:
        return len(self._links)


class MockBlobStore(IBlobStore):
    """In-memory IBlobStore recording uploads and deletions."""

    def __init__(self, cdn_base: str = "https://cdn.test"):
        self.cdn_base = cdn_base
        self.uploads: List[Dict[str, Any]] = []
        self.deleted: List[str] = []
        self.fail_upload = False
        self.fail_delete = False
        self.fail_read = False
        self.contents: Dict[str, bytes] = {}

    def upload(self, content: bytes, filename: str, mime_type: str) -> StoredBlob:
        if self.fail_upload:
            raise StorageError(f"Upload of {filename} failed")
        asset_id = f"asset-{len(self.uploads) + 1}"
        self.uploads.append({"asset_id": asset_id, "filename": filename, "size": len(content)})
        self.contents[f"{self.cdn_base}/{asset_id}/"] = content
        return StoredBlob(asset_id=asset_id, url=f"{self.cdn_base}/{asset_id}/")

    def delete(self, asset_id: str) -> bool:
        if self.fail_delete:
            raise StorageError(f"Delete of {asset_id} failed")
        self.deleted.append(asset_id)
        return True

    def open_stream(self, url: str) -> Iterator[bytes]:
        if self.fail_read:
            raise StorageError(f"Fetching {url} failed")
        return iter([self.contents.get(url, b"")])


class FakeAssetGateway(IAssetGateway):
    """
    Scripted IAssetGateway.

    Readiness and status responses are consumed in order; the last entry
    repeats once the script runs out. Exception instances in a script are
    raised instead of returned.
    """

    def __init__(
        self,
        ready_script: Optional[List[Any]] = None,
        submit_response: Any = None,
        status_script: Optional[List[Any]] = None,
        cdn_base: str = "https://cdn.test",
    ):
        self.ready_script = list(ready_script) if ready_script is not None else [True]
        self.submit_response = submit_response if submit_response is not None else {
            "problems": {},
            "result": [{"token": 4242, "uuid": "thumb-uuid"}],
        }
        self.status_script = list(status_script) if status_script is not None else [
            {"status": "processing", "result": None},
            {"status": "finished", "result": {"uuid": "thumb-uuid"}},
        ]
        self.cdn_base = cdn_base
        self.preview_error: Optional[Exception] = None

        self.info_calls: List[str] = []
        self.submitted_paths: List[List[str]] = []
        self.status_calls: List[str] = []

    @staticmethod
    def _next(script: List[Any], calls: int) -> Any:
        entry = script[min(calls, len(script) - 1)]
        if isinstance(entry, Exception):
            raise entry
        return entry

    def get_asset_info(self, asset_id: str) -> ReadyInfo:
        calls = len(self.info_calls)
        self.info_calls.append(asset_id)
        ready = self._next(self.ready_script, calls)
        return ReadyInfo(asset_id=asset_id, is_ready=bool(ready), mime_type="application/pdf")

    def submit_conversion(self, paths: List[str]) -> Dict[str, Any]:
        self.submitted_paths.append(list(paths))
        if isinstance(self.submit_response, Exception):
            raise self.submit_response
        return self.submit_response

    def get_conversion_status(self, token: str) -> Any:
        calls = len(self.status_calls)
        self.status_calls.append(token)
        return self._next(self.status_script, calls)

    def content_url(self, asset_id: str) -> str:
        return f"{self.cdn_base}/{asset_id}/"

    def preview_url(self, asset_id: str, size: int) -> str:
        if self.preview_error is not None:
            raise self.preview_error
        return f"{self.cdn_base}/{asset_id}/-/preview/{size}x{size}/"


class FakeClock(Clock):
    """Clock whose sleep advances time instantly."""

    def __init__(self, start: float = 1000.0):
        self.current = start
        self.sleeps: List[float] = []

    def now(self) -> float:
        return self.current

    def sleep(self, seconds: float, cancel_event: Optional[threading.Event] = None) -> bool:
        self.sleeps.append(seconds)
        self.current += seconds
        return cancel_event is not None and cancel_event.is_set()
