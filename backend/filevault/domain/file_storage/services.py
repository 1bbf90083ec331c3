"""
File Storage Services

Domain service for the stored file lifecycle: upload, listing, rename,
trash, restore and permanent deletion.
"""

import logging
from datetime import datetime, timedelta
from typing import Iterator, List, Optional, Tuple

from ..errors import (
    InvalidFileRequestError,
    FileTooLargeError,
    StorageError,
    StoredFileNotFoundError,
)
from .blob_store import IBlobStore
from .entities import StoredFile
from .repositories import FileRepository
from .value_objects import MAX_FILE_SIZE, FileFormat, PageRequest, PageResult

logger = logging.getLogger(__name__)


class FileManager:
    """
    Domain service for managing stored files.

    Files that do not exist and files owned by someone else are reported
    identically through StoredFileNotFoundError.
    """

    def __init__(
        self,
        file_repository: FileRepository,
        blob_store: IBlobStore,
        max_file_size: int = MAX_FILE_SIZE,
    ):
        """
        Initialize FileManager.

        Args:
            file_repository: Repository for file metadata persistence
            blob_store: Remote content store
            max_file_size: Upload size limit in bytes
        """
        self.file_repo = file_repository
        self.blob_store = blob_store
        self.max_file_size = max_file_size

    def validate_upload(self, content: bytes, filename: str, mime_type: str) -> FileFormat:
        """
        Check an upload against the size limit and the allowed MIME types.

        Returns:
            Format derived from the MIME type

        Raises:
            InvalidFileRequestError: If the content or name is empty
            FileTooLargeError: If the content exceeds the size limit
            UnsupportedFileTypeError: If the MIME type is not allowed
        """
        if not filename or not filename.strip():
            raise InvalidFileRequestError("No file name provided")
        if not content:
            raise InvalidFileRequestError("File content is empty")
        if len(content) > self.max_file_size:
            raise FileTooLargeError(
                f"File size {len(content)} exceeds limit of {self.max_file_size} bytes"
            )
        return FileFormat.from_mime_type(mime_type)

    def store_upload(
        self,
        owner_id: str,
        content: bytes,
        filename: str,
        mime_type: str,
    ) -> StoredFile:
        """
        Validate and upload content, returning an unsaved StoredFile.

        Call register() to persist the returned entity.

        Raises:
            StorageError: If the blob store upload fails
        """
        file_format = self.validate_upload(content, filename, mime_type)

        blob = self.blob_store.upload(content, filename, mime_type)
        logger.info(f"Uploaded {filename} ({len(content)} bytes) as asset {blob.asset_id}")

        return StoredFile.create(
            owner_id=owner_id,
            name=filename,
            size=len(content),
            format=str(file_format),
            mime_type=mime_type,
            remote_asset_id=blob.asset_id,
            url=blob.url,
        )

    def register(self, file: StoredFile) -> StoredFile:
        """
        Persist a freshly uploaded file.

        If the metadata cannot be saved the uploaded content is removed so
        the remote store does not keep orphaned assets.

        Raises:
            StorageError: If the metadata could not be saved
        """
        if not self.file_repo.save(file):
            self._discard_blob(file.remote_asset_id)
            raise StorageError(f"Failed to save metadata for file {file.id}")
        return file

    def save(self, file: StoredFile) -> StoredFile:
        """Persist changes to an existing file."""
        if not self.file_repo.save(file):
            raise StorageError(f"Failed to save metadata for file {file.id}")
        return file

    def record_thumbnail(self, file: StoredFile) -> Optional[StoredFile]:
        """
        Copy a file's thumbnail onto its latest stored version and save it.

        Other fields of the stored version are kept, so a rename made while
        a conversion was running is not lost. A stored converted thumbnail
        is never replaced by a fallback.

        Returns:
            Saved file, or None if the file was deleted or trashed meanwhile
        """
        if not file.has_thumbnail():
            return None

        current = self.file_repo.get(file.id)
        if current is None or current.is_deleted:
            logger.info(f"File {file.id} went away before its thumbnail was stored")
            return None

        if file.thumbnail_is_fallback:
            if not current.apply_fallback_thumbnail(file.thumbnail_url):
                return current
        else:
            current.apply_converted_thumbnail(file.thumbnail_asset_id, file.thumbnail_url)
        return self.save(current)

    def get_owned_file(
        self,
        file_id: str,
        owner_id: str,
        include_deleted: bool = False,
    ) -> StoredFile:
        """
        Retrieve a file owned by owner_id.

        Raises:
            StoredFileNotFoundError: If missing, not owned, or trashed while
                include_deleted is False
        """
        file = self.file_repo.get_owned(file_id, owner_id)
        if file is None or (file.is_deleted and not include_deleted):
            raise StoredFileNotFoundError(f"File not found: {file_id}")
        return file

    def open_content(self, file_id: str, owner_id: str) -> Tuple[StoredFile, Iterator[bytes]]:
        """
        Open a live file's content for reading.

        Raises:
            StoredFileNotFoundError: If missing, not owned or trashed
            StorageError: If the content cannot be fetched
        """
        file = self.get_owned_file(file_id, owner_id)
        return file, self.blob_store.open_stream(file.url)

    def list_files(
        self,
        owner_id: str,
        page: Optional[PageRequest] = None,
        search: Optional[str] = None,
        file_format: Optional[str] = None,
    ) -> PageResult[StoredFile]:
        """List an owner's live files, newest first."""
        return self.file_repo.find_by_owner(
            owner_id,
            page or PageRequest(),
            deleted=False,
            search=search.strip() if search and search.strip() else None,
            file_format=file_format.lower() if file_format else None,
        )

    def list_trash(self, owner_id: str, page: Optional[PageRequest] = None) -> PageResult[StoredFile]:
        """List an owner's trashed files."""
        return self.file_repo.find_by_owner(owner_id, page or PageRequest(), deleted=True)

    def rename(self, file_id: str, owner_id: str, new_name: str) -> StoredFile:
        file = self.get_owned_file(file_id, owner_id)
        file.rename(new_name)
        return self.save(file)

    def trash(self, file_id: str, owner_id: str) -> StoredFile:
        """Soft delete a live file."""
        file = self.get_owned_file(file_id, owner_id)
        file.trash()
        return self.save(file)

    def restore(self, file_id: str, owner_id: str) -> StoredFile:
        """
        Restore a trashed file.

        Raises:
            StoredFileNotFoundError: If the file is not in the owner's trash
        """
        file = self.get_owned_file(file_id, owner_id, include_deleted=True)
        if not file.is_deleted:
            raise StoredFileNotFoundError(f"File is not in trash: {file_id}")
        file.restore()
        return self.save(file)

    def delete_permanently(self, file_id: str, owner_id: str) -> StoredFile:
        """
        Remove a file's content and metadata.

        Works on live and trashed files.
        """
        file = self.get_owned_file(file_id, owner_id, include_deleted=True)
        self._remove(file)
        return file

    def purge_trash(self, retention_days: int, now: Optional[datetime] = None) -> List[StoredFile]:
        """
        Permanently delete files trashed longer than the retention period.

        Failures on individual files are logged and the purge continues.

        Returns:
            Files that were purged
        """
        cutoff = (now or datetime.utcnow()) - timedelta(days=retention_days)
        purged = []

        for file in self.file_repo.find_trashed_before(cutoff):
            try:
                self._remove(file)
                purged.append(file)
            except StorageError as e:
                logger.error(f"Error purging trashed file {file.id}: {e}")

        if purged:
            logger.info(f"Purged {len(purged)} files trashed before {cutoff.isoformat()}")
        return purged

    def _remove(self, file: StoredFile) -> None:
        self.blob_store.delete(file.remote_asset_id)
        if file.thumbnail_asset_id and file.thumbnail_asset_id != file.remote_asset_id:
            self._discard_blob(file.thumbnail_asset_id)
        self.file_repo.delete(file.id)
        logger.info(f"Deleted file {file.id} and asset {file.remote_asset_id}")

    def _discard_blob(self, asset_id: str) -> None:
        try:
            self.blob_store.delete(asset_id)
        except StorageError as e:
            logger.warning(f"Could not delete asset {asset_id}: {e}")
