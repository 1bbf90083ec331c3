"""
Sharing Domain Services

Share link lifecycle: idempotent creation, partial update, revocation and
quota-counted downloads.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from ..errors import (
    DownloadNotAllowedError,
    PasswordNotSetError,
    PasswordRequiredError,
    QuotaExceededError,
    ShareNotFoundError,
    StoredFileNotFoundError,
)
from ..file_storage.entities import StoredFile
from ..file_storage.repositories import FileRepository
from .entities import ShareLink
from .passwords import SharePasswordHasher
from .policy import AccessPolicyEvaluator
from .repositories import ShareLinkRepository
from .value_objects import (
    UNSET,
    AccessDecision,
    ShareDefaults,
    ShareLinkPatch,
    ShareToken,
    expiry_from_days,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SharedFileAccess:
    """A share link that passed evaluation, its file, and the decision."""
    link: ShareLink
    file: StoredFile
    decision: AccessDecision


class ShareLinkManager:
    """
    Domain service for share link management and public access.

    Links that do not exist, are inactive, or belong to another owner are
    reported identically through ShareNotFoundError.
    """

    def __init__(
        self,
        share_repository: ShareLinkRepository,
        file_repository: FileRepository,
        evaluator: AccessPolicyEvaluator,
        hasher: SharePasswordHasher,
    ):
        self.share_repo = share_repository
        self.file_repo = file_repository
        self.evaluator = evaluator
        self.hasher = hasher

    # ------------------------------------------------------------------
    # Owner operations
    # ------------------------------------------------------------------

    def get_or_create(
        self,
        file_id: str,
        owner_id: str,
        defaults: Optional[ShareDefaults] = None,
    ) -> Tuple[ShareLink, bool]:
        """
        Return the active link for a file, minting one if none exists.

        An existing link is returned unchanged; defaults only apply to a
        newly minted link.

        Returns:
            Tuple of (link, created)

        Raises:
            StoredFileNotFoundError: If the caller does not own a live file
                with this id
        """
        existing = self.share_repo.get_active_for(file_id, owner_id)
        if existing is not None:
            return existing, False

        file = self.file_repo.get_owned(file_id, owner_id)
        if file is None or file.is_deleted:
            raise StoredFileNotFoundError(f"File not found: {file_id}")

        defaults = defaults or ShareDefaults()
        link = ShareLink.create(
            file_id=file_id,
            owner_id=owner_id,
            can_view=defaults.can_view,
            can_download=defaults.can_download,
            password_hash=self.hasher.hash(defaults.password) if defaults.password else None,
            expires_at=expiry_from_days(defaults.expires_in_days),
            max_downloads=defaults.max_downloads,
        )

        stored, created = self.share_repo.create_if_absent(link)
        if created:
            logger.info(f"Created share link {stored.id} for file {file_id}")
        else:
            logger.info(f"Concurrent share request for file {file_id} resolved to {stored.id}")
        return stored, created

    def update(
        self,
        share_id: str,
        owner_id: str,
        patch: ShareLinkPatch,
        now: Optional[datetime] = None,
    ) -> ShareLink:
        """
        Apply a partial update to an owner's active link.

        Raises:
            ShareNotFoundError: If the link is missing, inactive or not owned
        """
        link = self._get_managed(share_id, owner_id)
        now = now or datetime.utcnow()

        if patch.can_view is not UNSET:
            link.can_view = patch.can_view
        if patch.can_download is not UNSET:
            link.can_download = patch.can_download
        if patch.remove_password:
            link.password_hash = None
        elif patch.password is not UNSET and patch.password:
            link.password_hash = self.hasher.hash(patch.password)
        if patch.expires_in_days is not UNSET:
            link.expires_at = expiry_from_days(patch.expires_in_days, now)
        if patch.max_downloads is not UNSET:
            link.max_downloads = patch.max_downloads
        link.updated_at = now

        if not self.share_repo.update_settings(link):
            raise ShareNotFoundError(f"Share link not found: {share_id}")

        logger.info(f"Updated share link {share_id}: {', '.join(patch.changed_fields()) or 'no changes'}")
        return self.share_repo.get(share_id) or link

    def revoke(self, share_id: str, owner_id: str) -> ShareLink:
        """
        Deactivate an owner's link.

        Raises:
            ShareNotFoundError: If the link is missing, inactive or not owned
        """
        link = self._get_managed(share_id, owner_id)
        if not self.share_repo.deactivate(share_id):
            raise ShareNotFoundError(f"Share link not found: {share_id}")
        link.is_active = False
        logger.info(f"Revoked share link {share_id}")
        return link

    def list_for_owner(self, owner_id: str) -> List[ShareLink]:
        return self.share_repo.find_active_by_owner(owner_id)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def resolve(
        self,
        share_token: str,
        password: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SharedFileAccess:
        """
        Evaluate a public read of a share link.

        Returns:
            SharedFileAccess whose decision is GRANTED or PASSWORD_REQUIRED
        """
        link = self._find_by_token(share_token)
        decision = self.evaluator.evaluate(link, password, now)
        return SharedFileAccess(link, self._shared_file(link), decision)

    def verify_password(
        self,
        share_token: str,
        password: Optional[str],
        now: Optional[datetime] = None,
    ) -> SharedFileAccess:
        """
        Check a visitor's password against a protected link.

        The blocking gates run before the password checks, so an expired or
        used-up link reports that rather than a password problem.

        Raises:
            ShareNotFoundError: If the link is missing or inactive
            ShareExpiredError: If the link has expired
            QuotaExceededError: If the download limit is used up
            PasswordNotSetError: If the link has no password
            PasswordRequiredError: If no password was supplied
            PasswordIncorrectError: If the password does not match
        """
        link = self._find_by_token(share_token)
        self.evaluator.evaluate(link, None, now)
        if not link.is_password_protected:
            raise PasswordNotSetError(f"Share link {link.id} is not password protected")
        if not password:
            raise PasswordRequiredError("Password is required")

        decision = self.evaluator.evaluate(link, password, now)
        return SharedFileAccess(link, self._shared_file(link), decision)

    def record_download(
        self,
        share_token: str,
        password: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> SharedFileAccess:
        """
        Count a download through a share link.

        The link is evaluated, then the counter is advanced with a single
        conditional update. A request that loses the race for the last
        download gets QuotaExceededError.

        Raises:
            ShareNotFoundError, ShareExpiredError, QuotaExceededError,
            PasswordRequiredError, PasswordIncorrectError,
            DownloadNotAllowedError
        """
        link = self._find_by_token(share_token)
        decision = self.evaluator.evaluate(link, password, now)

        if not decision.is_granted:
            raise PasswordRequiredError(f"Share link {link.id} requires a password to download")
        if not decision.can_download:
            raise DownloadNotAllowedError(f"Downloads are disabled for share link {link.id}")

        file = self._shared_file(link)

        new_count = self.share_repo.increment_download_count(link.id)
        if new_count is None:
            # The link changed between evaluation and increment
            self.evaluator.evaluate(self.share_repo.get(link.id), password, now)
            raise QuotaExceededError(f"Share link {link.id} reached its download limit")

        link.download_count = new_count
        logger.info(f"Download {new_count} recorded for share link {link.id}")
        return SharedFileAccess(link, file, decision)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _find_by_token(self, share_token: str) -> Optional[ShareLink]:
        if not ShareToken.is_well_formed(share_token):
            return None
        return self.share_repo.get_by_token(share_token)

    def _get_managed(self, share_id: str, owner_id: str) -> ShareLink:
        link = self.share_repo.get(share_id)
        if link is None or not link.is_active or not link.is_owned_by(owner_id):
            raise ShareNotFoundError(f"Share link not found: {share_id}")
        return link

    def _shared_file(self, link: ShareLink) -> StoredFile:
        file = self.file_repo.get(link.file_id)
        if file is None or file.is_deleted:
            raise ShareNotFoundError(f"File behind share link {link.id} is unavailable")
        return file
