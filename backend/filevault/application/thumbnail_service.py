"""
Thumbnail Service

Application service that produces first-page thumbnails for PDF files.
Runs the readiness gate and the conversion orchestrator, falls back to a
preview of the original asset when conversion fails, and stores the
outcome on the file.
"""

import logging
import threading
from datetime import datetime
from typing import Dict, Optional, Tuple

from ..domain.conversion.gateway import IAssetGateway
from ..domain.conversion.readiness import ReadinessGate
from ..domain.conversion.services import ConversionOrchestrator
from ..domain.errors import (
    ConversionError,
    ErrorCategory,
    FileNotPdfError,
    PollingCancelledError,
    ReadinessTimeoutError,
    StorageError,
)
from ..domain.events import (
    ThumbnailFallbackEvent,
    ThumbnailGeneratedEvent,
    ThumbnailSkippedEvent,
)
from ..domain.file_storage.entities import StoredFile
from ..domain.file_storage.services import FileManager
from .event_publisher import EventPublisher
from .thumbnail_result import ThumbnailResult, ThumbnailStatus

logger = logging.getLogger(__name__)


class ThumbnailService:
    """
    Orchestrates thumbnail generation for stored PDFs.

    Workflow:
    1. Wait for the stored asset to become ready (best effort; a timeout
       is logged and conversion is attempted anyway)
    2. Convert page 1 into an image and point the thumbnail at it
    3. On any conversion failure or cancellation, use a preview URL of the
       original asset instead
    4. If even the fallback cannot be built, leave the file without a
       thumbnail

    Thumbnail problems never propagate to the caller as exceptions.
    """

    def __init__(
        self,
        gateway: IAssetGateway,
        readiness_gate: ReadinessGate,
        orchestrator: ConversionOrchestrator,
        file_manager: FileManager,
        event_publisher: Optional[EventPublisher] = None,
        readiness_timeout: float = 30.0,
        readiness_interval: float = 1.0,
        preview_size: int = 300,
    ):
        """
        Initialize ThumbnailService.

        Args:
            gateway: Remote asset service adapter, used for URLs
            readiness_gate: Waits for uploaded assets to become ready
            orchestrator: Runs the conversion job
            file_manager: Domain service used to store results
            event_publisher: Optional publisher for thumbnail events
            readiness_timeout: Readiness wait budget in seconds
            readiness_interval: Delay between readiness checks in seconds
            preview_size: Edge length of the fallback preview in pixels
        """
        self.gateway = gateway
        self.readiness_gate = readiness_gate
        self.orchestrator = orchestrator
        self.file_manager = file_manager
        self.event_publisher = event_publisher
        self.readiness_timeout = readiness_timeout
        self.readiness_interval = readiness_interval
        self.preview_size = preview_size

    def attach_thumbnail(
        self,
        file: StoredFile,
        cancel_event: Optional[threading.Event] = None,
    ) -> ThumbnailResult:
        """
        Generate a thumbnail and set it on the file in memory.

        The file is not saved; see generate_and_store.

        Returns:
            ThumbnailResult describing the outcome
        """
        if not file.is_pdf:
            return ThumbnailResult(ThumbnailStatus.NOT_PDF)

        if file.has_converted_thumbnail():
            return ThumbnailResult(ThumbnailStatus.EXISTING, thumbnail_url=file.thumbnail_url)

        try:
            self.readiness_gate.await_ready(
                file.remote_asset_id,
                timeout=self.readiness_timeout,
                poll_interval=self.readiness_interval,
                cancel_event=cancel_event,
            )
        except ReadinessTimeoutError as e:
            logger.warning(f"Proceeding with conversion of {file.id} although asset is not ready: {e}")
        except PollingCancelledError as e:
            return self._apply_fallback(file, e, ErrorCategory.CONVERSION_FAILED)

        try:
            asset_id = self.orchestrator.convert_first_page_to_image(
                file.remote_asset_id, cancel_event=cancel_event
            )
        except ConversionError as e:
            logger.warning(f"Thumbnail conversion failed for file {file.id}: {e}")
            return self._apply_fallback(file, e, e.category)
        except PollingCancelledError as e:
            logger.info(f"Thumbnail conversion cancelled for file {file.id}")
            return self._apply_fallback(file, e, ErrorCategory.CONVERSION_FAILED)

        url = self.gateway.content_url(asset_id)
        file.apply_converted_thumbnail(asset_id, url)
        self._publish(ThumbnailGeneratedEvent(
            aggregate_id=file.id,
            occurred_at=datetime.utcnow(),
            thumbnail_asset_id=asset_id,
            thumbnail_url=url,
        ))
        return ThumbnailResult(ThumbnailStatus.CONVERTED, thumbnail_url=url)

    def generate_and_store(
        self,
        file: StoredFile,
        cancel_event: Optional[threading.Event] = None,
    ) -> ThumbnailResult:
        """Attach a thumbnail and save it on the stored file when it changed."""
        result = self.attach_thumbnail(file, cancel_event)
        if result.changed:
            try:
                stored = self.file_manager.record_thumbnail(file)
            except StorageError:
                file.clear_thumbnail()
                raise
            if stored is not None:
                file.thumbnail_asset_id = stored.thumbnail_asset_id
                file.thumbnail_url = stored.thumbnail_url
                file.thumbnail_is_fallback = stored.thumbnail_is_fallback
        return result

    def refresh_thumbnail(self, file_id: str, owner_id: str) -> Tuple[StoredFile, ThumbnailResult]:
        """
        Regenerate the thumbnail of an owner's PDF on demand.

        Raises:
            StoredFileNotFoundError: If the owner has no such live file
            FileNotPdfError: If the file is not a PDF
        """
        file = self.file_manager.get_owned_file(file_id, owner_id)
        if not file.is_pdf:
            raise FileNotPdfError(f"File {file_id} is a {file.format}, not a pdf")
        return file, self.generate_and_store(file)

    def retry_fallback_thumbnails(self, limit: int = 20) -> Dict[str, int]:
        """
        Re-run conversion for PDFs that only have a fallback or no thumbnail.

        A converted thumbnail is never cleared by a failed retry.

        Returns:
            Counts per outcome
        """
        counts = {status.value: 0 for status in ThumbnailStatus}
        for file in self.file_manager.file_repo.find_fallback_thumbnails(limit):
            result = self.generate_and_store(file)
            counts[result.status.value] += 1

        logger.info(f"Thumbnail retry finished: {counts}")
        return counts

    def _apply_fallback(
        self,
        file: StoredFile,
        error: Exception,
        category: ErrorCategory,
    ) -> ThumbnailResult:
        reason = str(error)
        try:
            preview = self.gateway.preview_url(file.remote_asset_id, self.preview_size)
            applied = file.apply_fallback_thumbnail(preview)
        except Exception as fallback_error:
            logger.error(
                f"Fallback thumbnail failed for file {file.id}: {fallback_error}",
                exc_info=True,
            )
            self._publish(ThumbnailSkippedEvent(
                aggregate_id=file.id,
                occurred_at=datetime.utcnow(),
                reason=reason,
            ))
            return ThumbnailResult(
                ThumbnailStatus.NONE, error_message=reason, error_category=category
            )

        if not applied:
            return ThumbnailResult(ThumbnailStatus.EXISTING, thumbnail_url=file.thumbnail_url)

        self._publish(ThumbnailFallbackEvent(
            aggregate_id=file.id,
            occurred_at=datetime.utcnow(),
            reason=reason,
        ))
        return ThumbnailResult(
            ThumbnailStatus.FALLBACK,
            thumbnail_url=preview,
            error_message=reason,
            error_category=category,
        )

    def _publish(self, event) -> None:
        if self.event_publisher is not None:
            self.event_publisher.publish(event)
