"""
Logging Event Handler

Infrastructure event handler for logging domain events.
Domain layer remains unaware of logging infrastructure.
"""

import logging

from ...domain.events import (
    DomainEvent,
    FileDeletedEvent,
    FileRestoredEvent,
    FileTrashedEvent,
    FileUploadedEvent,
    SharedFileDownloadedEvent,
    ShareLinkCreatedEvent,
    ShareLinkRevokedEvent,
    ShareLinkUpdatedEvent,
    SharePasswordFailedEvent,
    ThumbnailFallbackEvent,
    ThumbnailGeneratedEvent,
    ThumbnailSkippedEvent,
)


class LoggingEventHandler:
    """
    Infrastructure event handler for logging domain events.

    Share tokens and password material never reach the log; events carry
    only ids.
    """

    def __init__(self, logger: logging.Logger):
        """
        Initialize with logger instance.

        Args:
            logger: Python logging.Logger instance
        """
        self.logger = logger

    def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event by logging it.

        Args:
            event: Domain event to log
        """
        try:
            if isinstance(event, FileUploadedEvent):
                self.logger.info(
                    f"File uploaded: file_id={event.aggregate_id}, owner={event.owner_id}, "
                    f"name={event.name}, size={event.size}, mime_type={event.mime_type}"
                )
            elif isinstance(event, FileTrashedEvent):
                self.logger.info(f"File trashed: file_id={event.aggregate_id}, owner={event.owner_id}")
            elif isinstance(event, FileRestoredEvent):
                self.logger.info(f"File restored: file_id={event.aggregate_id}, owner={event.owner_id}")
            elif isinstance(event, FileDeletedEvent):
                self.logger.info(
                    f"File deleted: file_id={event.aggregate_id}, owner={event.owner_id}, "
                    f"reason={event.reason}"
                )
            elif isinstance(event, ThumbnailGeneratedEvent):
                self._handle_thumbnail_generated(event)
            elif isinstance(event, ThumbnailFallbackEvent):
                self.logger.warning(
                    f"Thumbnail fallback used: file_id={event.aggregate_id}, reason={event.reason}"
                )
            elif isinstance(event, ThumbnailSkippedEvent):
                self.logger.warning(
                    f"No thumbnail stored: file_id={event.aggregate_id}, reason={event.reason}"
                )
            elif isinstance(event, ShareLinkCreatedEvent):
                self.logger.info(
                    f"Share link created: share_id={event.aggregate_id}, "
                    f"file_id={event.file_id}, owner={event.owner_id}"
                )
            elif isinstance(event, ShareLinkUpdatedEvent):
                self.logger.info(
                    f"Share link updated: share_id={event.aggregate_id}, "
                    f"fields={','.join(event.changed_fields)}"
                )
            elif isinstance(event, ShareLinkRevokedEvent):
                self.logger.info(
                    f"Share link revoked: share_id={event.aggregate_id}, file_id={event.file_id}"
                )
            elif isinstance(event, SharedFileDownloadedEvent):
                self._handle_shared_download(event)
            elif isinstance(event, SharePasswordFailedEvent):
                self.logger.warning(f"Wrong share password: share_id={event.aggregate_id}")
            else:
                self.logger.debug(
                    f"Unhandled event: {event.__class__.__name__} "
                    f"(aggregate_id={event.aggregate_id})"
                )
        except Exception as e:
            # Log handler errors but don't fail the operation
            self.logger.error(
                f"Error in logging event handler for {event.__class__.__name__}: {e}",
                exc_info=True,
            )

    def _handle_thumbnail_generated(self, event: ThumbnailGeneratedEvent) -> None:
        self.logger.info(
            f"Thumbnail generated: file_id={event.aggregate_id}, "
            f"asset={event.thumbnail_asset_id}"
        )

    def _handle_shared_download(self, event: SharedFileDownloadedEvent) -> None:
        limit = event.max_downloads if event.max_downloads is not None else "unlimited"
        self.logger.info(
            f"Shared download: share_id={event.aggregate_id}, "
            f"count={event.download_count}/{limit}"
        )
