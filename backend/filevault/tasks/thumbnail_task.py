"""
Thumbnail Retry Task

Celery beat task that retries conversion for PDFs whose thumbnail is a
fallback preview or missing.
"""

import logging
from typing import Optional

from celery_app import celery_app
from flask import current_app

from ..application.thumbnail_service import ThumbnailService
from ..config.uploadcare_config import ConversionConfig

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, name="filevault.tasks.retry_pdf_thumbnails")
def retry_pdf_thumbnails(self, limit: Optional[int] = None):
    """
    Re-run conversion for a batch of PDFs without a converted thumbnail.

    Files whose retry fails again keep their fallback preview; a converted
    thumbnail is never cleared.

    Args:
        limit: Batch size, defaults to THUMBNAIL_RETRY_BATCH_SIZE

    Returns:
        dict: Number of files per thumbnail outcome
    """
    if limit is None:
        limit = ConversionConfig().retry_batch_size

    logger.info(f"Starting thumbnail retry for up to {limit} files")
    thumbnail_service = current_app.container.resolve(ThumbnailService)
    counts = thumbnail_service.retry_fallback_thumbnails(limit)
    logger.info(
        f"Thumbnail retry completed - Converted: {counts['converted']}, "
        f"Still fallback: {counts['fallback']}, Without thumbnail: {counts['none']}"
    )
    return counts
